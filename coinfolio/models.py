# coinfolio/models.py
"""
Shared enumerations for transaction records and valuation options.

These are plain str-backed enums so they serialize to their value in
JSON payloads and can be read straight from environment variables.
"""
import enum


class TransactionType(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"


class TransactionSource(str, enum.Enum):
    """Where a transaction record originated."""
    MANUAL = "MANUAL"
    WALLET = "WALLET"
    EXCHANGE = "EXCHANGE"


class FillPolicy(str, enum.Enum):
    """
    How history reconstruction prices a day that has no price point.

    FORWARD_FILL reuses the last known price. INTERPOLATE draws a straight
    line between the known prices on either side of a gap and falls back
    to forward fill after the last known price.
    """
    FORWARD_FILL = "forward_fill"
    INTERPOLATE = "interpolate"


class HistoryPeriod(str, enum.Enum):
    """Chart periods offered for the portfolio value curve."""
    WEEK = "7D"
    MONTH = "30D"
    QUARTER = "90D"
    YEAR = "1Y"

    @property
    def days(self) -> int:
        """Window length in days."""
        return _PERIOD_DAYS[self]

    @property
    def point_interval(self) -> int:
        """Keep every n-th day when plotting this period."""
        return _PERIOD_POINT_INTERVAL[self]


_PERIOD_DAYS = {
    HistoryPeriod.WEEK: 7,
    HistoryPeriod.MONTH: 30,
    HistoryPeriod.QUARTER: 90,
    HistoryPeriod.YEAR: 365,
}

_PERIOD_POINT_INTERVAL = {
    HistoryPeriod.WEEK: 1,
    HistoryPeriod.MONTH: 1,
    HistoryPeriod.QUARTER: 3,
    HistoryPeriod.YEAR: 15,
}
