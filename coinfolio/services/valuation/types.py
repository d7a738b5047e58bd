# coinfolio/services/valuation/types.py
"""
Internal data types for the valuation engine.

These dataclasses are produced by the calculators. They are NOT Pydantic
schemas - those are defined in coinfolio/schemas/valuation.py for
serialization across process boundaries.

Design Principles:
- Immutable where possible (frozen=True for value objects)
- Use Decimal for ALL financial values (never float)
- No rounding: quantizing is a display concern
- Optional fields use None, not sentinel values
- Derived only: nothing here is persisted or treated as authoritative

Type Hierarchy:
    Lot                 - Remaining slice of a buy (working state of the matcher)
    AssetMetrics        - FIFO result for one asset
    AssetValuation      - AssetMetrics joined with a current price
    AssetFailure        - An asset excluded from portfolio totals
    PortfolioMetrics    - Active assets + portfolio totals
    TransactionDetails  - Cost basis / current value of a single transaction
    HistoryPoint        - One day of the value curve
    PortfolioHistory    - Value curve result
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from coinfolio.models import FillPolicy
from coinfolio.services.constants import PERCENT, ZERO
from coinfolio.utils.date_utils import day_start


# =============================================================================
# LOTS
# =============================================================================

@dataclass
class Lot:
    """
    Remaining, unconsumed slice of a past buy.

    Mutable during matching: `remaining` only ever shrinks as sells
    consume it, and the lot is retired once it reaches zero.

    Attributes:
        remaining: Units still unmatched
        price: Unit price paid in the buy
        timestamp: Event time of the owning buy (FIFO order key)
    """

    remaining: Decimal
    price: Decimal
    timestamp: datetime

    @property
    def cost(self) -> Decimal:
        """Fiat cost of the units still in this lot."""
        return self.remaining * self.price


# =============================================================================
# ASSET METRICS
# =============================================================================

@dataclass(frozen=True)
class AssetMetrics:
    """
    FIFO valuation of one asset, recomputed from scratch on every query.

    Attributes:
        held_quantity: Units currently held (buys - sells)
        invested_fiat: Cost of the units still held (sum over remaining lots)
        avg_buy_price: invested_fiat / held_quantity (None when nothing is held)
        realized_pnl: Sum over matched sell/lot pairs of used * (sell - lot price)
        realized_cost_basis: Sum of the matched lot costs
        unrealized_pnl: held_quantity * (current price - avg_buy_price),
                        0 when nothing is held or the price is unknown
    """

    held_quantity: Decimal
    invested_fiat: Decimal
    avg_buy_price: Decimal | None
    realized_pnl: Decimal
    realized_cost_basis: Decimal
    unrealized_pnl: Decimal

    @property
    def has_position(self) -> bool:
        """True if there are units currently held."""
        return self.held_quantity > ZERO

    @property
    def total_pnl(self) -> Decimal:
        return self.realized_pnl + self.unrealized_pnl

    @property
    def realized_pnl_percentage(self) -> Decimal | None:
        """
        Realized P&L as a percentage of the cost of the units sold.

        Returns None if nothing was sold (division undefined).
        """
        if self.realized_cost_basis <= ZERO:
            return None
        return self.realized_pnl / self.realized_cost_basis * PERCENT


@dataclass(frozen=True)
class AssetValuation:
    """
    AssetMetrics joined with the current price of the asset.

    Attributes:
        symbol: Asset symbol
        metrics: FIFO metrics for the asset
        current_price: Price used for valuation (None if unknown)
        current_value: held_quantity * current_price (0 if price unknown)
        price_source: "live" | "cached" | "unavailable"
        transaction_count: Number of transactions behind the metrics
        first_transaction_at: Event time of the oldest transaction
    """

    symbol: str
    metrics: AssetMetrics
    current_price: Decimal | None
    current_value: Decimal
    price_source: str = "live"
    transaction_count: int = 0
    first_transaction_at: datetime | None = None

    @property
    def has_price(self) -> bool:
        return self.current_price is not None


@dataclass(frozen=True)
class AssetFailure:
    """
    An asset whose computation failed and was left out of portfolio totals.

    Attributes:
        symbol: Asset symbol
        message: Description of the failure (e.g. "sold more than owned")
    """

    symbol: str
    message: str


# =============================================================================
# PORTFOLIO METRICS
# =============================================================================

@dataclass
class PortfolioMetrics:
    """
    Portfolio-level valuation.

    Attributes:
        assets: Active assets (held_quantity > 0), by descending current value
        total_value: Sum of active current values
        total_invested: Sum of active invested fiat
        total_unrealized_pnl: Sum of active unrealized P&L
        total_realized_pnl: Sum of realized P&L over ALL assets, including
                            fully exited ones
        total_realized_cost_basis: Sum of realized cost basis over ALL assets
        failures: Assets excluded because their history is inconsistent
        warnings: Data quality notes (missing prices, ...)

    Note:
        Failed assets contribute to none of the totals.
    """

    assets: list[AssetValuation]
    total_value: Decimal
    total_invested: Decimal
    total_unrealized_pnl: Decimal
    total_realized_pnl: Decimal
    total_realized_cost_basis: Decimal
    failures: list[AssetFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def total_pnl(self) -> Decimal:
        """Unrealized (held) + realized (sold) P&L."""
        return self.total_unrealized_pnl + self.total_realized_pnl

    @property
    def total_cost_basis(self) -> Decimal:
        """Capital behind total_pnl: still invested + cost of what was sold."""
        return self.total_invested + self.total_realized_cost_basis

    @property
    def total_pnl_percentage(self) -> Decimal | None:
        """
        Total P&L as a percentage of total cost basis.

        Returns None when the cost basis is zero (never NaN or Infinity).
        """
        cost_basis = self.total_cost_basis
        if cost_basis <= ZERO:
            return None
        return self.total_pnl / cost_basis * PERCENT

    @property
    def has_complete_data(self) -> bool:
        """True if no asset had to be excluded."""
        return not self.failures


# =============================================================================
# TRANSACTION DETAILS
# =============================================================================

@dataclass(frozen=True)
class TransactionDetails:
    """
    Per-transaction figures for a detail view.

    Attributes:
        cost_basis: |amount| * price + fee for BUYs, None for SELLs
        current_value: |amount| * current price, None if price unknown
    """

    cost_basis: Decimal | None
    current_value: Decimal | None


# =============================================================================
# HISTORY (Time series for charts)
# =============================================================================

@dataclass(frozen=True)
class HistoryPoint:
    """
    A single day of the reconstructed portfolio value curve.

    Attributes:
        date: The UTC day this point stands for
        value: Portfolio value at the end of that day (never negative,
               except where a caller-supplied live value says otherwise)
    """

    date: date
    value: Decimal

    @property
    def timestamp(self) -> datetime:
        """UTC midnight instant identifying the day."""
        return day_start(self.date)


@dataclass
class PortfolioHistory:
    """
    Portfolio value curve.

    Attributes:
        start_date: First day in the series
        end_date: Last day in the series
        window_days: Number of days covered (== len(data) unless downsampled)
        fill_policy: How days without a price were filled
        data: History points, ascending by day
        warnings: Data gaps worth surfacing (assets never priced, ...)
    """

    start_date: date
    end_date: date
    window_days: int
    fill_policy: FillPolicy
    data: list[HistoryPoint]
    warnings: list[str] = field(default_factory=list)

    @property
    def total_points(self) -> int:
        """Number of data points in the series."""
        return len(self.data)

    @property
    def latest_value(self) -> Decimal | None:
        return self.data[-1].value if self.data else None
