# coinfolio/services/valuation/history_calculator.py
"""
History Calculator for the portfolio value curve.

This calculator replays transactions against daily price series to
rebuild what the portfolio was worth at the end of each day:
1. Build the day range (window_days days ending today, UTC)
2. Resolve one price per asset per day, filling gaps per the fill policy
3. Walk the days in order, applying each asset's transactions as their
   day arrives, and sum holdings × price across assets

Design Principles:
- Rolling state: each transaction is applied exactly once, O(D × A + T)
- End-of-day bucketing: a transaction during a day counts in that day's close
- Graceful handling of missing prices (carry forward, never fail)
- Pure: no fetching, the caller passes every input
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal

from coinfolio.models import FillPolicy
from coinfolio.schemas.transactions import Transaction
from coinfolio.schemas.validators import normalize_asset_symbol
from coinfolio.services.constants import ZERO
from coinfolio.services.exceptions import InvalidWindowError
from coinfolio.services.valuation.calculators import group_by_symbol
from coinfolio.services.valuation.types import HistoryPoint, PortfolioHistory
from coinfolio.utils.date_utils import build_day_range, next_day_start, to_utc_day

logger = logging.getLogger(__name__)

DailyPrices = Mapping[str, Mapping[date, Decimal]]


class HistoryCalculator:
    """
    Reconstructs the portfolio value curve day by day.

    Key Insight:
        Holdings CHANGE over time as buys/sells occur. So we can't
        just take today's holdings and apply historical prices.
        Each asset keeps a pointer into its sorted transactions and a
        running quantity that advances as the days go by.

    Missing Prices:
        Price feeds are daily and have gaps (delistings, provider outages).
        A day without a price reuses the last known one (forward fill), or
        is interpolated between its neighbours, so gaps do not show up as
        spurious drops to zero.

    Attributes:
        _fill_policy: Default strategy for days without a price
    """

    def __init__(self, fill_policy: FillPolicy = FillPolicy.FORWARD_FILL) -> None:
        self._fill_policy = fill_policy

    def calculate(
            self,
            transactions: Iterable[Transaction],
            daily_prices: DailyPrices,
            window_days: int,
            today: date | None = None,
            current_value: Decimal | None = None,
            fill_policy: FillPolicy | None = None,
    ) -> PortfolioHistory:
        """
        Calculate the value curve for the given window.

        Args:
            transactions: All transactions of the portfolio, any order
            daily_prices: Price per symbol per UTC day
            window_days: Number of days in the curve (>= 1)
            today: Last day of the window (default: today in UTC)
            current_value: Live portfolio value; replaces the last point when positive
            fill_policy: Override of the calculator's default policy

        Returns:
            PortfolioHistory with exactly window_days points

        Raises:
            InvalidWindowError: If window_days < 1
        """
        if window_days < 1:
            raise InvalidWindowError(window_days)

        policy = fill_policy or self._fill_policy
        days = build_day_range(window_days, today)
        txns_by_symbol = group_by_symbol(transactions)
        prices = {
            normalize_asset_symbol(symbol): series
            for symbol, series in daily_prices.items()
        }

        warnings: list[str] = []
        resolved: dict[str, list[Decimal]] = {}
        for symbol in txns_by_symbol:
            series = prices.get(symbol) or {}
            if not series:
                warnings.append(f"No price history available for {symbol}")
            resolved[symbol] = self._resolve_prices(days, series, policy)

        data = self._calculate_history_rolling(days, txns_by_symbol, resolved)

        data = pin_live_value(data, current_value)

        logger.debug(
            f"Reconstructed {len(data)} days ({days[0]} to {days[-1]}) for "
            f"{len(txns_by_symbol)} assets using {policy.value}"
        )

        return PortfolioHistory(
            start_date=days[0],
            end_date=days[-1],
            window_days=window_days,
            fill_policy=policy,
            data=data,
            warnings=warnings,
        )

    def _calculate_history_rolling(
            self,
            days: list[date],
            txns_by_symbol: dict[str, list[Transaction]],
            resolved_prices: dict[str, list[Decimal]],
    ) -> list[HistoryPoint]:
        """
        Walk the days applying only NEW transactions since the previous day.

        Args:
            days: Days to generate points for (sorted)
            txns_by_symbol: Each asset's transactions, sorted by timestamp
            resolved_prices: Each asset's price per day, aligned with days

        Returns:
            List of HistoryPoint in chronological order
        """
        data_points: list[HistoryPoint] = []

        # Rolling state - mutated as the days advance
        txn_index = {symbol: 0 for symbol in txns_by_symbol}
        holdings = {symbol: ZERO for symbol in txns_by_symbol}

        for day_index, day in enumerate(days):
            cutoff = next_day_start(day)
            total = ZERO

            for symbol, txns in txns_by_symbol.items():
                # === PHASE 1: Apply every transaction up to the end of this day ===
                index = txn_index[symbol]
                holding = holdings[symbol]
                while index < len(txns) and txns[index].timestamp < cutoff:
                    holding += txns[index].amount
                    index += 1
                txn_index[symbol] = index
                holdings[symbol] = holding

                # === PHASE 2: Value the holding at the day's price ===
                total += holding * resolved_prices[symbol][day_index]

            data_points.append(HistoryPoint(date=day, value=max(total, ZERO)))

        return data_points

    # =========================================================================
    # PRICE RESOLUTION
    # =========================================================================

    def _resolve_prices(
            self,
            days: Sequence[date],
            series: Mapping[date, Decimal],
            policy: FillPolicy,
    ) -> list[Decimal]:
        """
        Resolve one price per day for a single asset.

        The carried price starts at the latest point before the window when
        the series has one, otherwise at zero.
        """
        carried = self._seed_price(days[0], series)
        resolved: list[Decimal] = []
        known: list[int] = []

        for index, day in enumerate(days):
            price = series.get(day)
            if price is not None:
                carried = price
                known.append(index)
            resolved.append(carried)

        if policy == FillPolicy.INTERPOLATE:
            self._interpolate_gaps(resolved, known)

        return resolved

    def _seed_price(self, first_day: date, series: Mapping[date, Decimal]) -> Decimal:
        """Latest price strictly before the window, or zero."""
        earlier = [day for day in series if day < first_day]
        if not earlier:
            return ZERO
        return series[max(earlier)]

    def _interpolate_gaps(self, resolved: list[Decimal], known: list[int]) -> None:
        """
        Replace interior gaps with a straight line between known prices.

        Mutates resolved in place. Leading and trailing gaps keep their
        forward-filled values.
        """
        for left, right in zip(known, known[1:]):
            span = right - left
            if span <= 1:
                continue
            start_price = resolved[left]
            step = (resolved[right] - start_price) / Decimal(span)
            for offset in range(1, span):
                resolved[left + offset] = start_price + step * offset

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def downsample(points: Sequence[HistoryPoint], step: int) -> list[HistoryPoint]:
        """
        Keep every step-th point, always including the final one.

        Used to thin long windows for charting (e.g. one point per 15 days
        over a year) without losing the live end of the curve.
        """
        if step <= 1 or not points:
            return list(points)
        sampled = list(points[::step])
        if sampled[-1] is not points[-1]:
            sampled.append(points[-1])
        return sampled


def pin_live_value(
        points: list[HistoryPoint],
        current_value: Decimal | None,
) -> list[HistoryPoint]:
    """
    Replace the last point's value with the live portfolio total.

    Only a positive live total is used. A zero total usually means the
    live prices are missing, and the priced end-of-day value is kept.
    """
    if current_value is None or current_value <= ZERO or not points:
        return points
    return [*points[:-1], HistoryPoint(date=points[-1].date, value=current_value)]


def build_daily_price_map(
        points: Iterable[tuple[datetime | date, Decimal | int | float | str]],
) -> dict[date, Decimal]:
    """
    Bucket raw (timestamp, price) points from a price feed into UTC days.

    When several points fall on the same day, the later one in the
    iteration wins.

    Returns:
        Dict mapping UTC day -> price
    """
    price_map: dict[date, Decimal] = {}
    for timestamp, price in points:
        value = price if isinstance(price, Decimal) else Decimal(str(price))
        price_map[to_utc_day(timestamp)] = value
    return price_map


def reconstruct_history(
        transactions: Iterable[Transaction],
        daily_prices: DailyPrices,
        window_days: int,
        today: date | None = None,
        current_value: Decimal | None = None,
        fill_policy: FillPolicy = FillPolicy.FORWARD_FILL,
) -> list[HistoryPoint]:
    """Value curve of window_days points, ascending by day."""
    return HistoryCalculator(fill_policy).calculate(
        transactions=transactions,
        daily_prices=daily_prices,
        window_days=window_days,
        today=today,
        current_value=current_value,
    ).data
