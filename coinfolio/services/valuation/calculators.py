# coinfolio/services/valuation/calculators.py
"""
Point-in-time valuation calculators.

Each calculator follows the Single Responsibility Principle:
- AssetMetricsCalculator: FIFO lot matching for one asset
- PortfolioCalculator: Groups transactions by asset and rolls up totals
- TransactionDetailsCalculator: Cost basis / current value of one transaction

Design Principles:
- Each calculator does ONE thing well
- Stateless (no instance state, pure functions)
- Receives all inputs explicitly, never mutates them
- Returns structured result objects
- Uses Decimal for ALL financial calculations, with no rounding

Usage:
    metrics = AssetMetricsCalculator().calculate(
        transactions=sorted_btc_transactions,
        current_price=Decimal("120000"),
    )

    portfolio = PortfolioCalculator().calculate(
        transactions=all_transactions,
        price_by_symbol={"BTC": Decimal("120000")},
    )
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from coinfolio.models import TransactionType
from coinfolio.schemas.transactions import Transaction
from coinfolio.schemas.validators import normalize_asset_symbol
from coinfolio.services.constants import (
    PRICE_SOURCE_LIVE,
    PRICE_SOURCE_UNAVAILABLE,
    ZERO,
)
from coinfolio.services.exceptions import (
    InsufficientHoldingsError,
    MixedAssetTransactionsError,
)
from coinfolio.services.valuation.types import (
    AssetFailure,
    AssetMetrics,
    AssetValuation,
    Lot,
    PortfolioMetrics,
    TransactionDetails,
)

logger = logging.getLogger(__name__)


# =============================================================================
# ORDERING HELPERS
# =============================================================================

def sort_by_timestamp(transactions: Iterable[Transaction]) -> list[Transaction]:
    """
    Return transactions ascending by event time.

    The sort is stable: transactions sharing a timestamp keep their
    given relative order.
    """
    return sorted(transactions, key=lambda txn: txn.timestamp)


def group_by_symbol(transactions: Iterable[Transaction]) -> dict[str, list[Transaction]]:
    """
    Group transactions by asset symbol, each group sorted by timestamp.

    Returns:
        Dict mapping symbol -> chronologically ordered transactions
    """
    grouped: dict[str, list[Transaction]] = {}
    for txn in transactions:
        grouped.setdefault(txn.asset_symbol, []).append(txn)
    return {symbol: sort_by_timestamp(txns) for symbol, txns in grouped.items()}


# =============================================================================
# FIFO LOT MATCHER
# =============================================================================

class AssetMetricsCalculator:
    """
    Calculates per-asset metrics by FIFO lot matching.

    Every BUY opens a lot. Every SELL consumes the oldest remaining lots
    first, crystallizing realized P&L against the exact lot prices it
    touched. What is left in the lots is the cost basis of the units
    still held.

    Preconditions:
        - transactions are sorted ascending by timestamp (not re-sorted here)
        - transactions all belong to one asset

    Raises:
        InsufficientHoldingsError: a SELL exceeds the quantity left in the lots
        MixedAssetTransactionsError: transactions span several assets
    """

    def calculate(
            self,
            transactions: Sequence[Transaction],
            current_price: Decimal | None,
    ) -> AssetMetrics:
        """
        Match sells against buy lots and derive the asset's metrics.

        Args:
            transactions: One asset's transactions, oldest first
            current_price: Current unit price (None if unknown)

        Returns:
            AssetMetrics for the asset
        """
        symbols = {txn.asset_symbol for txn in transactions}
        if len(symbols) > 1:
            raise MixedAssetTransactionsError(symbols)

        lots: deque[Lot] = deque()
        held_quantity = ZERO
        realized_pnl = ZERO
        realized_cost_basis = ZERO

        for txn in transactions:
            if txn.transaction_type == TransactionType.BUY:
                lots.append(Lot(
                    remaining=txn.amount,
                    price=txn.price_per_unit,
                    timestamp=txn.timestamp,
                ))
                held_quantity += txn.amount

            elif txn.transaction_type == TransactionType.SELL:
                to_sell = -txn.amount
                held_quantity -= to_sell

                while to_sell > ZERO and lots:
                    lot = lots[0]
                    used = min(lot.remaining, to_sell)

                    realized_pnl += used * (txn.price_per_unit - lot.price)
                    realized_cost_basis += used * lot.price

                    lot.remaining -= used
                    to_sell -= used

                    if lot.remaining == ZERO:
                        lots.popleft()

                if to_sell > ZERO:
                    raise InsufficientHoldingsError(
                        asset_symbol=txn.asset_symbol,
                        timestamp=txn.timestamp,
                        requested=-txn.amount,
                        available=-txn.amount - to_sell,
                    )

        invested_fiat = sum((lot.cost for lot in lots), ZERO)

        if held_quantity > ZERO:
            avg_buy_price: Decimal | None = invested_fiat / held_quantity
        else:
            avg_buy_price = None

        # Explicit zero branch: no near-zero artifacts once a position is closed
        if held_quantity > ZERO and current_price is not None:
            unrealized_pnl = held_quantity * (current_price - avg_buy_price)
        else:
            unrealized_pnl = ZERO

        logger.debug(
            f"Matched {len(transactions)} transactions for "
            f"{next(iter(symbols), '<empty>')}: {len(lots)} open lots, held={held_quantity}"
        )

        return AssetMetrics(
            held_quantity=held_quantity,
            invested_fiat=invested_fiat,
            avg_buy_price=avg_buy_price,
            realized_pnl=realized_pnl,
            realized_cost_basis=realized_cost_basis,
            unrealized_pnl=unrealized_pnl,
        )


# =============================================================================
# PORTFOLIO AGGREGATOR
# =============================================================================

class PortfolioCalculator:
    """
    Rolls per-asset FIFO metrics up into portfolio totals.

    Two views are kept apart:
    - active assets (held_quantity > 0) drive value, invested capital and
      unrealized P&L, and are what gets displayed
    - all assets, including fully exited ones, drive realized P&L and
      realized cost basis

    One asset with an inconsistent history (sold more than owned) is
    isolated: it is reported in PortfolioMetrics.failures and left out of
    the totals, and every other asset is still valued.
    """

    def __init__(self, asset_calc: AssetMetricsCalculator | None = None) -> None:
        self._asset_calc = asset_calc or AssetMetricsCalculator()

    def calculate(
            self,
            transactions: Iterable[Transaction],
            price_by_symbol: Mapping[str, Decimal],
            price_sources: Mapping[str, str] | None = None,
    ) -> PortfolioMetrics:
        """
        Calculate portfolio metrics from all of a portfolio's transactions.

        Args:
            transactions: All transactions, any order, any number of assets
            price_by_symbol: Current price per symbol; missing symbols are
                             valued as unknown (current value and unrealized P&L 0)
            price_sources: Optional label per symbol ("live", "cached")

        Returns:
            PortfolioMetrics with active assets and totals
        """
        prices = {normalize_asset_symbol(s): p for s, p in price_by_symbol.items()}
        sources = {normalize_asset_symbol(s): v for s, v in (price_sources or {}).items()}

        all_assets: list[AssetValuation] = []
        failures: list[AssetFailure] = []
        warnings: list[str] = []

        for symbol, txns in group_by_symbol(transactions).items():
            current_price = prices.get(symbol)
            try:
                metrics = self._asset_calc.calculate(txns, current_price)
            except InsufficientHoldingsError as exc:
                logger.warning(f"Excluding {symbol} from portfolio totals: {exc}")
                failures.append(AssetFailure(symbol=symbol, message=exc.message))
                continue

            if metrics.has_position and current_price is None:
                warnings.append(f"No price data available for {symbol}")

            all_assets.append(AssetValuation(
                symbol=symbol,
                metrics=metrics,
                current_price=current_price,
                current_value=(
                    metrics.held_quantity * current_price
                    if current_price is not None else ZERO
                ),
                price_source=(
                    sources.get(symbol, PRICE_SOURCE_LIVE)
                    if current_price is not None else PRICE_SOURCE_UNAVAILABLE
                ),
                transaction_count=len(txns),
                first_transaction_at=txns[0].timestamp if txns else None,
            ))

        active = sorted(
            (asset for asset in all_assets if asset.metrics.has_position),
            key=lambda asset: (-asset.current_value, asset.symbol),
        )

        return PortfolioMetrics(
            assets=active,
            total_value=sum((a.current_value for a in active), ZERO),
            total_invested=sum((a.metrics.invested_fiat for a in active), ZERO),
            total_unrealized_pnl=sum((a.metrics.unrealized_pnl for a in active), ZERO),
            total_realized_pnl=sum((a.metrics.realized_pnl for a in all_assets), ZERO),
            total_realized_cost_basis=sum(
                (a.metrics.realized_cost_basis for a in all_assets), ZERO
            ),
            failures=failures,
            warnings=warnings,
        )


# =============================================================================
# TRANSACTION DETAILS CALCULATOR
# =============================================================================

class TransactionDetailsCalculator:
    """
    Calculates display figures for a single transaction.

    Formulas:
        cost_basis = |amount| × price_per_unit + fee   (BUY only)
        current_value = |amount| × current_price

    Note:
        Only fees recorded in the reference currency are included.
    """

    def calculate(
            self,
            transaction: Transaction,
            current_price: Decimal | None,
    ) -> TransactionDetails:
        if transaction.transaction_type == TransactionType.BUY:
            cost_basis: Decimal | None = (
                transaction.quantity * transaction.price_per_unit
                + transaction.fee_in_reference_currency
            )
        else:
            cost_basis = None

        current_value = (
            transaction.quantity * current_price
            if current_price is not None else None
        )

        return TransactionDetails(cost_basis=cost_basis, current_value=current_value)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def compute_asset_metrics(
        transactions: Sequence[Transaction],
        current_price: Decimal | None,
) -> AssetMetrics:
    """FIFO metrics for one asset's chronologically sorted transactions."""
    return AssetMetricsCalculator().calculate(transactions, current_price)


def compute_portfolio(
        transactions: Iterable[Transaction],
        price_by_symbol: Mapping[str, Decimal],
) -> PortfolioMetrics:
    """Portfolio metrics for a portfolio's transactions and current prices."""
    return PortfolioCalculator().calculate(transactions, price_by_symbol)
