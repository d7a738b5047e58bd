# coinfolio/services/valuation/service.py
"""
Valuation Service - Main orchestrator for portfolio valuation.

This is the single entry point for valuation operations that start from
the transaction store rather than from in-memory lists:
- get_asset_metrics(): FIFO metrics for one asset, with its current price
- get_portfolio(): Active assets and portfolio totals
- get_history(): Value curve for charts
- get_transaction_details(): Cost basis / current value of one transaction

Design Principles:
- Dependency Injection: transaction store and price cache via constructor
- No hidden state: every call re-reads its inputs and recomputes
- Presentation-agnostic: raises domain exceptions, returns dataclasses
- Composable: delegates to the specialized calculators

Usage:
    from coinfolio.services.valuation import ValuationService

    service = ValuationService(transaction_source=store, price_source=cache)

    btc = service.get_asset_metrics("main", "BTC", live_price=Decimal("120000"))
    portfolio = service.get_portfolio("main", live_prices={"BTC": Decimal("120000")})
    history = service.get_history("main", daily_prices=price_series, window_days=30)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from coinfolio.config import settings
from coinfolio.models import FillPolicy, HistoryPeriod
from coinfolio.schemas.validators import normalize_asset_symbol
from coinfolio.services.constants import (
    PRICE_SOURCE_CACHED,
    PRICE_SOURCE_LIVE,
    PRICE_SOURCE_UNAVAILABLE,
    ZERO,
)
from coinfolio.services.valuation.calculators import (
    AssetMetricsCalculator,
    PortfolioCalculator,
    TransactionDetailsCalculator,
    sort_by_timestamp,
)
from coinfolio.services.valuation.history_calculator import (
    DailyPrices,
    HistoryCalculator,
    pin_live_value,
)
from coinfolio.services.valuation.types import (
    AssetValuation,
    PortfolioHistory,
    PortfolioMetrics,
    TransactionDetails,
)

if TYPE_CHECKING:
    from coinfolio.schemas.transactions import Transaction
    from coinfolio.services.protocols import PriceSourceProtocol, TransactionSourceProtocol

logger = logging.getLogger(__name__)


class ValuationService:
    """
    Main service for portfolio valuation operations.

    Orchestrates the calculators: reads transactions from the injected
    store, resolves current prices (live first, then the latest cached
    price), and hands plain inputs to the pure calculators.

    Attributes:
        _transactions: Injected transaction store
        _prices: Injected latest-price cache (optional)
        _asset_calc: FIFO lot matcher
        _portfolio_calc: Portfolio aggregator
        _history_calc: Value curve reconstructor
        _details_calc: Per-transaction figures
    """

    def __init__(
            self,
            transaction_source: TransactionSourceProtocol,
            price_source: PriceSourceProtocol | None = None,
            fill_policy: FillPolicy | None = None,
    ) -> None:
        """
        Initialize the valuation service.

        Args:
            transaction_source: Read access to the transaction store
            price_source: Latest cached prices; if None, only live prices are used
            fill_policy: History gap strategy (default: settings.price_fill_policy)
        """
        self._transactions = transaction_source
        self._prices = price_source

        self._asset_calc = AssetMetricsCalculator()
        self._portfolio_calc = PortfolioCalculator(asset_calc=self._asset_calc)
        self._history_calc = HistoryCalculator(
            fill_policy=fill_policy or settings.price_fill_policy,
        )
        self._details_calc = TransactionDetailsCalculator()

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def get_asset_metrics(
            self,
            portfolio_id: str,
            asset_symbol: str,
            live_price: Decimal | None = None,
    ) -> AssetValuation:
        """
        Calculate FIFO metrics for one asset of a portfolio.

        Args:
            portfolio_id: Portfolio scope
            asset_symbol: Asset to value (case-insensitive)
            live_price: Current price from a live feed, preferred over the cache

        Returns:
            AssetValuation with metrics, resolved price and current value

        Raises:
            InsufficientHoldingsError: If the asset's history sells more than it bought
        """
        symbol = normalize_asset_symbol(asset_symbol)
        logger.info(f"Calculating metrics for {symbol} in portfolio {portfolio_id}")

        # Storage order is not guaranteed
        transactions = sort_by_timestamp(
            self._transactions.get_transactions(portfolio_id, asset_symbol=symbol)
        )

        current_price, price_source = self._resolve_price(symbol, live_price)
        metrics = self._asset_calc.calculate(transactions, current_price)

        return AssetValuation(
            symbol=symbol,
            metrics=metrics,
            current_price=current_price,
            current_value=(
                metrics.held_quantity * current_price
                if current_price is not None else ZERO
            ),
            price_source=price_source,
            transaction_count=len(transactions),
            first_transaction_at=transactions[0].timestamp if transactions else None,
        )

    def get_portfolio(
            self,
            portfolio_id: str,
            live_prices: Mapping[str, Decimal] | None = None,
    ) -> PortfolioMetrics:
        """
        Calculate active assets and totals for a portfolio.

        Args:
            portfolio_id: Portfolio scope
            live_prices: Current prices from a live feed, by symbol

        Returns:
            PortfolioMetrics; assets with inconsistent histories are listed
            in failures instead of raising
        """
        logger.info(f"Calculating portfolio metrics for {portfolio_id}")

        transactions = self._transactions.get_transactions(portfolio_id)
        symbols = {txn.asset_symbol for txn in transactions}
        prices, sources = self._resolve_prices(symbols, live_prices or {})

        result = self._portfolio_calc.calculate(
            transactions=transactions,
            price_by_symbol=prices,
            price_sources=sources,
        )

        if result.failures:
            logger.warning(
                f"Portfolio {portfolio_id}: {len(result.failures)} asset(s) excluded "
                f"from totals: {', '.join(f.symbol for f in result.failures)}"
            )

        return result

    def get_history(
            self,
            portfolio_id: str,
            daily_prices: DailyPrices,
            window_days: int | None = None,
            period: HistoryPeriod | None = None,
            today: date | None = None,
            current_value: Decimal | None = None,
    ) -> PortfolioHistory:
        """
        Reconstruct the portfolio value curve.

        Args:
            portfolio_id: Portfolio scope
            daily_prices: Price per symbol per UTC day, fetched by the caller
            window_days: Days in the curve (default: settings.history_window_days)
            period: Chart period; sets the window when window_days is not given
                    and thins the curve to the period's point interval
            today: Last day of the curve (default: today in UTC)
            current_value: Live portfolio value pinned to the last point (if positive)

        Returns:
            PortfolioHistory with one point per day, or per point interval
            when a period is given

        Raises:
            InvalidWindowError: If the window is shorter than one day
        """
        if window_days is None:
            window_days = period.days if period is not None else settings.history_window_days

        logger.info(f"Calculating {window_days}-day history for portfolio {portfolio_id}")

        transactions = self._transactions.get_transactions(portfolio_id)
        history = self._history_calc.calculate(
            transactions=transactions,
            daily_prices=daily_prices,
            window_days=window_days,
            today=today,
        )

        # Sample first so the live total lands on the point that is displayed
        if period is not None:
            history.data = HistoryCalculator.downsample(history.data, period.point_interval)
        history.data = pin_live_value(history.data, current_value)

        return history

    def get_transaction_details(
            self,
            transaction: Transaction,
            live_price: Decimal | None = None,
    ) -> TransactionDetails:
        """Cost basis and current value of a single transaction."""
        current_price, _ = self._resolve_price(transaction.asset_symbol, live_price)
        return self._details_calc.calculate(transaction, current_price)

    # =========================================================================
    # PRICE RESOLUTION
    # =========================================================================

    def _resolve_price(
            self,
            symbol: str,
            live_price: Decimal | None,
    ) -> tuple[Decimal | None, str]:
        """Live price, else latest cached price, else unknown."""
        live = {symbol: live_price} if live_price is not None else {}
        prices, sources = self._resolve_prices({symbol}, live)
        return prices.get(symbol), sources.get(symbol, PRICE_SOURCE_UNAVAILABLE)

    def _resolve_prices(
            self,
            symbols: set[str],
            live_prices: Mapping[str, Decimal],
    ) -> tuple[dict[str, Decimal], dict[str, str]]:
        """
        Resolve current prices for several symbols.

        Returns:
            Tuple of (price by symbol, price source label by symbol).
            Symbols without any price are absent from both.
        """
        live = {normalize_asset_symbol(s): p for s, p in live_prices.items()}
        prices: dict[str, Decimal] = {}
        sources: dict[str, str] = {}

        for symbol in symbols:
            if symbol in live:
                prices[symbol] = live[symbol]
                sources[symbol] = PRICE_SOURCE_LIVE

        missing = symbols - prices.keys()
        if missing and self._prices is not None:
            cached = self._prices.get_latest_prices(sorted(missing))
            for symbol, price in cached.items():
                symbol = normalize_asset_symbol(symbol)
                if symbol in missing and price is not None:
                    prices[symbol] = price
                    sources[symbol] = PRICE_SOURCE_CACHED

        unpriced = symbols - prices.keys()
        if unpriced:
            logger.debug(f"No current price for: {', '.join(sorted(unpriced))}")

        return prices, sources
