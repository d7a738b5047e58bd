# coinfolio/services/valuation/__init__.py
"""
Valuation Service Package.

This package provides the valuation engine:
- FIFO lot matching per asset (compute_asset_metrics)
- Portfolio aggregation (compute_portfolio)
- Value curve reconstruction (reconstruct_history)

Usage:
    from coinfolio.services.valuation import ValuationService

    service = ValuationService(transaction_source=store, price_source=cache)

    # One asset
    btc = service.get_asset_metrics("main", "BTC")

    # Whole portfolio
    portfolio = service.get_portfolio("main", live_prices={"BTC": Decimal("120000")})

    # Value curve for charts
    history = service.get_history("main", daily_prices=series, window_days=90)

Architecture:
    valuation/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Internal data classes
    ├── calculators.py           # FIFO matcher, aggregator, transaction details
    ├── history_calculator.py    # Value curve reconstructor
    └── service.py               # ValuationService (orchestrator)

Data Flow:
    Transactions → AssetMetricsCalculator → AssetMetrics
    AssetMetrics + Prices → PortfolioCalculator → PortfolioMetrics
    Transactions + Daily prices → HistoryCalculator → PortfolioHistory
"""

from coinfolio.services.valuation.calculators import (
    AssetMetricsCalculator,
    PortfolioCalculator,
    TransactionDetailsCalculator,
    compute_asset_metrics,
    compute_portfolio,
    group_by_symbol,
    sort_by_timestamp,
)
from coinfolio.services.valuation.history_calculator import (
    HistoryCalculator,
    build_daily_price_map,
    pin_live_value,
    reconstruct_history,
)
from coinfolio.services.valuation.service import ValuationService
from coinfolio.services.valuation.types import (
    AssetFailure,
    AssetMetrics,
    AssetValuation,
    HistoryPoint,
    PortfolioHistory,
    PortfolioMetrics,
    TransactionDetails,
)

__all__ = [
    # Main service
    "ValuationService",

    # Data types
    "AssetMetrics",
    "AssetValuation",
    "AssetFailure",
    "PortfolioMetrics",
    "TransactionDetails",
    "HistoryPoint",
    "PortfolioHistory",

    # Calculators
    "AssetMetricsCalculator",
    "PortfolioCalculator",
    "TransactionDetailsCalculator",
    "HistoryCalculator",

    # Functions
    "compute_asset_metrics",
    "compute_portfolio",
    "reconstruct_history",
    "build_daily_price_map",
    "pin_live_value",
    "group_by_symbol",
    "sort_by_timestamp",
]
