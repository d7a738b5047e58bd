# coinfolio/schemas/__init__.py
"""
Pydantic schemas for validation and serialization.

This package contains:
- transactions: The validated Transaction record
- validators: Reusable validation functions (symbol, currency)
- valuation: Serializable views of valuation results

Usage:
    from coinfolio.schemas import Transaction
    from coinfolio.schemas import PortfolioMetricsResponse
"""

from coinfolio.schemas.transactions import Transaction
from coinfolio.schemas.valuation import (
    AssetMetricsResponse,
    AssetValuationResponse,
    AssetFailureResponse,
    PortfolioMetricsResponse,
    HistoryPointResponse,
    PortfolioHistoryResponse,
)

__all__ = [
    "Transaction",
    "AssetMetricsResponse",
    "AssetValuationResponse",
    "AssetFailureResponse",
    "PortfolioMetricsResponse",
    "HistoryPointResponse",
    "PortfolioHistoryResponse",
]
