# coinfolio/services/__init__.py
"""
Service layer for coinfolio.

Services:
- ValuationService: FIFO metrics, portfolio totals and value history

Usage:
    from coinfolio.services import ValuationService
    from coinfolio.services.exceptions import InsufficientHoldingsError
"""

from coinfolio.services.exceptions import (
    ServiceError,
    ValidationError,
    InvalidWindowError,
    MixedAssetTransactionsError,
    ValuationError,
    InsufficientHoldingsError,
)
from coinfolio.services.valuation import ValuationService

__all__ = [
    "ValuationService",
    # Exceptions
    "ServiceError",
    "ValidationError",
    "InvalidWindowError",
    "MixedAssetTransactionsError",
    "ValuationError",
    "InsufficientHoldingsError",
]
