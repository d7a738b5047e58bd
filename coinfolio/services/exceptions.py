# coinfolio/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain no knowledge
of how a caller presents them.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   ├── InvalidWindowError
    │   └── MixedAssetTransactionsError
    └── ValuationError
        └── InsufficientHoldingsError

Malformed transaction records never reach this layer: they are rejected
by the Transaction schema with pydantic.ValidationError.
"""

from datetime import datetime
from decimal import Decimal


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when a call's parameters are unusable.

    Attributes:
        field: The parameter that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidWindowError(ValidationError):
    """Raised when a history window is shorter than one day."""

    def __init__(self, window_days: int) -> None:
        self.window_days = window_days
        super().__init__(
            f"Invalid history window: {window_days} days. Must be at least 1",
            field="window_days",
        )


class MixedAssetTransactionsError(ValidationError):
    """
    Raised when the lot matcher receives transactions for several assets.

    The matcher works on exactly one asset; grouping is the aggregator's job.
    """

    def __init__(self, symbols: set[str]) -> None:
        self.symbols = symbols
        super().__init__(
            f"Lot matching requires a single asset, got: {', '.join(sorted(symbols))}",
            field="transactions",
        )


# =============================================================================
# VALUATION ERRORS
# =============================================================================


class ValuationError(ServiceError):
    """
    Base exception for failures while valuing an asset.

    Attributes:
        asset_symbol: The asset whose computation failed
    """

    def __init__(self, message: str, asset_symbol: str | None = None) -> None:
        self.asset_symbol = asset_symbol
        super().__init__(message)


class InsufficientHoldingsError(ValuationError):
    """
    Raised when a sell exceeds the quantity left in the asset's lots.

    This is a data-integrity fault in the upstream ledger. Clamping would
    hide it, so the computation for the asset is aborted.

    Attributes:
        asset_symbol: Asset being matched
        timestamp: Event time of the offending sell
        requested: Quantity the sell tried to dispose of
        available: Quantity that remained across all lots
    """

    def __init__(
            self,
            asset_symbol: str,
            timestamp: datetime,
            requested: Decimal,
            available: Decimal,
    ) -> None:
        self.timestamp = timestamp
        self.requested = requested
        self.available = available
        super().__init__(
            f"Invalid transaction history for {asset_symbol}: sold more than owned "
            f"(sell of {requested} at {timestamp.isoformat()}, only {available} held)",
            asset_symbol=asset_symbol,
        )
