# coinfolio/schemas/transactions.py
"""
Pydantic schema for the Transaction record.

A Transaction is an immutable, validated description of one BUY or SELL
event for one asset. Records arrive from the (external) transaction store;
the valuation engine only reads them.

Validation layers:
- Field constraints: type, numeric limits, currency pattern
- Field validators: normalization (uppercase, trim, UTC timestamps)
- Model validator: amount sign must match the transaction type, and
  total_fiat is derived when the store did not supply it

IMPORTANT: All financial values use Decimal for precision.
Never use float for money!
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from coinfolio.config import settings
from coinfolio.models import TransactionSource, TransactionType
from coinfolio.schemas.validators import validate_asset_symbol, validate_currency_code
from coinfolio.utils.date_utils import ensure_utc

logger = logging.getLogger(__name__)


class Transaction(BaseModel):
    """
    One buy or sell event for one asset within a portfolio.

    Sign convention:
        amount is signed: positive for BUY (units in), negative for SELL (units out).
        total_fiat is the cash flow: negative for BUY (cash out), positive for SELL.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Record identifier assigned by the store"
    )

    portfolio_id: str = Field(
        ...,
        min_length=1,
        description="Portfolio scope this transaction belongs to"
    )

    asset_symbol: str = Field(
        ...,
        description="Asset symbol, normalized to uppercase",
        examples=["BTC", "ETH", "SOL"]
    )

    transaction_type: TransactionType = Field(
        ...,
        description="BUY or SELL"
    )

    amount: Decimal = Field(
        ...,
        description="Signed quantity: positive for BUY, negative for SELL",
        examples=["0.5", "-1.25"]
    )

    price_per_unit: Decimal = Field(
        ...,
        gt=0,
        description="Price per unit in the reference currency (must be positive)",
        examples=["90000", "0.0001234"]
    )

    fiat_currency: str = Field(
        default_factory=lambda: settings.reference_currency,
        description="Reference currency of price_per_unit and total_fiat (ISO 4217)"
    )

    fee_amount: Decimal | None = Field(
        default=None,
        ge=0,
        description="Fee paid for the trade (0 or positive)"
    )

    fee_currency: str | None = Field(
        default=None,
        description="Currency of the fee (defaults to fiat_currency if not provided)"
    )

    total_fiat: Decimal | None = Field(
        default=None,
        description=(
            "Signed cash flow in the reference currency. "
            "Computed as -amount * price_per_unit - fee when not supplied."
        )
    )

    timestamp: datetime = Field(
        ...,
        description="Logical event time (not insertion time); naive values are UTC"
    )

    source: TransactionSource = Field(
        default=TransactionSource.MANUAL,
        description="Where the record originated"
    )

    notes: str | None = None
    external_id: str | None = None

    # =========================================================================
    # FIELD VALIDATORS (Normalization & Validation)
    # =========================================================================

    @field_validator('asset_symbol')
    @classmethod
    def validate_and_normalize_symbol(cls, v: str) -> str:
        """Validate and normalize asset symbol."""
        return validate_asset_symbol(v)

    @field_validator('fiat_currency')
    @classmethod
    def validate_fiat_currency(cls, v: str) -> str:
        return validate_currency_code(v)

    @field_validator('fee_currency')
    @classmethod
    def validate_fee_currency(cls, v: str | None) -> str | None:
        """Blank means the fee is in fiat_currency."""
        return validate_currency_code(v, required=False)

    @field_validator('timestamp')
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    # =========================================================================
    # MODEL VALIDATORS
    # =========================================================================

    @model_validator(mode="after")
    def validate_amount_and_total(self) -> "Transaction":
        """
        Enforce the sign invariant and derive total_fiat.

        Rules:
        - BUY must have a positive amount
        - SELL must have a negative amount
        - total_fiat = -amount * price_per_unit - fee_in_reference_currency
          unless explicitly supplied
        """
        if self.transaction_type == TransactionType.BUY and self.amount <= 0:
            raise ValueError(f"BUY must have a positive amount (got {self.amount})")

        if self.transaction_type == TransactionType.SELL and self.amount >= 0:
            raise ValueError(f"SELL must have a negative amount (got {self.amount})")

        if self.has_unconverted_fee:
            logger.warning(
                f"Fee of {self.fee_amount} {self.fee_currency} on {self.asset_symbol} "
                f"transaction {self.id} is not in {self.fiat_currency}; "
                f"it is left out of total_fiat and cost basis"
            )

        if self.total_fiat is None:
            computed = -self.amount * self.price_per_unit - self.fee_in_reference_currency
            # Frozen model: assign once, during validation
            object.__setattr__(self, "total_fiat", computed)

        return self

    # =========================================================================
    # DERIVED VALUES
    # =========================================================================

    @property
    def quantity(self) -> Decimal:
        """Unsigned number of units traded."""
        return abs(self.amount)

    @property
    def fee_in_reference_currency(self) -> Decimal:
        """
        Fee expressed in the reference currency.

        Fees recorded in a different currency are not converted and count as 0.
        """
        if not self.fee_amount:
            return Decimal("0")
        if self.fee_currency is None or self.fee_currency == self.fiat_currency:
            return self.fee_amount
        return Decimal("0")

    @property
    def has_unconverted_fee(self) -> bool:
        """True if a non-zero fee was recorded in a foreign currency."""
        return bool(self.fee_amount) and (
            self.fee_currency is not None and self.fee_currency != self.fiat_currency
        )
