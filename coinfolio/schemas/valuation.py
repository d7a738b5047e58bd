# coinfolio/schemas/valuation.py
"""
Pydantic schemas for valuation results.

These schemas turn the engine's internal dataclasses into plain,
serializable payloads that can cross any process or language boundary:
- Per-asset FIFO metrics
- Portfolio metrics and totals
- Value curve (time series)

Build them with `model_validate(result)`; derived properties on the
dataclasses (total_pnl, total_pnl_percentage, ...) are read as attributes.
Decimals serialize as strings in JSON mode, so no precision is lost.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from coinfolio.models import FillPolicy


# =============================================================================
# ASSET SCHEMAS
# =============================================================================

class AssetMetricsResponse(BaseModel):
    """FIFO metrics for one asset."""

    model_config = ConfigDict(from_attributes=True)

    held_quantity: Decimal = Field(..., description="Units currently held")
    invested_fiat: Decimal = Field(..., description="Cost of the units still held")
    avg_buy_price: Decimal | None = Field(
        ...,
        description="Average buy price of remaining lots (None when nothing is held)"
    )
    realized_pnl: Decimal = Field(..., description="P&L crystallized by sells")
    realized_cost_basis: Decimal = Field(..., description="Cost of the lots sells consumed")
    unrealized_pnl: Decimal = Field(..., description="Paper P&L on held units")
    total_pnl: Decimal = Field(..., description="realized + unrealized")
    realized_pnl_percentage: Decimal | None = Field(
        default=None,
        description="Realized P&L as a percentage of realized cost basis"
    )


class AssetValuationResponse(BaseModel):
    """Asset metrics joined with the asset's current price."""

    model_config = ConfigDict(from_attributes=True)

    symbol: str
    metrics: AssetMetricsResponse
    current_price: Decimal | None = Field(
        ...,
        description="Price used for valuation (None if unknown)"
    )
    current_value: Decimal = Field(..., description="held_quantity × current_price")
    price_source: str = Field(..., description="live | cached | unavailable")
    transaction_count: int = 0
    first_transaction_at: dt.datetime | None = None


class AssetFailureResponse(BaseModel):
    """An asset left out of portfolio totals."""

    model_config = ConfigDict(from_attributes=True)

    symbol: str
    message: str


# =============================================================================
# PORTFOLIO SCHEMAS
# =============================================================================

class PortfolioMetricsResponse(BaseModel):
    """Active assets and portfolio totals."""

    model_config = ConfigDict(from_attributes=True)

    assets: list[AssetValuationResponse] = Field(
        default_factory=list,
        description="Assets with a position, by descending current value"
    )
    total_value: Decimal
    total_invested: Decimal
    total_unrealized_pnl: Decimal
    total_realized_pnl: Decimal = Field(
        ...,
        description="Realized P&L over all assets, including fully exited ones"
    )
    total_realized_cost_basis: Decimal
    total_pnl: Decimal
    total_cost_basis: Decimal
    total_pnl_percentage: Decimal | None = Field(
        ...,
        description="total_pnl / total_cost_basis × 100 (None when cost basis is 0)"
    )
    failures: list[AssetFailureResponse] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    has_complete_data: bool = True


# =============================================================================
# HISTORY SCHEMAS
# =============================================================================

class HistoryPointResponse(BaseModel):
    """One day of the value curve."""

    model_config = ConfigDict(from_attributes=True)

    date: dt.date = Field(..., description="UTC day")
    timestamp: dt.datetime = Field(..., description="UTC midnight instant of the day")
    value: Decimal = Field(..., description="Portfolio value at the end of the day")


class PortfolioHistoryResponse(BaseModel):
    """Value curve for charting."""

    model_config = ConfigDict(from_attributes=True)

    start_date: dt.date
    end_date: dt.date
    window_days: int
    fill_policy: FillPolicy
    data: list[HistoryPointResponse]
    warnings: list[str] = Field(default_factory=list)
