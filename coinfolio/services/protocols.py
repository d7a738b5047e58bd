# coinfolio/services/protocols.py
"""
Protocol interfaces for the engine's external collaborators.

Using typing.Protocol enables structural subtyping:
- The host application's store and price cache satisfy these without
  inheriting from anything
- Test fakes work without explicit inheritance
- Clear documentation of the only data the engine needs
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from coinfolio.schemas.transactions import Transaction


class TransactionSourceProtocol(Protocol):
    """
    Read access to the transaction store, scoped by portfolio.

    Returned records may be in any order; the engine sorts them.
    """

    def get_transactions(
        self,
        portfolio_id: str,
        asset_symbol: str | None = None,
    ) -> list[Transaction]:
        ...


class PriceSourceProtocol(Protocol):
    """Read access to the cache of latest known prices."""

    def get_latest_prices(
        self,
        symbols: Iterable[str],
    ) -> Mapping[str, Decimal]:
        """Return the latest cached price per symbol; unknown symbols are omitted."""
        ...
