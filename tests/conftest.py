# tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Transaction factories (create_buy / create_sell)
- In-memory fakes of the transaction store and price cache
- Calculator fixtures
"""

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from coinfolio.models import TransactionType
from coinfolio.schemas.transactions import Transaction
from coinfolio.services.valuation.calculators import (
    AssetMetricsCalculator,
    PortfolioCalculator,
)
from coinfolio.services.valuation.history_calculator import HistoryCalculator

DEFAULT_PORTFOLIO = "main"


# =============================================================================
# FACTORIES
# =============================================================================

def ts(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    """Aware UTC timestamp."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def create_buy(
        symbol: str,
        amount: str | Decimal,
        price: str | Decimal,
        timestamp: datetime,
        portfolio_id: str = DEFAULT_PORTFOLIO,
        **kwargs,
) -> Transaction:
    """BUY of `amount` units (positive) at `price`."""
    return Transaction(
        portfolio_id=portfolio_id,
        asset_symbol=symbol,
        transaction_type=TransactionType.BUY,
        amount=Decimal(str(amount)),
        price_per_unit=Decimal(str(price)),
        timestamp=timestamp,
        **kwargs,
    )


def create_sell(
        symbol: str,
        amount: str | Decimal,
        price: str | Decimal,
        timestamp: datetime,
        portfolio_id: str = DEFAULT_PORTFOLIO,
        **kwargs,
) -> Transaction:
    """SELL of `amount` units; `amount` is given unsigned and stored negative."""
    return Transaction(
        portfolio_id=portfolio_id,
        asset_symbol=symbol,
        transaction_type=TransactionType.SELL,
        amount=-Decimal(str(amount)),
        price_per_unit=Decimal(str(price)),
        timestamp=timestamp,
        **kwargs,
    )


# =============================================================================
# COLLABORATOR FAKES
# =============================================================================

class FakeTransactionStore:
    """
    In-memory stand-in for the transaction store.

    Returns records in insertion order, which tests use to simulate a
    store that does not guarantee chronological order.
    """

    def __init__(self, transactions: Iterable[Transaction] = ()) -> None:
        self._transactions = list(transactions)
        self.calls: list[tuple[str, str | None]] = []

    def add(self, *transactions: Transaction) -> None:
        self._transactions.extend(transactions)

    def get_transactions(
            self,
            portfolio_id: str,
            asset_symbol: str | None = None,
    ) -> list[Transaction]:
        self.calls.append((portfolio_id, asset_symbol))
        return [
            txn for txn in self._transactions
            if txn.portfolio_id == portfolio_id
            and (asset_symbol is None or txn.asset_symbol == asset_symbol)
        ]


class FakePriceCache:
    """In-memory stand-in for the latest-price cache."""

    def __init__(self, prices: Mapping[str, Decimal] | None = None) -> None:
        self._prices = dict(prices or {})
        self.requested: list[list[str]] = []

    def get_latest_prices(self, symbols: Iterable[str]) -> dict[str, Decimal]:
        symbols = list(symbols)
        self.requested.append(symbols)
        return {s: self._prices[s] for s in symbols if s in self._prices}


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def asset_calc() -> AssetMetricsCalculator:
    return AssetMetricsCalculator()


@pytest.fixture
def portfolio_calc() -> PortfolioCalculator:
    return PortfolioCalculator()


@pytest.fixture
def history_calc() -> HistoryCalculator:
    return HistoryCalculator()


@pytest.fixture
def store() -> FakeTransactionStore:
    return FakeTransactionStore()


@pytest.fixture
def price_cache() -> FakePriceCache:
    return FakePriceCache()
