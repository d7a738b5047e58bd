# tests/schemas/test_transactions.py
"""
Tests for the Transaction schema.

This module tests:
- Sign invariant (BUY positive, SELL negative)
- Normalizers (symbol/currency uppercase, UTC timestamps)
- Derived total_fiat and fee handling
- Immutability
"""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from coinfolio.models import TransactionSource, TransactionType
from coinfolio.schemas.transactions import Transaction


def _data(**overrides) -> dict:
    data = {
        "portfolio_id": "main",
        "asset_symbol": "BTC",
        "transaction_type": TransactionType.BUY,
        "amount": Decimal("0.5"),
        "price_per_unit": Decimal("90000"),
        "timestamp": datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return data


# =============================================================================
# SIGN INVARIANT
# =============================================================================

class TestSignInvariant:

    def test_valid_buy(self):
        txn = Transaction(**_data())

        assert txn.amount == Decimal("0.5")
        assert txn.quantity == Decimal("0.5")
        assert txn.source == TransactionSource.MANUAL
        assert txn.id

    def test_valid_sell(self):
        txn = Transaction(**_data(
            transaction_type=TransactionType.SELL,
            amount=Decimal("-0.25"),
        ))

        assert txn.amount == Decimal("-0.25")
        assert txn.quantity == Decimal("0.25")

    @pytest.mark.parametrize("amount", ["0", "-1"])
    def test_buy_must_be_positive(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            Transaction(**_data(amount=Decimal(amount)))

        assert "BUY must have a positive amount" in str(exc_info.value)

    @pytest.mark.parametrize("amount", ["0", "1"])
    def test_sell_must_be_negative(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            Transaction(**_data(transaction_type=TransactionType.SELL, amount=Decimal(amount)))

        assert "SELL must have a negative amount" in str(exc_info.value)

    @pytest.mark.parametrize("price", ["0", "-100"])
    def test_price_must_be_positive(self, price):
        with pytest.raises(ValidationError):
            Transaction(**_data(price_per_unit=Decimal(price)))

    def test_negative_fee_rejected(self):
        with pytest.raises(ValidationError):
            Transaction(**_data(fee_amount=Decimal("-1")))


# =============================================================================
# NORMALIZATION
# =============================================================================

class TestNormalization:

    def test_symbol_uppercased_and_trimmed(self):
        txn = Transaction(**_data(asset_symbol="  eth "))

        assert txn.asset_symbol == "ETH"

    @pytest.mark.parametrize("symbol", ["", "   "])
    def test_blank_symbols_rejected(self, symbol):
        with pytest.raises(ValidationError) as exc_info:
            Transaction(**_data(asset_symbol=symbol))

        assert "Asset symbol cannot be empty" in str(exc_info.value)

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("usdc.e", "USDC.E"),
            (" $wif", "$WIF"),
            ("btc/eur", "BTC/EUR"),
            ("a" * 25, "A" * 25),
        ],
    )
    def test_any_non_blank_symbol_accepted(self, raw, expected):
        txn = Transaction(**_data(asset_symbol=raw))

        assert txn.asset_symbol == expected

    def test_currency_uppercased(self):
        txn = Transaction(**_data(fiat_currency="usd", fee_currency=" usd "))

        assert txn.fiat_currency == "USD"
        assert txn.fee_currency == "USD"

    def test_blank_fee_currency_means_fiat_currency(self):
        txn = Transaction(**_data(fee_amount=Decimal("2"), fee_currency="  "))

        assert txn.fee_currency is None
        assert txn.fee_in_reference_currency == Decimal("2")

    def test_invalid_currency_rejected(self):
        with pytest.raises(ValidationError):
            Transaction(**_data(fiat_currency="EURO"))

    def test_naive_timestamp_treated_as_utc(self):
        txn = Transaction(**_data(timestamp=datetime(2024, 1, 15, 23, 30)))

        assert txn.timestamp == datetime(2024, 1, 15, 23, 30, tzinfo=timezone.utc)

    def test_offset_timestamp_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        txn = Transaction(**_data(timestamp=datetime(2024, 1, 16, 1, 0, tzinfo=plus_two)))

        assert txn.timestamp.tzinfo == timezone.utc
        assert txn.timestamp == datetime(2024, 1, 15, 23, 0, tzinfo=timezone.utc)

    def test_empty_portfolio_id_rejected(self):
        with pytest.raises(ValidationError):
            Transaction(**_data(portfolio_id=""))


# =============================================================================
# TOTAL FIAT AND FEES
# =============================================================================

class TestTotalFiat:

    def test_buy_total_is_cash_out(self):
        txn = Transaction(**_data(fee_amount=Decimal("10"), fiat_currency="EUR"))

        # -(0.5 × 90,000) − 10
        assert txn.total_fiat == Decimal("-45010")

    def test_sell_total_is_cash_in(self):
        txn = Transaction(**_data(
            transaction_type=TransactionType.SELL,
            amount=Decimal("-0.5"),
            fee_amount=Decimal("10"),
            fiat_currency="EUR",
            fee_currency="EUR",
        ))

        assert txn.total_fiat == Decimal("44990")

    def test_supplied_total_is_kept(self):
        txn = Transaction(**_data(total_fiat=Decimal("-45000.01")))

        assert txn.total_fiat == Decimal("-45000.01")

    def test_foreign_currency_fee_excluded_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="coinfolio.schemas.transactions"):
            txn = Transaction(**_data(
                fiat_currency="EUR",
                fee_amount=Decimal("3"),
                fee_currency="USD",
            ))

        assert txn.has_unconverted_fee
        assert txn.fee_in_reference_currency == Decimal("0")
        assert txn.total_fiat == Decimal("-45000")
        assert "not in EUR" in caplog.text

    def test_zero_fee_is_not_flagged(self):
        txn = Transaction(**_data(fee_amount=Decimal("0"), fee_currency="USD"))

        assert not txn.has_unconverted_fee


class TestImmutability:

    def test_fields_cannot_be_reassigned(self):
        txn = Transaction(**_data())

        with pytest.raises(ValidationError):
            txn.amount = Decimal("5")
