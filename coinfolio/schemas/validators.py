# coinfolio/schemas/validators.py
"""
Shared normalization for symbols and currency codes.

Transactions arrive from a store that may hold user-typed values
(" btc", "eur"), and callers pass price maps keyed however their feed
keys them. Everything is compared in one canonical form: trimmed and
uppercased.
"""

import re

# ISO 4217 alphabetic code
CURRENCY_CODE_PATTERN = re.compile(r'^[A-Z]{3}$')


def _canonical(value: str | None) -> str:
    return value.strip().upper() if value else ""


# =============================================================================
# SYMBOLS
# =============================================================================

def normalize_asset_symbol(value: str) -> str:
    """
    Canonical form of a symbol, without format checks.

    Used for lookup keys (price maps, store queries) that did not come
    from a validated Transaction.
    """
    return _canonical(value)


def validate_asset_symbol(value: str) -> str:
    """
    Canonicalize a symbol.

    Any non-blank symbol is accepted; the store is the authority on which
    assets exist ("$WIF", "USDC.E" and long token names are all valid).

    Raises:
        ValueError: If the symbol is empty or only whitespace
    """
    symbol = _canonical(value)
    if not symbol:
        raise ValueError("Asset symbol cannot be empty")
    return symbol


# =============================================================================
# CURRENCIES
# =============================================================================

def validate_currency_code(value: str | None, *, required: bool = True) -> str | None:
    """
    Canonicalize an ISO 4217 currency code.

    Args:
        value: Raw code (e.g. "eur", " USD ")
        required: When False, None or blank input returns None instead of failing

    Returns:
        Three uppercase letters, or None for an omitted optional code

    Raises:
        ValueError: If a required code is missing, or the code is not three letters
    """
    code = _canonical(value)

    if not code:
        if required:
            raise ValueError("Currency code cannot be empty")
        return None

    if not CURRENCY_CODE_PATTERN.match(code):
        raise ValueError(f"Invalid currency code '{code}': expected 3 letters (e.g. EUR, USD)")

    return code
