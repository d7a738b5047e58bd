# coinfolio/services/constants.py
"""
Centralized constants for the valuation engine.

Usage:
    from coinfolio.services.constants import ZERO, PERCENT
"""

from decimal import Decimal


# =============================================================================
# NUMERIC CONSTANTS
# =============================================================================

ZERO: Decimal = Decimal("0")

# Multiplier turning a ratio into a percentage (0.25 -> 25)
PERCENT: Decimal = Decimal("100")


# =============================================================================
# PRICE RESOLUTION
# =============================================================================

# Labels for where an asset's current price came from
PRICE_SOURCE_LIVE: str = "live"
PRICE_SOURCE_CACHED: str = "cached"
PRICE_SOURCE_UNAVAILABLE: str = "unavailable"
