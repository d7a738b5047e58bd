"""coinfolio - valuation engine for crypto portfolios."""

__version__ = "0.1.0"
