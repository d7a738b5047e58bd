# coinfolio/utils/__init__.py
"""
Utility modules for coinfolio.

- logging: Logging configuration and setup
- date_utils: UTC day bucketing and day ranges

Usage:
    from coinfolio.utils import setup_logging, get_logger
    from coinfolio.utils.date_utils import build_day_range
"""

from coinfolio.utils.logging import setup_logging, get_logger

__all__ = [
    "setup_logging",
    "get_logger",
]
