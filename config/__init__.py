"""
====================================================
⚙️ CONFIGURATION - TICKER
====================================================

Usage:
    from config import system, ticker

    level = system.LOG_LEVEL
    interval = ticker.DEFAULT_INTERVAL_SECONDS
"""

from . import system, ticker

__all__ = [
    "system",
    "ticker",
]
