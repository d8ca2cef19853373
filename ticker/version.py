"""
====================================================
📌 VERSION - Ticker
====================================================

Single source of truth for the package version.
pyproject.toml reads it from here.
====================================================
"""

from typing import Literal

# =====================================================
# 🎯 CURRENT VERSION
# =====================================================
__version__ = "1.0.0"
__version_name__ = "Threaded Ticker"
__release_date__ = "2026-10-18"
__status__: Literal["stable", "beta", "alpha", "dev"] = "beta"


def get_full_version_string() -> str:
    """Return the version string used in log banners."""
    return f"Ticker v{__version__} ({__version_name__}) - {__status__}"
