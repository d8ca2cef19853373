"""
====================================================
⏱️ TICKER CONFIGURATION
====================================================

Defaults for ticker handles and their timer daemons.
"""

import math
import os
import threading

from . import system  # noqa: F401  (loads .env before the reads below)

_INTERVAL_ENV_VAR = "TICKER_INTERVAL"
_NAME_ENV_VAR = "TICKER_NAME"


def _get_interval(default: float) -> float:
    value = os.getenv(_INTERVAL_ENV_VAR)
    if not value:
        return default
    try:
        interval = float(value.strip())
    except ValueError:
        raise ValueError(f"Invalid INTERVAL: {value}. Must be a number of seconds")
    if not math.isfinite(interval) or interval <= 0:
        raise ValueError(f"Invalid INTERVAL: {value}. Must be finite and > 0")
    if interval > threading.TIMEOUT_MAX:
        raise ValueError(f"Invalid INTERVAL: {value}. Must not exceed {threading.TIMEOUT_MAX}")
    return interval


# =====================================================
# ⏱️ TICKING
# =====================================================

# Seconds between ticks when the caller does not pass one (CLI only)
DEFAULT_INTERVAL_SECONDS: float = _get_interval(1.0)

# Name used in logs, metric labels and thread names
DEFAULT_TICKER_NAME: str = (os.getenv(_NAME_ENV_VAR) or "default").strip()

# Timer daemon threads are named "<prefix>-<ticker name>-<seq>"
DAEMON_THREAD_PREFIX = "TimerDaemon"
