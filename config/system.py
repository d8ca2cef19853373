"""
====================================================
🎯 SYSTEM CONFIGURATION - TICKER
====================================================

Logging and runtime parameters, read from the environment.
A `.env` file in the working directory is loaded first.
"""

import os
from typing import Literal, Optional

from dotenv import load_dotenv

load_dotenv()

# =====================================================
# 🧾 LOGGING
# =====================================================

_LOG_LEVEL_ENV_VAR = "TICKER_LOG_LEVEL"
_LOG_FORMAT_ENV_VAR = "TICKER_LOG_FORMAT"
_LOG_FILE_ENV_VAR = "TICKER_LOG_FILE"

_ALLOWED_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_ALLOWED_FORMATS = {"console", "json"}


def _get_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV_VAR)
    if value:
        normalized = value.strip().upper()
        if normalized not in _ALLOWED_LEVELS:
            raise ValueError(f"Invalid LOG_LEVEL: {value}. Must be one of {_ALLOWED_LEVELS}")
        return normalized
    return default


def _get_log_format(default: Literal["console", "json"]) -> Literal["console", "json"]:
    value = os.getenv(_LOG_FORMAT_ENV_VAR)
    if value:
        normalized = value.strip().lower()
        if normalized not in _ALLOWED_FORMATS:
            raise ValueError(f"Invalid LOG_FORMAT: {value}. Must be one of {_ALLOWED_FORMATS}")
        return normalized
    return default


# Log verbosity (DEBUG, INFO, WARNING, ERROR)
LOG_LEVEL: str = _get_log_level("INFO")

# "console" for development, "json" for production
LOG_FORMAT: Literal["console", "json"] = _get_log_format("console")

# Optional log file; None logs to stdout only
LOG_FILE: Optional[str] = os.getenv(_LOG_FILE_ENV_VAR) or None
