"""Observability Package."""

from .logging_config import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from .metrics import (
    record_daemon_started,
    record_daemon_stopped,
    record_item_yielded,
    record_tick_consumed,
    record_tick_emitted,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    # Metrics
    "record_daemon_started",
    "record_daemon_stopped",
    "record_tick_emitted",
    "record_tick_consumed",
    "record_item_yielded",
]
