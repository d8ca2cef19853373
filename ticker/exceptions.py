"""
Custom exceptions for the ticker package.

Daemon-side disconnections are ordinary termination and never surface here;
only consumer-facing failures are raised to callers.
"""

from typing import Any, Dict, Optional


class TickerError(Exception):
    """Base exception for all ticker errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(TickerError, ValueError):
    """Raised when constructor arguments are invalid."""

    pass


class ChannelError(TickerError):
    """Base class for channel send/receive failures."""

    pass


class ChannelTimeoutError(ChannelError):
    """Raised when a timed receive sees no item before the deadline."""

    pass


class ChannelDisconnectedError(ChannelError):
    """Raised when the other end of a channel has been closed."""

    pass


class TickChannelClosedError(TickerError):
    """
    Raised by a rate-limited iterator whose tick source is gone.

    Either the timer daemon stopped while the handle was still live, or the
    handle was used after being closed. Never a substitute for exhaustion.
    """

    pass


def create_validation_error(field: str, value: Any, reason: str) -> ValidationError:
    """Create a validation error with standardized format."""
    return ValidationError(f"Validation failed for {field}", {"field": field, "value": value, "reason": reason})
