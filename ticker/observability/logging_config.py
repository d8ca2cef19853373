"""
Structured logging for the ticker package.

structlog loggers (the demo CLI) and the plain ``logging`` loggers used by
Ticker, AsyncTicker and TimerDaemon all end up on the same handlers and are
rendered by the same structlog renderer: one JSON object per line, or the
console renderer for development.
"""

import logging
import sys
from typing import Optional

import structlog

# Run on every record before rendering; stdlib records get them via foreign_pre_chain
_SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
]


def _renderers(log_format: str) -> list:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    # No ANSI escapes unless stdout is a terminal, so piped output stays greppable
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def configure_logging(log_level: str = "INFO", log_format: str = "console", log_file: Optional[str] = None):
    """
    Configure structured logging. Safe to call again; the previous
    handlers are replaced.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: 'json' or 'console'
        log_file: Optional path that receives a copy of every record
    """
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta] + _renderers(log_format),
    )

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w"))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(handlers=handlers, level=getattr(logging, log_level.upper()), force=True)

    structlog.configure(
        processors=_SHARED_PROCESSORS + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = None):
    """Get a structlog logger bound to the stdlib logger ``name``."""
    return structlog.get_logger(name)


def bind_context(**kwargs):
    """Attach key-value pairs to every later record, e.g. ``bind_context(ticker="heartbeat")``."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys):
    """Drop the named keys bound by bind_context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context():
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()
