"""
Prometheus Metrics for the ticker package.

All metrics are labelled by ticker name. Daemon-side metrics are updated from
the timer thread, consumer-side metrics from the iterating thread.
"""

from prometheus_client import Counter, Gauge, Histogram

# ============================================================================
# COUNTERS (monotonically increasing)
# ============================================================================

ticks_emitted_total = Counter(
    "ticker_ticks_emitted_total",
    "Total number of ticks sent by timer daemons",
    ["ticker"],
)

ticks_consumed_total = Counter(
    "ticker_ticks_consumed_total",
    "Total number of ticks received by rate-limited iterators",
    ["ticker"],
)

items_yielded_total = Counter(
    "ticker_items_yielded_total",
    "Total number of source items handed to consumers",
    ["ticker"],
)

daemon_exits_total = Counter(
    "ticker_daemon_exits_total",
    "Total number of timer daemon exits",
    ["ticker", "reason"],
)

# ============================================================================
# GAUGES (can go up and down)
# ============================================================================

daemons_active = Gauge(
    "ticker_daemons_active",
    "Number of timer daemons currently running",
    ["ticker"],
)

# ============================================================================
# HISTOGRAMS
# ============================================================================

tick_lag_seconds = Histogram(
    "ticker_tick_lag_seconds",
    "Time a tick spent queued between emission and consumption",
    ["ticker"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 60.0],
)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def record_daemon_started(ticker: str):
    """Record a timer daemon start."""
    daemons_active.labels(ticker=ticker).inc()


def record_daemon_stopped(ticker: str, reason: str):
    """Record a timer daemon exit and why it happened."""
    daemons_active.labels(ticker=ticker).dec()
    daemon_exits_total.labels(ticker=ticker, reason=reason).inc()


def record_tick_emitted(ticker: str):
    """Record a tick sent on the tick channel."""
    ticks_emitted_total.labels(ticker=ticker).inc()


def record_tick_consumed(ticker: str, lag: float):
    """
    Record a tick taken off the tick channel.

    Args:
        ticker: Ticker name
        lag: Seconds between emission and consumption
    """
    ticks_consumed_total.labels(ticker=ticker).inc()
    tick_lag_seconds.labels(ticker=ticker).observe(max(lag, 0.0))


def record_item_yielded(ticker: str):
    """Record a source item handed to the consumer."""
    items_yielded_total.labels(ticker=ticker).inc()
