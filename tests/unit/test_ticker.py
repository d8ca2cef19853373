import gc
import itertools
import threading
import time
from datetime import timedelta

import pytest
from prometheus_client import REGISTRY

from ticker import Ticker, TickIter, every
from ticker.exceptions import TickChannelClosedError, TickerError, ValidationError

INTERVAL = 0.05  # Fast tick for testing
EPSILON = 0.01
GRACE = 0.5


def test_yields_every_item_in_order(ticker_name):
    ticker = Ticker(range(10), INTERVAL, name=ticker_name)

    start = time.monotonic()
    values = list(ticker)
    elapsed = time.monotonic() - start

    assert values == list(range(10))
    # Ten items plus the tick spent discovering exhaustion
    assert elapsed >= 10 * INTERVAL - EPSILON
    assert ticker.closed


def test_first_item_waits_one_interval(ticker_name):
    start = time.monotonic()
    with Ticker(["a", "b"], INTERVAL, name=ticker_name) as ticker:
        first = next(iter(ticker))

    assert first == "a"
    assert time.monotonic() - start >= INTERVAL - EPSILON


def test_items_are_spaced_by_interval(ticker_name):
    with Ticker(itertools.count(), INTERVAL, name=ticker_name) as ticker:
        it = iter(ticker)
        stamps = []
        for _ in range(5):
            next(it)
            stamps.append(time.monotonic())

    gaps = [b - a for a, b in zip(stamps, stamps[1:])]
    assert all(gap >= INTERVAL - EPSILON for gap in gaps)


def test_eleventh_call_reports_exhaustion(ticker_name):
    it = iter(Ticker(range(10), INTERVAL, name=ticker_name))

    assert [next(it) for _ in range(10)] == list(range(10))

    start = time.monotonic()
    with pytest.raises(StopIteration):
        next(it)
    # Exhaustion is only discovered after one more tick
    assert time.monotonic() - start >= INTERVAL - EPSILON


def test_exhausted_iterator_stops_without_waiting(ticker_name):
    it = iter(Ticker([1], INTERVAL, name=ticker_name))
    assert list(it) == [1]

    start = time.monotonic()
    for _ in range(3):
        with pytest.raises(StopIteration):
            next(it)
    assert time.monotonic() - start < INTERVAL


def test_empty_source_costs_one_tick(ticker_name):
    start = time.monotonic()
    assert list(Ticker([], INTERVAL, name=ticker_name)) == []
    assert time.monotonic() - start >= INTERVAL - EPSILON


def test_lagging_consumer_gets_buffered_ticks(ticker_name):
    with Ticker(itertools.count(), INTERVAL, name=ticker_name) as ticker:
        it = iter(ticker)
        next(it)

        time.sleep(5 * INTERVAL)

        start = time.monotonic()
        burst = [next(it) for _ in range(3)]
        elapsed = time.monotonic() - start

    assert burst == [1, 2, 3]
    assert elapsed < INTERVAL


def test_close_stops_daemon(ticker_name, daemon_threads, wait_until):
    ticker = Ticker(itertools.count(), INTERVAL, name=ticker_name)
    assert len(daemon_threads(ticker_name)) == 1

    ticker.close()
    ticker.close()  # idempotent

    assert ticker.closed
    assert wait_until(lambda: not daemon_threads(ticker_name), INTERVAL + GRACE)


def test_with_block_stops_daemon(ticker_name, daemon_threads, wait_until):
    with Ticker(itertools.count(), INTERVAL, name=ticker_name) as ticker:
        assert next(iter(ticker)) == 0

    assert ticker.closed
    assert wait_until(lambda: not daemon_threads(ticker_name), INTERVAL + GRACE)


def test_dropped_handle_stops_daemon(ticker_name, daemon_threads, wait_until):
    def consume_three():
        it = iter(Ticker(itertools.count(), INTERVAL, name=ticker_name))
        return [next(it) for _ in range(3)]

    assert consume_three() == [0, 1, 2]
    gc.collect()

    assert wait_until(lambda: not daemon_threads(ticker_name), INTERVAL + GRACE)


def test_exhaustion_stops_daemon(ticker_name, daemon_threads, wait_until):
    ticker = Ticker(range(2), INTERVAL, name=ticker_name)
    assert list(ticker) == [0, 1]

    assert wait_until(lambda: not daemon_threads(ticker_name), INTERVAL + GRACE)


def test_next_after_close_fails_loudly(ticker_name):
    ticker = Ticker(itertools.count(), INTERVAL, name=ticker_name)
    it = iter(ticker)
    ticker.close()

    start = time.monotonic()
    with pytest.raises(TickChannelClosedError):
        next(it)
    assert time.monotonic() - start < INTERVAL


def test_close_from_other_thread_wakes_blocked_consumer(ticker_name):
    ticker = Ticker(itertools.count(), 10.0, name=ticker_name)
    it = iter(ticker)
    closer = threading.Timer(INTERVAL, ticker.close)
    closer.start()

    start = time.monotonic()
    try:
        with pytest.raises(TickChannelClosedError):
            next(it)
    finally:
        closer.cancel()
    assert time.monotonic() - start < GRACE


def test_daemon_death_is_not_exhaustion(ticker_name):
    ticker = Ticker(itertools.count(), INTERVAL, name=ticker_name)
    it = iter(ticker)
    # Stop the daemon behind the live handle's back
    ticker._kill.send(None)

    with pytest.raises(TickChannelClosedError) as exc_info:
        for _ in range(10):
            next(it)

    assert exc_info.value.details == {"ticker": ticker_name}
    assert not ticker.closed
    ticker.close()


def test_single_consumer_only(ticker_name):
    with Ticker(range(3), INTERVAL, name=ticker_name) as ticker:
        it = iter(ticker)
        assert isinstance(it, TickIter)
        assert iter(it) is it
        with pytest.raises(TickerError):
            iter(ticker)


def test_tick_iter_close_closes_ticker(ticker_name):
    ticker = Ticker(range(3), INTERVAL, name=ticker_name)
    with iter(ticker) as it:
        assert it.ticker is ticker
        assert not it.closed

    assert it.closed
    assert ticker.closed


@pytest.mark.parametrize(
    "interval",
    [
        0,
        -1,
        -0.5,
        0.0,
        float("nan"),
        float("inf"),
        1e10,
        timedelta(0),
        timedelta(seconds=-1),
        timedelta(days=200000),
        "1",
        None,
        True,
    ],
)
def test_invalid_interval_rejected(interval, ticker_name, daemon_threads):
    with pytest.raises(ValidationError) as exc_info:
        Ticker(range(3), interval, name=ticker_name)

    assert isinstance(exc_info.value, ValueError)
    assert exc_info.value.details["field"] == "interval"
    assert not daemon_threads(ticker_name)


def test_timedelta_interval(ticker_name):
    with Ticker(range(3), timedelta(milliseconds=50), name=ticker_name) as ticker:
        assert ticker.interval == pytest.approx(0.05)


@pytest.mark.parametrize("name", ["", 7])
def test_invalid_name_rejected(name):
    with pytest.raises(ValidationError):
        Ticker(range(3), INTERVAL, name=name)


def test_default_name_from_config():
    with Ticker(range(3), INTERVAL) as ticker:
        assert ticker.name == "default"
        assert "default" in repr(ticker)


def test_non_iterable_source_rejected(ticker_name, daemon_threads):
    with pytest.raises(TypeError):
        Ticker(42, INTERVAL, name=ticker_name)

    assert not daemon_threads(ticker_name)


def test_get_stats(ticker_name):
    with Ticker("abc", INTERVAL, name=ticker_name) as ticker:
        assert list(ticker) == ["a", "b", "c"]
        stats = ticker.get_stats()

    assert stats["name"] == ticker_name
    assert stats["interval"] == INTERVAL
    assert stats["items_yielded"] == 3
    assert stats["ticks_received"] == 4
    assert stats["elapsed_seconds"] >= 4 * INTERVAL - EPSILON
    assert 0 < stats["rate"] <= 1 / INTERVAL
    assert stats["closed"] is True


def test_every_counts_up(ticker_name):
    with every(INTERVAL, name=ticker_name) as ticker:
        it = iter(ticker)
        assert [next(it) for _ in range(3)] == [0, 1, 2]


def test_metrics_recorded(ticker_name, wait_until):
    def sample(metric, **labels):
        return REGISTRY.get_sample_value(metric, {"ticker": ticker_name, **labels})

    with Ticker(range(3), INTERVAL, name=ticker_name) as ticker:
        it = iter(ticker)
        for _ in range(3):
            next(it)

    assert sample("ticker_items_yielded_total") == 3
    assert sample("ticker_ticks_consumed_total") == 3
    assert sample("ticker_ticks_emitted_total") >= 3
    assert sample("ticker_tick_lag_seconds_count") == 3
    assert wait_until(lambda: sample("ticker_daemons_active") == 0, INTERVAL + GRACE)
    # A tick send racing the close can end the daemon as "consumer_gone"
    exits = [sample("ticker_daemon_exits_total", reason=r) or 0 for r in ("shutdown", "consumer_gone")]
    assert sum(exits) == 1
