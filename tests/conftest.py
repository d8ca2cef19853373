"""
Configuration file for pytest.
This file ensures the project root is in the Python path.
"""

import os
import re
import sys
import threading
import time

import pytest

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from config import ticker as ticker_config  # noqa: E402


@pytest.fixture
def ticker_name(request):
    """A ticker name unique to the running test (isolates threads and metric labels)."""
    return "test-" + re.sub(r"[^A-Za-z0-9_]+", "-", request.node.name).strip("-")


@pytest.fixture
def daemon_threads():
    """Return live timer daemon threads belonging to a ticker name."""

    def _daemon_threads(name):
        prefix = f"{ticker_config.DAEMON_THREAD_PREFIX}-{name}-"
        return [t for t in threading.enumerate() if t.name.startswith(prefix) and t.is_alive()]

    return _daemon_threads


@pytest.fixture
def wait_until():
    """Poll a predicate until it holds or the timeout passes."""

    def _wait_until(predicate, timeout):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.005)
        return predicate()

    return _wait_until
