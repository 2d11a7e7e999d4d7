"""
Shared test fixtures.

``FakeProxmoxClient`` stands in for the REST client wherever only the
next-VMID query matters, so no test touches the network.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, List, Optional

import pytest


class FakeProxmoxClient:
    """Answers ``get_next_id`` from a script, or with ``max(floor, start)``.

    Scripted replies that are exceptions are raised instead of returned.
    Tracks the floors it was asked for and the peak number of overlapping
    calls.
    """

    base_url = "https://pve.example.com:8006/api2/json"

    def __init__(self, replies: Optional[list] = None, start: int = 100, delay: float = 0.0):
        self.floors: List[int] = []
        self.peak_concurrent_calls = 0
        self._replies = list(replies) if replies is not None else None
        self._start = start
        self._delay = delay
        self._active = 0
        self._stats_lock = threading.Lock()

    def get_next_id(self, floor: int) -> int:
        with self._stats_lock:
            self.floors.append(floor)
            self._active += 1
            self.peak_concurrent_calls = max(self.peak_concurrent_calls, self._active)
        try:
            if self._delay:
                time.sleep(self._delay)
            if self._replies is not None:
                reply = self._replies.pop(0)
                if isinstance(reply, Exception):
                    raise reply
                return reply
            return max(floor, self._start)
        finally:
            with self._stats_lock:
                self._active -= 1

    def close(self) -> None:
        return None


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


@pytest.fixture
def fake_client():
    return FakeProxmoxClient()
