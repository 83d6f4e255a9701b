"""Shared fixtures."""

import heapq
import itertools
from datetime import datetime, timezone

import pytest

from northstar.celestial import ObserverLocation


class ManualHandle:
    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Fake-clock scheduler with the asyncio ``call_later`` signature."""

    def __init__(self):
        self.now = 0.0
        self._queue = []
        self._counter = itertools.count()

    def call_later(self, delay, callback, *args):
        handle = ManualHandle()
        heapq.heappush(self._queue, (self.now + delay, next(self._counter), handle, callback, args))
        return handle

    @property
    def pending(self):
        return sum(1 for entry in self._queue if not entry[2].cancelled)

    def advance(self, seconds):
        """Run every callback due within ``seconds`` from now."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target + 1e-9:
            when, _, handle, callback, args = heapq.heappop(self._queue)
            self.now = when
            if not handle.cancelled:
                callback(*args)
        self.now = target

    def run_all(self, limit=10_000):
        for _ in range(limit):
            if not self._queue:
                return
            self.advance(self._queue[0][0] - self.now)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def greenwich():
    return ObserverLocation(latitude=51.4769, longitude=0.0)


@pytest.fixture
def fixed_time():
    return datetime(2024, 3, 20, 21, 0, 0, tzinfo=timezone.utc)
