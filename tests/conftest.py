from __future__ import annotations

import threading
import time
from typing import Callable, FrozenSet, List

import pytest

from core.block import Block
from core.errors import RenderError
from core.widgets import Widget


class FakeBlock(Block):
    """Block that records renders and handler calls for assertions."""

    kind = "fake"

    def __init__(
        self,
        block_id: int,
        interval,
        bus=None,
        delay: float = 0.0,
        fail: bool = False,
        signals: FrozenSet[int] = frozenset(),
    ):
        super().__init__(block_id, bus, {"interval": interval})
        self.delay = delay
        self.fail = fail
        self._signals = frozenset(signals)
        self.render_times: List[float] = []
        self.clicks: List = []
        self.signals_seen: List[int] = []
        self._lock = threading.Lock()
        self._active = 0
        self.max_active = 0

    @property
    def signals(self) -> FrozenSet[int]:
        return self._signals

    @property
    def renders(self) -> int:
        return len(self.render_times)

    def render(self):
        with self._lock:
            self._active += 1
            self.max_active = max(self.max_active, self._active)
            self.render_times.append(time.monotonic())
            count = len(self.render_times)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.fail:
                raise RenderError(self.kind, f"failure #{count}")
            return [Widget(block_id=self.block_id, text=f"{self.block_id}:{count}")]
        finally:
            with self._lock:
                self._active -= 1

    def signal(self, signum: int):
        self.signals_seen.append(signum)
        self.request_update()

    def click(self, event):
        self.clicks.append(event)
        self.request_update()


def wait_for(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def fake_block():
    return FakeBlock


@pytest.fixture
def wait():
    return wait_for


@pytest.fixture
def frames():
    """Collects emitted frames; safe to read from the test thread."""
    collected: List[List[Widget]] = []
    lock = threading.Lock()

    def emit(widgets):
        with lock:
            collected.append(list(widgets))

    def snapshot() -> List[List[Widget]]:
        with lock:
            return list(collected)

    emit.snapshot = snapshot
    return emit


@pytest.fixture
def running():
    """Starts schedulers and makes sure they are stopped after the test."""
    started = []

    def start(scheduler):
        scheduler.start()
        started.append(scheduler)
        return scheduler

    yield start
    for scheduler in started:
        scheduler.stop()
        scheduler.join(timeout=2)

