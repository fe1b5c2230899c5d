from __future__ import annotations

from typing import Callable

import pytest


class _FakeCall:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Deterministic clock: callbacks run only when ``advance`` passes them."""

    def __init__(self) -> None:
        self.now = 0.0
        self.calls: list[_FakeCall] = []

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> _FakeCall:
        call = _FakeCall(self.now + delay_s, callback)
        self.calls.append(call)
        return call

    @property
    def pending(self) -> list[_FakeCall]:
        return [c for c in self.calls if not c.cancelled and c.due > self.now]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            ready = [c for c in self.calls if not c.cancelled and c.due <= target]
            if not ready:
                break
            call = min(ready, key=lambda c: c.due)
            self.calls.remove(call)
            self.now = call.due
            call.callback()
        self.now = target

    def fire_cancelled(self) -> None:
        """Run callbacks that were cancelled, as a timer racing its cancel would."""
        for call in [c for c in self.calls if c.cancelled]:
            self.calls.remove(call)
            call.callback()


@pytest.fixture
def fake_scheduler() -> FakeScheduler:
    return FakeScheduler()


PNG_DATA_URI = "data:image/png;base64,Zm9v"


@pytest.fixture
def png_data_uri() -> str:
    return PNG_DATA_URI
