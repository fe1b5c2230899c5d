from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol, Sequence

from spotter.web.effects import Caption, caption_offsets, total_duration_ms

logger = logging.getLogger(__name__)


class ScheduledCall(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ScheduledCall: ...


class ThreadingScheduler:
    """Run each callback on a daemon ``threading.Timer``."""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ScheduledCall:
        timer = threading.Timer(max(0.0, delay_s), callback)
        timer.daemon = True
        timer.start()
        return timer


class CaptionSequencer:
    """Timed caption playback keyed to a sequence token.

    ``start`` schedules one callback per caption at its cumulative offset and a
    completion callback at the summed duration. ``cancel`` advances the token
    and cancels pending timers; a callback whose token is stale does nothing
    even if its timer had already fired.
    """

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._lock = threading.Lock()
        self._token = 0
        self._pending: list[ScheduledCall] = []
        self._running = False

    @property
    def token(self) -> int:
        with self._lock:
            return self._token

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def start(
        self,
        captions: Sequence[Caption],
        on_caption: Callable[[int, Caption], None],
        on_complete: Callable[[int], None],
    ) -> int:
        self.cancel()
        with self._lock:
            token = self._token
            self._running = True

        calls: list[ScheduledCall] = []
        for offset, caption in zip(caption_offsets(captions), captions):
            calls.append(
                self._scheduler.call_later(
                    offset / 1000.0,
                    self._guard(token, lambda c=caption: on_caption(token, c)),
                )
            )
        calls.append(
            self._scheduler.call_later(
                total_duration_ms(captions) / 1000.0,
                self._guard(token, lambda: self._finish(token, on_complete), final=True),
            )
        )

        with self._lock:
            superseded = token != self._token
            if not superseded and self._running:
                self._pending.extend(calls)
        if superseded:
            for call in calls:
                call.cancel()
        logger.debug("Caption sequence started token=%d captions=%d", token, len(captions))
        return token

    def cancel(self) -> None:
        with self._lock:
            self._token += 1
            pending, self._pending = self._pending, []
            self._running = False
        for call in pending:
            call.cancel()

    def _guard(
        self, token: int, callback: Callable[[], None], final: bool = False
    ) -> Callable[[], None]:
        def run() -> None:
            with self._lock:
                if token != self._token:
                    return
                if final:
                    self._running = False
                    self._pending = []
            callback()

        return run

    def _finish(self, token: int, on_complete: Callable[[int], None]) -> None:
        logger.debug("Caption sequence finished token=%d", token)
        on_complete(token)


__all__ = ["CaptionSequencer", "ScheduledCall", "Scheduler", "ThreadingScheduler"]
