from __future__ import annotations

from station.sequencer import CaptionSequencer
from spotter.web.effects import Caption, caption_offsets, total_duration_ms

CAPTIONS = (Caption("first", 1000), Caption("second", 500), Caption("third", 1500))


def test_offsets_and_total() -> None:
    assert caption_offsets(CAPTIONS) == [0, 1000, 1500]
    assert total_duration_ms(CAPTIONS) == 3000


def test_captions_play_in_order_then_complete(fake_scheduler) -> None:
    sequencer = CaptionSequencer(fake_scheduler)
    shown: list[str] = []
    finished: list[int] = []

    token = sequencer.start(CAPTIONS, lambda t, c: shown.append(c.text), finished.append)

    assert sequencer.running
    fake_scheduler.advance(0.0)
    assert shown == ["first"]
    fake_scheduler.advance(1.2)
    assert shown == ["first", "second"]
    assert finished == []
    fake_scheduler.advance(1.8)
    assert shown == ["first", "second", "third"]
    assert finished == [token]
    assert not sequencer.running
    assert fake_scheduler.pending == []


def test_cancel_stops_pending_callbacks(fake_scheduler) -> None:
    sequencer = CaptionSequencer(fake_scheduler)
    shown: list[str] = []
    finished: list[int] = []

    token = sequencer.start(CAPTIONS, lambda t, c: shown.append(c.text), finished.append)
    fake_scheduler.advance(0.5)
    sequencer.cancel()
    fake_scheduler.advance(10.0)

    assert shown == ["first"]
    assert finished == []
    assert sequencer.token != token
    assert not sequencer.running


def test_stale_callback_racing_cancel_is_ignored(fake_scheduler) -> None:
    sequencer = CaptionSequencer(fake_scheduler)
    shown: list[str] = []
    finished: list[int] = []

    sequencer.start(CAPTIONS, lambda t, c: shown.append(c.text), finished.append)
    sequencer.cancel()
    fake_scheduler.fire_cancelled()

    assert shown == []
    assert finished == []


def test_restart_supersedes_previous_run(fake_scheduler) -> None:
    sequencer = CaptionSequencer(fake_scheduler)
    seen: list[tuple[int, str]] = []
    finished: list[int] = []

    old = sequencer.start(CAPTIONS, lambda t, c: seen.append((t, c.text)), finished.append)
    new = sequencer.start(
        (Caption("only", 200),), lambda t, c: seen.append((t, c.text)), finished.append
    )
    fake_scheduler.advance(5.0)

    assert new != old
    assert seen == [(new, "only")]
    assert finished == [new]
