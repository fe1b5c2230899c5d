from __future__ import annotations

from typing import Protocol, Sequence

from spotter.web.effects import ConfettiPiece


class Feedback(Protocol):
    def success(self) -> None:
        ...

    def fail(self) -> None:
        ...

    def celebrate(self, pieces: Sequence[ConfettiPiece]) -> None:
        ...

    def stop(self) -> None:
        ...


class RecordingFeedback:
    """Feedback sink that records each cue; stands in for speakers and confetti."""

    def __init__(self) -> None:
        self._events: list[str] = []
        self.confetti: list[ConfettiPiece] = []
        self.playing: str | None = None

    def success(self) -> None:
        self._record("success")
        self.playing = "success"

    def fail(self) -> None:
        self._record("fail")
        self.playing = "fail"

    def celebrate(self, pieces: Sequence[ConfettiPiece]) -> None:
        self._record("confetti")
        self.confetti = list(pieces)

    def stop(self) -> None:
        self._record("stop")
        self.playing = None
        self.confetti = []

    @property
    def events(self) -> list[str]:
        return list(self._events)

    def _record(self, name: str) -> None:
        self._events.append(name)


class TerminalFeedback(RecordingFeedback):
    """Print cues for the command-line station."""

    def success(self) -> None:
        super().success()
        print("\a[station] *sparkle* success sound")

    def fail(self) -> None:
        super().fail()
        print("[station] *womp womp* fail sound")

    def celebrate(self, pieces: Sequence[ConfettiPiece]) -> None:
        super().celebrate(pieces)
        print(f"[station] Confetti! ({len(pieces)} pieces)")


__all__ = ["Feedback", "RecordingFeedback", "TerminalFeedback"]
