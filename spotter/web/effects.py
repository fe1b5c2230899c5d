from __future__ import annotations

import random
from dataclasses import asdict, dataclass
from typing import Sequence

POSITIVE_MESSAGE = "A GREAT SWEET TREAT! Enjoy"
NEGATIVE_MESSAGE = "Oh no, sorry, this is not a sweet treat!"

DEFAULT_CONFETTI_COUNT = 150


@dataclass(frozen=True)
class Caption:
    text: str
    duration_ms: int


DEFAULT_CAPTIONS: tuple[Caption, ...] = (
    Caption("Wait a second, is this what I think it is?", 3700),
    Caption("Could this be, could this be a sweet treat?", 3300),
    Caption("It certainly looks like a sweet treat", 2200),
    Caption("and it smells like a sweet treat.", 3100),
    Caption("Only one way to find out, I'm going to take a bite.", 4800),
    Caption("It is. I knew it. A sweet treat all along.", 3400),
    Caption("And a really good sweet treat at that.", 3400),
)


def total_duration_ms(captions: Sequence[Caption]) -> int:
    """Length of the caption sequence; the positive verdict is revealed after it."""
    return sum(max(0, caption.duration_ms) for caption in captions)


def caption_offsets(captions: Sequence[Caption]) -> list[int]:
    offsets: list[int] = []
    elapsed = 0
    for caption in captions:
        offsets.append(elapsed)
        elapsed += max(0, caption.duration_ms)
    return offsets


@dataclass(frozen=True)
class ConfettiPiece:
    id: int
    left_percent: float
    delay_s: float
    duration_s: float
    hue: float
    rotation_deg: float

    def to_dict(self) -> dict[str, float | int]:
        return asdict(self)


def generate_confetti(
    count: int = DEFAULT_CONFETTI_COUNT, rng: random.Random | None = None
) -> list[ConfettiPiece]:
    source = rng or random.Random()
    pieces: list[ConfettiPiece] = []
    for index in range(max(0, count)):
        pieces.append(
            ConfettiPiece(
                id=index,
                left_percent=source.random() * 100.0,
                delay_s=source.random() * 5.0,
                duration_s=source.random() * 3.0 + 2.0,
                hue=source.random() * 360.0,
                rotation_deg=source.random() * 360.0,
            )
        )
    return pieces


__all__ = [
    "Caption",
    "ConfettiPiece",
    "DEFAULT_CAPTIONS",
    "DEFAULT_CONFETTI_COUNT",
    "POSITIVE_MESSAGE",
    "NEGATIVE_MESSAGE",
    "caption_offsets",
    "generate_confetti",
    "total_duration_ms",
]
