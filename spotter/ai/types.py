from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from .data_uri import ImageDataUri
from .errors import TransportError

SWEET_TREAT_PROMPT = (
    "You are an expert at recognising sweet treats in photos. "
    "A sweet treat is a dessert, a candy, or a baked good that is high in sugar. "
    "Savory food, including plain bread, is not a sweet treat.\n\n"
    "Decide whether the supplied image shows a sweet treat. "
    "Return a JSON object with a single boolean field 'isSweetTreat'."
)


class Classifier(Protocol):
    def classify(self, photo: ImageDataUri) -> "SweetTreatResult": ...


@dataclass(frozen=True)
class SweetTreatResult:
    is_sweet_treat: bool

    def to_dict(self) -> dict[str, bool]:
        return {"isSweetTreat": self.is_sweet_treat}

    @classmethod
    def from_payload(cls, payload: Any) -> "SweetTreatResult":
        """Build a result from a decoded model response.

        The response must be an object whose ``isSweetTreat`` field is a real
        boolean; strings like ``"true"`` are treated as malformed output.
        """
        if not isinstance(payload, dict):
            raise TransportError("Model response was not a JSON object")
        value = payload.get("isSweetTreat")
        if not isinstance(value, bool):
            raise TransportError("Model response did not include a boolean isSweetTreat")
        return cls(is_sweet_treat=value)


__all__ = ["Classifier", "SweetTreatResult", "SWEET_TREAT_PROMPT"]
