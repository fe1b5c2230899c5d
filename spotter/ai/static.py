from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .data_uri import ImageDataUri
from .types import Classifier, SweetTreatResult


@dataclass
class StaticClassifier(Classifier):
    """Offline stand-in that returns the same verdict for every photo."""

    is_sweet_treat: bool = True
    calls: List[ImageDataUri] = field(default_factory=list)

    def classify(self, photo: ImageDataUri) -> SweetTreatResult:
        self.calls.append(photo)
        return SweetTreatResult(is_sweet_treat=self.is_sweet_treat)


__all__ = ["StaticClassifier"]
