from __future__ import annotations

from .data_uri import ImageDataUri, parse_data_uri
from .errors import DeviceError, SpotterError, TransportError, ValidationError
from .types import Classifier, SweetTreatResult

__all__ = [
    "Classifier",
    "SweetTreatResult",
    "ImageDataUri",
    "parse_data_uri",
    "SpotterError",
    "ValidationError",
    "TransportError",
    "DeviceError",
    "StaticClassifier",
    "GeminiSweetTreatClassifier",
    "OpenAISweetTreatClassifier",
]


def __getattr__(name: str):
    if name == "StaticClassifier":
        from .static import StaticClassifier

        return StaticClassifier
    if name == "GeminiSweetTreatClassifier":
        from .gemini_client import GeminiSweetTreatClassifier

        return GeminiSweetTreatClassifier
    if name == "OpenAISweetTreatClassifier":
        from .openai_client import OpenAISweetTreatClassifier

        return OpenAISweetTreatClassifier
    raise AttributeError(f"module 'spotter.ai' has no attribute {name!r}")
