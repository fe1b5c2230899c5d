from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

from .errors import ValidationError

INVALID_DATA_FORMAT_MESSAGE = "Invalid data format provided."

_DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[^;]+);base64,(?P<payload>.+)\Z")


@dataclass(frozen=True)
class ImageDataUri:
    """A still image embedded as ``data:<mime>;base64,<payload>``."""

    mime_type: str
    payload: str

    def __str__(self) -> str:
        return f"data:{self.mime_type};base64,{self.payload}"

    def decode(self) -> bytes:
        try:
            return base64.b64decode(self.payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError(INVALID_DATA_FORMAT_MESSAGE) from exc

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> "ImageDataUri":
        if not is_image_mime(mime_type):
            raise ValidationError(INVALID_DATA_FORMAT_MESSAGE)
        if not data:
            raise ValidationError(INVALID_DATA_FORMAT_MESSAGE)
        encoded = base64.b64encode(data).decode("ascii")
        return cls(mime_type=mime_type.strip().lower(), payload=encoded)


def is_image_mime(mime_type: str | None) -> bool:
    if not mime_type:
        return False
    return mime_type.strip().lower().startswith("image/")


def parse_data_uri(value: object) -> ImageDataUri:
    """Validate ``value`` and split it into MIME type and payload.

    Raises ``ValidationError`` for anything that is not a string of the form
    ``data:image/<subtype>;base64,<payload>``. The payload is not decoded here.
    """
    if not isinstance(value, str):
        raise ValidationError(INVALID_DATA_FORMAT_MESSAGE)
    match = _DATA_URI_PATTERN.match(value)
    if match is None:
        raise ValidationError(INVALID_DATA_FORMAT_MESSAGE)
    mime_type = match.group("mime")
    if not mime_type.startswith("image/"):
        raise ValidationError(INVALID_DATA_FORMAT_MESSAGE)
    return ImageDataUri(mime_type=mime_type, payload=match.group("payload"))


__all__ = [
    "ImageDataUri",
    "INVALID_DATA_FORMAT_MESSAGE",
    "is_image_mime",
    "parse_data_uri",
]
