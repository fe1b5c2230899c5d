from __future__ import annotations

import io
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from PIL import Image, UnidentifiedImageError

from spotter.ai.data_uri import ImageDataUri, is_image_mime
from spotter.ai.errors import ValidationError

logger = logging.getLogger(__name__)

FILE_TYPE_MESSAGE = "Please upload an image file."
FILE_READ_MESSAGE = "Failed to read the file."


@dataclass(frozen=True)
class DroppedFile:
    path: Path
    content_type: str | None = None


class ImageInputAcquirer:
    """Turn files and raw bytes into image data URIs.

    The MIME type is the declared content type when there is one, otherwise the
    type implied by the file name, otherwise whatever Pillow recognises in the
    bytes. Anything outside ``image/*`` is refused with ``ValidationError``.
    """

    def from_file(self, path: str | Path, content_type: str | None = None) -> ImageDataUri:
        file_path = Path(path)
        declared = content_type or mimetypes.guess_type(file_path.name)[0]
        if declared is not None and not is_image_mime(declared):
            raise ValidationError(FILE_TYPE_MESSAGE)
        try:
            data = file_path.read_bytes()
        except OSError as exc:
            logger.warning("Failed to read %s: %s", file_path, exc)
            raise ValidationError(FILE_READ_MESSAGE) from exc
        return self.from_bytes(data, content_type=declared)

    def from_bytes(self, data: bytes, content_type: str | None = None) -> ImageDataUri:
        if not data:
            raise ValidationError(FILE_READ_MESSAGE)
        mime_type = content_type or sniff_mime(data)
        if not is_image_mime(mime_type):
            raise ValidationError(FILE_TYPE_MESSAGE)
        return ImageDataUri.from_bytes(data, mime_type)


def sniff_mime(data: bytes) -> str | None:
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError):
        return None
    if not image_format:
        return None
    return Image.MIME.get(image_format)


class DropZone:
    """Drag-and-drop target: tracks the highlight flag and accepts the first file."""

    def __init__(self, acquirer: ImageInputAcquirer | None = None) -> None:
        self._acquirer = acquirer or ImageInputAcquirer()
        self.drag_active = False

    def drag_enter(self) -> None:
        self.drag_active = True

    def drag_over(self) -> None:
        self.drag_active = True

    def drag_leave(self) -> None:
        self.drag_active = False

    def drop(self, files: Sequence[DroppedFile | Path | str]) -> ImageDataUri | None:
        self.drag_active = False
        if not files:
            return None
        first = files[0]
        if isinstance(first, DroppedFile):
            return self._acquirer.from_file(first.path, content_type=first.content_type)
        return self._acquirer.from_file(first)


__all__ = [
    "FILE_TYPE_MESSAGE",
    "FILE_READ_MESSAGE",
    "DroppedFile",
    "DropZone",
    "ImageInputAcquirer",
    "sniff_mime",
]
