from __future__ import annotations

import base64
import io

import pytest
from PIL import Image

from spotter.ai.errors import ValidationError
from station.acquire import (
    FILE_READ_MESSAGE,
    FILE_TYPE_MESSAGE,
    DroppedFile,
    DropZone,
    ImageInputAcquirer,
    sniff_mime,
)


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color=(255, 200, 0)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_png_file_becomes_data_uri(tmp_path) -> None:
    path = tmp_path / "donut.png"
    data = _png_bytes()
    path.write_bytes(data)

    photo = ImageInputAcquirer().from_file(path)

    assert photo.mime_type == "image/png"
    assert photo.decode() == data
    assert str(photo).startswith("data:image/png;base64,")


def test_unknown_extension_is_sniffed(tmp_path) -> None:
    path = tmp_path / "capture"
    path.write_bytes(_png_bytes())

    photo = ImageInputAcquirer().from_file(path)

    assert photo.mime_type == "image/png"


def test_declared_content_type_wins(tmp_path) -> None:
    path = tmp_path / "upload.bin"
    path.write_bytes(b"\xff\xd8\xff\xe0 not really decoded")

    photo = ImageInputAcquirer().from_file(path, content_type="image/jpeg")

    assert photo.mime_type == "image/jpeg"


def test_text_file_is_refused(tmp_path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("cake recipe", encoding="utf-8")

    with pytest.raises(ValidationError) as excinfo:
        ImageInputAcquirer().from_file(path)

    assert excinfo.value.message == FILE_TYPE_MESSAGE


def test_undetectable_bytes_are_refused() -> None:
    assert sniff_mime(b"plain bytes") is None
    with pytest.raises(ValidationError) as excinfo:
        ImageInputAcquirer().from_bytes(b"plain bytes")
    assert excinfo.value.message == FILE_TYPE_MESSAGE


def test_missing_or_empty_file_reports_read_failure(tmp_path) -> None:
    acquirer = ImageInputAcquirer()
    with pytest.raises(ValidationError) as missing:
        acquirer.from_file(tmp_path / "gone.png")
    empty = tmp_path / "empty.png"
    empty.write_bytes(b"")
    with pytest.raises(ValidationError) as blank:
        acquirer.from_file(empty)

    assert missing.value.message == FILE_READ_MESSAGE
    assert blank.value.message == FILE_READ_MESSAGE


def test_drop_zone_tracks_highlight_and_takes_first_file(tmp_path) -> None:
    first = tmp_path / "first.png"
    second = tmp_path / "second.png"
    first.write_bytes(_png_bytes())
    second.write_text("ignored", encoding="utf-8")
    zone = DropZone()

    zone.drag_enter()
    assert zone.drag_active
    zone.drag_leave()
    assert not zone.drag_active
    zone.drag_over()
    photo = zone.drop([DroppedFile(first, "image/png"), second])

    assert not zone.drag_active
    assert base64.b64decode(photo.payload) == first.read_bytes()


def test_empty_drop_is_ignored() -> None:
    zone = DropZone()
    zone.drag_enter()

    assert zone.drop([]) is None
    assert not zone.drag_active
