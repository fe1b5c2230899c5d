from __future__ import annotations

import argparse
import io
import json

import pytest
from PIL import Image

from spotter.web.effects import NEGATIVE_MESSAGE, POSITIVE_MESSAGE, Caption
from station.capture import StubCamera
from station.feedback import RecordingFeedback
from station.main import build_parser, main, parse_resolution, run_session
from station.session import SpotterSession, UIState


@pytest.fixture
def png_file(tmp_path):
    path = tmp_path / "brownie.png"
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color=(90, 50, 20)).save(buffer, format="PNG")
    path.write_bytes(buffer.getvalue())
    return path


def _static_config(tmp_path, verdict: bool):
    path = tmp_path / "spotter.json"
    path.write_text(
        json.dumps({"classifier": {"backend": "static", "static_verdict": verdict}}),
        encoding="utf-8",
    )
    return path


def test_parse_resolution() -> None:
    assert parse_resolution(None) is None
    assert parse_resolution("640x480") == (640, 480)
    assert parse_resolution("1280X720") == (1280, 720)
    with pytest.raises(argparse.ArgumentTypeError):
        parse_resolution("640")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_resolution("wide x tall")


def test_parser_requires_one_source() -> None:
    parser = build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args([])
    with pytest.raises(SystemExit):
        parser.parse_args(["--image", "a.png", "--camera", "stub"])


def test_main_reports_not_sweet(tmp_path, png_file, capsys) -> None:
    config = _static_config(tmp_path, verdict=False)

    code = main(["--image", str(png_file), "--config", str(config)])

    out = capsys.readouterr().out
    assert code == 0
    assert "[station] loading -> resolved" in out
    assert NEGATIVE_MESSAGE in out
    assert "*womp womp*" in out


def test_main_with_stub_camera(tmp_path, capsys) -> None:
    config = _static_config(tmp_path, verdict=False)

    code = main(["--camera", "stub", "--camera-source", "", "--config", str(config)])

    out = capsys.readouterr().out
    assert code == 0
    assert "idle -> camera_active" in out
    assert NEGATIVE_MESSAGE in out


def test_main_rejects_text_file(tmp_path, capsys) -> None:
    config = _static_config(tmp_path, verdict=True)
    notes = tmp_path / "notes.txt"
    notes.write_text("not a photo", encoding="utf-8")

    code = main(["--image", str(notes), "--config", str(config)])

    out = capsys.readouterr().out
    assert code == 1
    assert "Invalid File: Please upload an image file." in out


def test_main_missing_api_key(tmp_path, png_file, monkeypatch, capsys) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    code = main(
        [
            "--image",
            str(png_file),
            "--backend",
            "gemini",
            "--config",
            str(tmp_path / "absent.json"),
        ]
    )

    assert code == 2
    assert "GEMINI_API_KEY" in capsys.readouterr().out


def test_run_session_waits_for_caption_reveal(png_file, capsys) -> None:
    feedback = RecordingFeedback()
    session = SpotterSession(
        lambda uri: {"isSweetTreat": True},
        feedback=feedback,
        captions=(Caption("Analyzing frosting", 20), Caption("Checking sprinkles", 20)),
    )
    args = build_parser().parse_args(["--image", str(png_file)])

    code = run_session(session, args, poll_interval=0.005)

    out = capsys.readouterr().out
    assert code == 0
    assert "animating -> resolved" in out
    assert POSITIVE_MESSAGE in out
    assert feedback.events[:2] == ["success", "confetti"]
    assert session.state is UIState.IDLE


def test_run_session_camera_denied(capsys) -> None:
    def denied() -> StubCamera:
        raise RuntimeError("no device")

    session = SpotterSession(lambda uri: {"isSweetTreat": True}, camera_factory=denied)
    args = build_parser().parse_args(["--camera", "stub"])

    code = run_session(session, args)

    out = capsys.readouterr().out
    assert code == 1
    assert "Camera Access Denied" in out
    assert session.state is UIState.IDLE
