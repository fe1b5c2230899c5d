from __future__ import annotations

import argparse
import logging
import sys
import threading
import time
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from spotter.api.actions import check_for_sweet_treat
from spotter.api.client import SpotterHttpClient
from spotter.api.config_loader import load_config
from spotter.api.main import build_classifier
from spotter.web.effects import NEGATIVE_MESSAGE, POSITIVE_MESSAGE

from .capture import CameraFactory, OpenCVCamera, StubCamera
from .feedback import TerminalFeedback
from .session import ClassificationBoundary, SpotterSession, UIState


def parse_resolution(value: str | None) -> tuple[int, int] | None:
    if value is None:
        return None
    parts = value.lower().split("x")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError("resolution must be WIDTHxHEIGHT")
    width, height = parts
    try:
        return int(width), int(height)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("resolution must be numeric") from exc


def build_camera_factory(
    kind: str, source: str, resolution: tuple[int, int] | None
) -> CameraFactory:
    if kind == "opencv":
        try:
            converted_source: int | str = int(source)
        except ValueError:
            converted_source = source
        return lambda: OpenCVCamera(source=converted_source, resolution=resolution)
    sample = Path(source) if source else None
    return lambda: StubCamera(sample_path=sample if sample and sample.exists() else None)


def build_boundary(args: argparse.Namespace) -> ClassificationBoundary:
    if args.api == "http":
        client = SpotterHttpClient(base_url=args.api_url, timeout=args.api_timeout)
        return client.check_for_sweet_treat
    cfg = load_config(args.config if args.config and Path(args.config).exists() else None)
    if args.backend:
        cfg.classifier.backend = args.backend
    classifier = build_classifier(cfg.classifier)
    return lambda photo_data_uri: check_for_sweet_treat(photo_data_uri, classifier)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ask Sweet Spotter about a photo from the terminal")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--image", default=None, help="path of an image file to classify")
    source.add_argument(
        "--camera",
        choices=["stub", "opencv"],
        default=None,
        help="capture a photo from a camera backend instead of a file",
    )
    parser.add_argument(
        "--camera-source",
        default="0",
        help="camera index or URL (OpenCV) or sample image path (stub)",
    )
    parser.add_argument(
        "--camera-resolution",
        type=parse_resolution,
        default=None,
        help="force camera resolution WIDTHxHEIGHT (OpenCV only)",
    )
    parser.add_argument(
        "--api",
        choices=["local", "http"],
        default="local",
        help="classify in-process or through a running server",
    )
    parser.add_argument("--api-url", default="http://127.0.0.1:8000", help="Base URL for --api http")
    parser.add_argument("--api-timeout", type=float, default=60.0, help="HTTP timeout in seconds")
    parser.add_argument("--config", default="config/spotter.json", help="server config for --api local")
    parser.add_argument(
        "--backend",
        choices=["gemini", "openai", "static"],
        default=None,
        help="override classifier backend for --api local",
    )
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    return parser


def run_session(session: SpotterSession, args: argparse.Namespace, poll_interval: float = 0.1) -> int:
    settled = threading.Event()

    def on_transition(old: UIState, new: UIState) -> None:
        print(f"[station] {old.value} -> {new.value}")
        if new in (UIState.RESOLVED, UIState.IDLE) and old is not UIState.CAMERA_ACTIVE:
            settled.set()

    session.add_listener(on_transition)

    if args.image:
        submitted = session.submit_file(args.image)
    else:
        session.open_camera()
        submitted = session.capture()
        if not submitted:
            session.reset()

    if submitted:
        last_caption = ""
        while not settled.wait(poll_interval):
            caption = session.caption
            if caption and caption != last_caption:
                print(f"[station] \"{caption}\"")
                last_caption = caption

    for notification in session.dismiss_notifications():
        print(f"[station] {notification.title}: {notification.message}")

    if session.state is UIState.RESOLVED and session.result is not None:
        message = POSITIVE_MESSAGE if session.result.is_sweet_treat else NEGATIVE_MESSAGE
        print(f"[station] {message}")
        session.reset()
        return 0
    session.reset()
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s [%(name)s] %(message)s",
    )

    try:
        boundary = build_boundary(args)
    except ValueError as exc:
        print(f"[station] {exc}")
        return 2

    session = SpotterSession(
        boundary,
        camera_factory=build_camera_factory(
            args.camera or "stub", args.camera_source, args.camera_resolution
        ),
        feedback=TerminalFeedback(),
    )
    started = time.monotonic()
    code = run_session(session, args)
    if args.verbose:
        print(f"[station] finished in {time.monotonic() - started:.1f}s")
    return code


if __name__ == "__main__":
    sys.exit(main())
