from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from .config_loader import SUPPORTED_BACKENDS, ClassifierSettings, load_config
from .logging_utils import configure_logging, install_startup_log_buffer, secrets_from_env
from .server import create_app
from ..ai import (
    Classifier,
    GeminiSweetTreatClassifier,
    OpenAISweetTreatClassifier,
    StaticClassifier,
)

logger = logging.getLogger(__name__)


def build_classifier(settings: ClassifierSettings) -> Classifier:
    """Instantiate the configured backend.

    Raises ``ValueError`` when the backend is unknown or its API key
    environment variable is unset.
    """
    kind = settings.backend
    if kind == "static":
        return StaticClassifier(is_sweet_treat=settings.static_verdict)
    if kind == "gemini":
        key = os.environ.get(settings.gemini.api_key_env)
        if not key:
            raise ValueError(
                f"Environment variable {settings.gemini.api_key_env} must be set for the Gemini classifier"
            )
        return GeminiSweetTreatClassifier(
            api_key=key,
            model=settings.gemini.model,
            base_url=settings.gemini.base_url,
            timeout=settings.gemini.timeout,
        )
    if kind == "openai":
        key = os.environ.get(settings.openai.api_key_env)
        if not key:
            raise ValueError(
                f"Environment variable {settings.openai.api_key_env} must be set for the OpenAI classifier"
            )
        return OpenAISweetTreatClassifier(
            api_key=key,
            model=settings.openai.model,
            base_url=settings.openai.base_url,
            timeout=settings.openai.timeout,
        )
    raise ValueError(f"Unsupported classifier backend '{kind}'")


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser with minimal CLI flags.

    Configuration is loaded from config/spotter.json; flags only override it.
    """
    parser = argparse.ArgumentParser(
        description="Run the Sweet Spotter API server",
        epilog="Configuration is loaded from config/spotter.json. "
        "CLI arguments override config file settings.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/spotter.json",
        help="Path to JSON configuration file (default: config/spotter.json)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Override server host (default: from config file)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Override server port (default: from config file)",
    )
    parser.add_argument(
        "--backend",
        choices=SUPPORTED_BACKENDS,
        default=None,
        help="Override classifier backend (default: from config file)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = load_config(args.config if Path(args.config).exists() else None)
    except ValueError as exc:
        logger.error("Failed to load configuration: %s", exc)
        sys.exit(1)
    if not Path(args.config).exists():
        logger.info(
            "Configuration file %s not found; using defaults. "
            "Copy config/spotter.example.json to get started.",
            args.config,
        )

    if args.host:
        cfg.server.host = args.host
    if args.port:
        cfg.server.port = args.port
    if args.backend:
        cfg.classifier.backend = args.backend

    secrets = secrets_from_env(
        [cfg.classifier.gemini.api_key_env, cfg.classifier.openai.api_key_env]
    )
    configure_logging(cfg.server.log_level, secrets=secrets)
    startup_buffer = install_startup_log_buffer(
        output_dir=Path(cfg.server.startup_log_dir),
        window_seconds=cfg.server.startup_log_window_seconds,
        secrets=secrets,
    )

    logger.info("Server configuration: %s:%d", cfg.server.host, cfg.server.port)
    logger.info("Classifier backend: %s", cfg.classifier.backend)

    try:
        classifier = build_classifier(cfg.classifier)
    except ValueError as exc:
        logger.error("%s", exc)
        startup_buffer.close()
        sys.exit(1)

    app = create_app(classifier=classifier, ui_settings=cfg.ui)
    try:
        uvicorn.run(app, host=cfg.server.host, port=cfg.server.port, log_level=cfg.server.log_level.lower())
    finally:
        startup_buffer.close()


if __name__ == "__main__":
    main()
