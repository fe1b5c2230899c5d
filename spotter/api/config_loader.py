"""JSON configuration for the Sweet Spotter server.

Settings are read from ``config/spotter.json`` (see ``config/spotter.example.json``).
Secrets are never stored in the file: each classifier backend names the
environment variable that holds its API key, and ``main`` loads ``.env`` first.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("gemini", "openai", "static")


@dataclass
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    startup_log_dir: str = "logs/startup"
    startup_log_window_seconds: float = 180.0


@dataclass
class GeminiSettings:
    model: str = "models/gemini-2.0-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: float = 30.0
    api_key_env: str = "GEMINI_API_KEY"


@dataclass
class OpenAISettings:
    model: str = "gpt-4o-mini"
    base_url: str = "https://api.openai.com/v1"
    timeout: float = 30.0
    api_key_env: str = "OPENAI_API_KEY"


@dataclass
class ClassifierSettings:
    backend: str = "gemini"
    gemini: GeminiSettings = field(default_factory=GeminiSettings)
    openai: OpenAISettings = field(default_factory=OpenAISettings)
    static_verdict: bool = True


@dataclass
class UISettings:
    static_dir: str | None = None
    success_sound: str | None = "success.mp3"
    fail_sound: str | None = "fail.mp3"
    confetti_count: int = 150


@dataclass
class SpotterConfig:
    server: ServerSettings = field(default_factory=ServerSettings)
    classifier: ClassifierSettings = field(default_factory=ClassifierSettings)
    ui: UISettings = field(default_factory=UISettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpotterConfig":
        server_raw = _section(data, "server")
        classifier_raw = _section(data, "classifier")
        ui_raw = _section(data, "ui")

        defaults = cls()
        server = ServerSettings(
            host=str(server_raw.get("host", defaults.server.host)),
            port=_as_int(server_raw.get("port"), defaults.server.port),
            log_level=str(server_raw.get("log_level", defaults.server.log_level)).upper(),
            startup_log_dir=str(
                server_raw.get("startup_log_dir", defaults.server.startup_log_dir)
            ),
            startup_log_window_seconds=_as_float(
                server_raw.get("startup_log_window_seconds"),
                defaults.server.startup_log_window_seconds,
            ),
        )

        backend = str(classifier_raw.get("backend", defaults.classifier.backend)).strip().lower()
        if backend not in SUPPORTED_BACKENDS:
            raise ValueError(
                f"Unsupported classifier backend {backend!r}; expected one of {', '.join(SUPPORTED_BACKENDS)}"
            )
        gemini_raw = _section(classifier_raw, "gemini")
        openai_raw = _section(classifier_raw, "openai")
        gemini_defaults = GeminiSettings()
        openai_defaults = OpenAISettings()
        classifier = ClassifierSettings(
            backend=backend,
            gemini=GeminiSettings(
                model=str(gemini_raw.get("model", gemini_defaults.model)),
                base_url=str(gemini_raw.get("base_url", gemini_defaults.base_url)),
                timeout=_as_float(gemini_raw.get("timeout"), gemini_defaults.timeout),
                api_key_env=str(gemini_raw.get("api_key_env", gemini_defaults.api_key_env)),
            ),
            openai=OpenAISettings(
                model=str(openai_raw.get("model", openai_defaults.model)),
                base_url=str(openai_raw.get("base_url", openai_defaults.base_url)),
                timeout=_as_float(openai_raw.get("timeout"), openai_defaults.timeout),
                api_key_env=str(openai_raw.get("api_key_env", openai_defaults.api_key_env)),
            ),
            static_verdict=bool(
                classifier_raw.get("static_verdict", defaults.classifier.static_verdict)
            ),
        )

        ui = UISettings(
            static_dir=_optional_str(ui_raw.get("static_dir", defaults.ui.static_dir)),
            success_sound=_optional_str(ui_raw.get("success_sound", defaults.ui.success_sound)),
            fail_sound=_optional_str(ui_raw.get("fail_sound", defaults.ui.fail_sound)),
            confetti_count=max(0, _as_int(ui_raw.get("confetti_count"), defaults.ui.confetti_count)),
        )
        return cls(server=server, classifier=classifier, ui=ui)


def load_config(path: str | Path | None) -> SpotterConfig:
    """Load configuration from ``path``; ``None`` yields the defaults.

    Raises ``FileNotFoundError`` when an explicit path does not exist and
    ``ValueError`` when the file is not a JSON object or names an unknown backend.
    """
    if path is None:
        return SpotterConfig()
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(config_path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Configuration file {config_path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {config_path} must contain a JSON object")
    config = SpotterConfig.from_dict(data)
    logger.debug("Loaded configuration from %s backend=%s", config_path, config.classifier.backend)
    return config


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _as_int(value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


__all__ = [
    "SUPPORTED_BACKENDS",
    "ServerSettings",
    "GeminiSettings",
    "OpenAISettings",
    "ClassifierSettings",
    "UISettings",
    "SpotterConfig",
    "load_config",
]
