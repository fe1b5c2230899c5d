"""Logging setup for the Sweet Spotter server.

Every handler installed here formats through ``RedactingFormatter`` so API keys
never reach the console or the startup log file, even when a third-party
exception message embeds a request URL.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import re
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

DEFAULT_LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
STARTUP_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
REDACTED = "[redacted]"

_QUERY_SECRET = re.compile(r"(?i)([?&](?:key|api_key|access_token)=)[^&\s'\"]+")
_BEARER_SECRET = re.compile(r"(?i)(bearer\s+)[A-Za-z0-9._\-]+")


class RedactingFormatter(logging.Formatter):
    """Formatter that masks known secrets and credential-looking URL parts.

    Redaction runs on the fully rendered line, traceback included.
    """

    def __init__(self, fmt: str | None = None, secrets: Iterable[str] = ()) -> None:
        super().__init__(fmt)
        self.secrets = tuple(s for s in secrets if s)

    def format(self, record: logging.LogRecord) -> str:
        return redact(super().format(record), self.secrets)


def redact(text: str, secrets: Iterable[str] = ()) -> str:
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTED)
    text = _QUERY_SECRET.sub(lambda m: m.group(1) + REDACTED, text)
    return _BEARER_SECRET.sub(lambda m: m.group(1) + REDACTED, text)


def secrets_from_env(names: Iterable[str]) -> list[str]:
    """Values of the named environment variables that are set."""
    return [value for value in (os.environ.get(name) for name in names) if value]


def configure_logging(level: str = "INFO", secrets: Iterable[str] = ()) -> None:
    """Install a root handler unless the host (uvicorn, pytest) already did.

    Existing root handlers get a redacting formatter either way.
    """
    root = logging.getLogger()
    numeric = getattr(logging, level.upper(), logging.INFO)
    if not root.handlers:
        logging.basicConfig(level=numeric, format=DEFAULT_LOG_FORMAT)
    else:
        root.setLevel(numeric)
    for handler in root.handlers:
        if isinstance(handler, StartupLogBuffer):
            continue
        fmt = handler.formatter._fmt if handler.formatter else DEFAULT_LOG_FORMAT
        handler.setFormatter(RedactingFormatter(fmt, secrets))


class StartupLogBuffer(logging.handlers.MemoryHandler):
    """Keep the records logged right after boot and write them to one file.

    The file ``startup_<UTC stamp>.log`` is written once, when ``capacity``
    records are held, when ``window_seconds`` have passed, or on close. After
    that the handler ignores further records.
    """

    def __init__(
        self,
        output_dir: Path,
        window_seconds: float = 180.0,
        capacity: int = 2000,
        secrets: Iterable[str] = (),
    ) -> None:
        super().__init__(max(1, capacity), flushLevel=logging.CRITICAL + 1, flushOnClose=True)
        self.output_dir = Path(output_dir)
        self.file_path: Optional[Path] = None
        self.setFormatter(RedactingFormatter(STARTUP_LOG_FORMAT, secrets))
        self._closes_at = time.monotonic() + window_seconds
        self._done = False
        self._window = threading.Timer(window_seconds, self.flush)
        self._window.daemon = True
        self._window.start()

    def shouldFlush(self, record: logging.LogRecord) -> bool:
        return len(self.buffer) >= self.capacity or time.monotonic() >= self._closes_at

    def emit(self, record: logging.LogRecord) -> None:
        if self._done:
            return
        super().emit(record)

    def flush(self) -> None:
        self.acquire()
        try:
            if self._done:
                return
            self._done = True
            records, self.buffer = self.buffer, []
        finally:
            self.release()
        if records:
            self._write(records)

    def close(self) -> None:
        self._window.cancel()
        super().close()

    def _write(self, records: list[logging.LogRecord]) -> None:
        lines = []
        for record in records:
            try:
                lines.append(self.format(record))
            except Exception:
                self.handleError(record)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        path = self.output_dir / f"startup_{stamp}.log"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        self.file_path = path


def install_startup_log_buffer(
    output_dir: Path | None = None,
    window_seconds: float = 180.0,
    capacity: int = 2000,
    secrets: Iterable[str] = (),
) -> StartupLogBuffer:
    handler = StartupLogBuffer(
        output_dir=output_dir or Path("logs/startup"),
        window_seconds=window_seconds,
        capacity=capacity,
        secrets=secrets,
    )
    handler.setLevel(logging.DEBUG)
    logging.getLogger().addHandler(handler)
    logging.getLogger(__name__).info(
        "Keeping the first %.0f seconds of logs for %s", window_seconds, handler.output_dir
    )
    return handler


__all__ = [
    "DEFAULT_LOG_FORMAT",
    "REDACTED",
    "RedactingFormatter",
    "StartupLogBuffer",
    "configure_logging",
    "install_startup_log_buffer",
    "redact",
    "secrets_from_env",
]
