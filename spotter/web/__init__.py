from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .routes import router as ui_router


def register_ui(app: FastAPI, static_dir: Path | None = None) -> None:
    """Attach the UI router and, when present, the sound/asset directory."""
    assets = static_dir or Path(__file__).parent / "static"
    if assets.exists():
        app.mount("/ui/static", StaticFiles(directory=str(assets)), name="ui_static")
        app.state.ui_static_mounted = True
    else:
        app.state.ui_static_mounted = False

    app.include_router(ui_router)


__all__ = ["register_ui"]
