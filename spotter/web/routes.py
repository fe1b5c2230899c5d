from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import HTMLResponse

from ..api.config_loader import UISettings
from ..api.schemas import CaptionModel, UIStateResponse
from .effects import (
    DEFAULT_CAPTIONS,
    NEGATIVE_MESSAGE,
    POSITIVE_MESSAGE,
    generate_confetti,
    total_duration_ms,
)


logger = logging.getLogger(__name__)

router = APIRouter(tags=["ui"])

INDEX_HTML = Path(__file__).parent / "templates" / "index.html"

_MAX_CONFETTI = 500


def _sound_url(request: Request, name: str | None) -> str | None:
    if not name or not getattr(request.app.state, "ui_static_mounted", False):
        return None
    return f"/ui/static/{name.lstrip('/')}"


@router.get("/ui", response_class=HTMLResponse)
async def ui_root() -> HTMLResponse:
    if not INDEX_HTML.exists():
        raise HTTPException(status_code=500, detail="UI template missing")
    return HTMLResponse(INDEX_HTML.read_text(encoding="utf-8"))


@router.get("/ui/state", response_model=UIStateResponse)
async def ui_state(request: Request) -> UIStateResponse:
    captions = getattr(request.app.state, "captions", DEFAULT_CAPTIONS)
    settings: UISettings = getattr(request.app.state, "ui_settings", UISettings())
    classifier = getattr(request.app.state, "classifier", None)
    classifier_name = classifier.__class__.__name__ if classifier else "unknown"
    return UIStateResponse(
        classifier=classifier_name,
        captions=[CaptionModel(text=c.text, duration_ms=c.duration_ms) for c in captions],
        total_caption_ms=total_duration_ms(captions),
        positive_message=POSITIVE_MESSAGE,
        negative_message=NEGATIVE_MESSAGE,
        success_sound_url=_sound_url(request, settings.success_sound),
        fail_sound_url=_sound_url(request, settings.fail_sound),
        confetti_count=settings.confetti_count,
    )


@router.get("/ui/confetti")
async def ui_confetti(
    request: Request,
    count: int | None = Query(default=None, ge=0, le=_MAX_CONFETTI),
) -> list[dict[str, Any]]:
    if count is None:
        settings: UISettings = getattr(request.app.state, "ui_settings", UISettings())
        count = min(settings.confetti_count, _MAX_CONFETTI)
    pieces = generate_confetti(count)
    logger.debug("Generated confetti pieces=%d", len(pieces))
    return [piece.to_dict() for piece in pieces]


__all__ = ["router"]
