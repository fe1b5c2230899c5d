from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, RedirectResponse

from .actions import INVALID_DATA_FORMAT_MESSAGE, UNEXPECTED_ERROR_MESSAGE, classify_photo
from .config_loader import UISettings
from .schemas import ClassificationResponse, ClassifyRequest, ErrorResponse
from ..ai import Classifier
from ..ai.errors import TransportError, ValidationError
from ..ai.static import StaticClassifier
from ..web import register_ui
from ..web.effects import DEFAULT_CAPTIONS, Caption


logger = logging.getLogger(__name__)


def create_app(
    classifier: Classifier | None = None,
    ui_settings: UISettings | None = None,
    captions: Sequence[Caption] | None = None,
    static_dir: Path | None = None,
) -> FastAPI:
    selected_classifier = classifier or StaticClassifier()
    settings = ui_settings or UISettings()
    resolved_static_dir = static_dir
    if resolved_static_dir is None and settings.static_dir:
        resolved_static_dir = Path(settings.static_dir)

    app = FastAPI(title="Sweet Spotter API", version="0.1.0")

    app.state.classifier = selected_classifier
    app.state.ui_settings = settings
    app.state.captions = tuple(captions) if captions is not None else DEFAULT_CAPTIONS
    app.state.static_dir = resolved_static_dir

    logger.info(
        "API server initialised classifier=%s captions=%d static_dir=%s",
        selected_classifier.__class__.__name__,
        len(app.state.captions),
        resolved_static_dir,
    )

    @app.get("/", include_in_schema=False)
    def root() -> RedirectResponse:
        return RedirectResponse(url="/ui")

    @app.get("/health", response_model=dict[str, str])
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(
        "/v1/classify",
        response_model=ClassificationResponse,
        responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    )
    async def classify(request: Request) -> Any:
        try:
            body = await request.json()
            payload = ClassifyRequest.model_validate(body)
        except ValueError:
            logger.info("Rejected malformed classify request body")
            return JSONResponse(status_code=400, content={"error": INVALID_DATA_FORMAT_MESSAGE})

        current: Classifier = app.state.classifier
        try:
            result = await run_in_threadpool(classify_photo, payload.photo_data_uri, current)
        except ValidationError:
            return JSONResponse(status_code=400, content={"error": INVALID_DATA_FORMAT_MESSAGE})
        except TransportError:
            return JSONResponse(status_code=502, content={"error": UNEXPECTED_ERROR_MESSAGE})
        return ClassificationResponse(is_sweet_treat=result.is_sweet_treat)

    register_ui(app, static_dir=resolved_static_dir)

    return app


__all__ = ["create_app"]
