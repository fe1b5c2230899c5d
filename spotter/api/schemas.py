from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ClassifyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    photo_data_uri: str = Field(
        ...,
        alias="photoDataUri",
        description="Photo as a data URI: data:<mimetype>;base64,<encoded_data>",
    )


class ClassificationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_sweet_treat: bool = Field(
        ..., alias="isSweetTreat", description="Whether the photo shows a sweet treat"
    )


class ErrorResponse(BaseModel):
    error: str = Field(..., description="User-safe explanation of the failure")


class CaptionModel(BaseModel):
    text: str
    duration_ms: int


class UIStateResponse(BaseModel):
    classifier: str
    captions: list[CaptionModel]
    total_caption_ms: int
    positive_message: str
    negative_message: str
    success_sound_url: str | None = None
    fail_sound_url: str | None = None
    confetti_count: int = 150


__all__ = [
    "ClassifyRequest",
    "ClassificationResponse",
    "ErrorResponse",
    "CaptionModel",
    "UIStateResponse",
]
