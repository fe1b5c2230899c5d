from __future__ import annotations

import logging
from typing import Any, Dict

from ..ai import Classifier, SweetTreatResult
from ..ai.data_uri import INVALID_DATA_FORMAT_MESSAGE, parse_data_uri
from ..ai.errors import TransportError, ValidationError

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred during analysis. Please try again."


def classify_photo(photo_data_uri: Any, classifier: Classifier) -> SweetTreatResult:
    """Validate a data URI and ask ``classifier`` about it exactly once.

    Raises ``ValidationError`` before any model call when the input is not an
    image data URI, and ``TransportError`` with a user-safe message when the
    call fails for any reason. The original exception is chained and logged.
    """
    try:
        photo = parse_data_uri(photo_data_uri)
    except ValidationError:
        logger.info(
            "Rejected classification input type=%s length=%d",
            type(photo_data_uri).__name__,
            len(photo_data_uri) if isinstance(photo_data_uri, str) else 0,
        )
        raise ValidationError(INVALID_DATA_FORMAT_MESSAGE) from None

    logger.info(
        "Classifying photo mime=%s payload_chars=%d classifier=%s",
        photo.mime_type,
        len(photo.payload),
        classifier.__class__.__name__,
    )
    try:
        result = classifier.classify(photo)
        if not isinstance(result, SweetTreatResult):
            raise TransportError(f"Classifier returned {type(result).__name__}")
    except Exception as exc:
        logger.exception("Classification failed classifier=%s", classifier.__class__.__name__)
        raise TransportError(UNEXPECTED_ERROR_MESSAGE) from exc

    logger.info("Classification complete sweet=%s", result.is_sweet_treat)
    return result


def check_for_sweet_treat(photo_data_uri: Any, classifier: Classifier) -> Dict[str, Any]:
    """Client-facing action: ``{"isSweetTreat": bool}`` or ``{"error": str}``."""
    try:
        return classify_photo(photo_data_uri, classifier).to_dict()
    except ValidationError:
        return {"error": INVALID_DATA_FORMAT_MESSAGE}
    except TransportError:
        return {"error": UNEXPECTED_ERROR_MESSAGE}


__all__ = [
    "UNEXPECTED_ERROR_MESSAGE",
    "INVALID_DATA_FORMAT_MESSAGE",
    "classify_photo",
    "check_for_sweet_treat",
]
