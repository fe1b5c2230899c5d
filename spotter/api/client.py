from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

import requests

from .actions import UNEXPECTED_ERROR_MESSAGE

logger = logging.getLogger(__name__)


@dataclass
class SpotterHttpClient:
    """Call ``POST /v1/classify`` on a running Sweet Spotter server.

    Mirrors ``check_for_sweet_treat``: the return value is always either
    ``{"isSweetTreat": bool}`` or ``{"error": str}``. Network failures become
    the generic retry message rather than raising.
    """

    base_url: str
    timeout: float = 60.0
    session: requests.Session = field(default_factory=requests.Session)

    def check_for_sweet_treat(self, photo_data_uri: str) -> Dict[str, Any]:
        try:
            response = self.session.post(
                f"{self.base_url.rstrip('/')}/v1/classify",
                json={"photoDataUri": photo_data_uri},
                timeout=self.timeout,
            )
        except requests.Timeout:
            logger.warning("Timed out waiting for classification response")
            return {"error": UNEXPECTED_ERROR_MESSAGE}
        except requests.RequestException as exc:
            logger.warning("Failed to call Sweet Spotter API: %s", exc)
            return {"error": UNEXPECTED_ERROR_MESSAGE}

        try:
            data = response.json()
        except ValueError:
            logger.warning("Non-JSON response status=%d", response.status_code)
            return {"error": UNEXPECTED_ERROR_MESSAGE}

        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, str) and error:
                return {"error": error}
            verdict = data.get("isSweetTreat")
            if response.ok and isinstance(verdict, bool):
                return {"isSweetTreat": verdict}
        logger.warning("Unexpected classification response status=%d", response.status_code)
        return {"error": UNEXPECTED_ERROR_MESSAGE}


__all__ = ["SpotterHttpClient"]
