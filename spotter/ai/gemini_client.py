from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import requests

from .data_uri import ImageDataUri
from .errors import TransportError, http_status
from .types import SWEET_TREAT_PROMPT, Classifier, SweetTreatResult

logger = logging.getLogger(__name__)


@dataclass
class GeminiSweetTreatClassifier(Classifier):
    """Ask the Google Gemini multimodal API whether a photo shows a sweet treat."""

    api_key: str
    model: str = "models/gemini-2.0-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: float = 30.0

    def classify(self, photo: ImageDataUri) -> SweetTreatResult:
        if not self.api_key:
            raise TransportError("Gemini API key is required to classify photos")

        payload = self._build_payload(photo)
        url = f"{self.base_url.rstrip('/')}/{self.model}:generateContent"
        response_data = self._send_request(url, payload)
        message = self._extract_message_content(response_data)
        return self._parse_message(message)

    def _send_request(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = requests.post(
                url,
                json=payload,
                headers={
                    "x-goog-api-key": self.api_key,
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.Timeout:
            raise TransportError("Timed out waiting for Gemini API") from None
        except requests.HTTPError as exc:
            raise TransportError(f"Gemini API returned HTTP {http_status(exc)}") from None
        except requests.RequestException as exc:
            raise TransportError(f"Failed to reach Gemini API ({type(exc).__name__})") from None
        except ValueError:
            raise TransportError("Gemini API response was not JSON") from None

    def _build_payload(self, photo: ImageDataUri) -> dict[str, Any]:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": SWEET_TREAT_PROMPT},
                        {
                            "inline_data": {
                                "mime_type": photo.mime_type,
                                "data": photo.payload,
                            }
                        },
                    ],
                }
            ],
            "generationConfig": {
                "temperature": 0.0,
                "responseMimeType": "application/json",
                "responseSchema": {
                    "type": "OBJECT",
                    "properties": {"isSweetTreat": {"type": "BOOLEAN"}},
                    "required": ["isSweetTreat"],
                },
            },
        }

    def _extract_message_content(self, data: dict[str, Any]) -> str:
        try:
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise TransportError("Unexpected response format from Gemini API") from exc

    def _parse_message(self, message: str) -> SweetTreatResult:
        try:
            payload = json.loads(message)
        except json.JSONDecodeError as exc:
            raise TransportError("Gemini API response was not valid JSON") from exc
        result = SweetTreatResult.from_payload(payload)
        logger.debug("Gemini verdict model=%s sweet=%s", self.model, result.is_sweet_treat)
        return result


__all__ = ["GeminiSweetTreatClassifier"]
