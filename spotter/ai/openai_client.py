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

_SYSTEM_PROMPT = "You label food photos and always answer with a JSON object."


@dataclass
class OpenAISweetTreatClassifier(Classifier):
    """Ask an OpenAI vision model whether a photo shows a sweet treat."""

    api_key: str
    model: str = "gpt-4o-mini"
    base_url: str = "https://api.openai.com/v1"
    timeout: float = 30.0

    def classify(self, photo: ImageDataUri) -> SweetTreatResult:
        if not self.api_key:
            raise TransportError("OpenAI API key is required to classify photos")

        payload = self._build_payload(photo)
        url = f"{self.base_url.rstrip('/')}/chat/completions"
        response_data = self._send_request(url, payload)
        message = self._extract_message_content(response_data)
        return self._parse_message(message)

    def _send_request(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = requests.post(
                url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.Timeout:
            raise TransportError("Timed out waiting for OpenAI API") from None
        except requests.HTTPError as exc:
            raise TransportError(f"OpenAI API returned HTTP {http_status(exc)}") from None
        except requests.RequestException as exc:
            raise TransportError(f"Failed to reach OpenAI API ({type(exc).__name__})") from None
        except ValueError:
            raise TransportError("OpenAI API response was not JSON") from None

    def _build_payload(self, photo: ImageDataUri) -> dict[str, Any]:
        return {
            "model": self.model,
            "temperature": 0.0,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": _SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": SWEET_TREAT_PROMPT},
                        {"type": "image_url", "image_url": {"url": str(photo)}},
                    ],
                },
            ],
        }

    def _extract_message_content(self, data: dict[str, Any]) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise TransportError("Unexpected response format from OpenAI API") from exc
        if not isinstance(content, str):
            raise TransportError("OpenAI API returned an empty message")
        return content

    def _parse_message(self, message: str) -> SweetTreatResult:
        try:
            payload = json.loads(message)
        except json.JSONDecodeError as exc:
            raise TransportError("OpenAI API response was not valid JSON") from exc
        result = SweetTreatResult.from_payload(payload)
        logger.debug("OpenAI verdict model=%s sweet=%s", self.model, result.is_sweet_treat)
        return result


__all__ = ["OpenAISweetTreatClassifier"]
