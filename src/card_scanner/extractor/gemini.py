"""Gemini vision extractor implementation."""

import logging
from typing import Any

import httpx

from card_scanner.errors import (
    ConfigurationError,
    InvalidCredentialsError,
    ServiceError,
    UnknownServiceError,
)
from card_scanner.extractor.base import Extractor
from card_scanner.extractor.schema import build_request, parse_response
from card_scanner.models.columns import ColumnConfig
from card_scanner.models.record import Record

logger = logging.getLogger(__name__)

API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiExtractor(Extractor):
    """Extractor using the hosted Gemini API with structured JSON output."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-2.5-flash",
        base_url: str = API_BASE_URL,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ):
        """
        Initialize Gemini extractor.

        Args:
            api_key: Gemini API key.
            model: Model name (e.g., "gemini-2.5-flash").
            base_url: API base URL.
            timeout: Request timeout in seconds.
            client: Optional preconfigured client, mainly for tests.

        Raises:
            ConfigurationError: If no API key is given.
        """
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY environment variable not set")
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return f"gemini:{self._model}"

    def extract(
        self, image: bytes, config: ColumnConfig, mime_type: str = "image/jpeg"
    ) -> Record:
        """Extract contact fields using Gemini."""
        text = self._call_gemini(image, config, mime_type)
        return parse_response(text)

    def _call_gemini(self, image: bytes, config: ColumnConfig, mime_type: str) -> str:
        """Call the generateContent endpoint and return the response text."""
        request = build_request(image, config, mime_type)
        url = f"{self._base_url}/models/{self._model}:generateContent"
        payload = {
            "contents": [
                {
                    "parts": [
                        {
                            "inline_data": {
                                "mime_type": request.mime_type,
                                "data": request.image_b64,
                            }
                        },
                        {"text": request.prompt},
                    ]
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": _gemini_schema(request.json_schema),
            },
        }
        headers = {"x-goog-api-key": self._api_key}

        try:
            if self._client is not None:
                resp = self._client.post(url, json=payload, headers=headers)
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    resp = client.post(url, json=payload, headers=headers)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            body = e.response.text
            if "API_KEY_INVALID" in body or e.response.status_code in (401, 403):
                raise InvalidCredentialsError(
                    "The provided API key is invalid. Please check your configuration."
                ) from e
            raise ServiceError(f"An API error occurred: {body}") from e
        except httpx.HTTPError as e:
            raise ServiceError(f"An API error occurred: {e}") from e
        except ValueError as e:
            raise UnknownServiceError(
                "An unknown error occurred while communicating with the AI service."
            ) from e

        return _response_text(data)


def _gemini_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Convert a JSON schema to Gemini's upper-case type names."""
    converted: dict[str, Any] = {}
    for key, value in schema.items():
        if key == "type" and isinstance(value, str):
            converted[key] = value.upper()
        elif key == "properties" and isinstance(value, dict):
            converted[key] = {k: _gemini_schema(v) for k, v in value.items()}
        else:
            converted[key] = value
    return converted


def _response_text(data: Any) -> str:
    """Join the text parts of the first candidate. Missing parts give ""."""
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        logger.info("Gemini returned no candidates")
        return ""
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    return "".join(
        p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)
    )
