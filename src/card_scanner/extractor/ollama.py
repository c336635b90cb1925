"""Ollama vision extractor implementation."""

import httpx

from card_scanner.errors import ServiceError, UnknownServiceError
from card_scanner.extractor.base import Extractor
from card_scanner.extractor.schema import build_request, parse_response
from card_scanner.models.columns import ColumnConfig
from card_scanner.models.record import Record

SYSTEM_PROMPT = """You are a business card information extractor.
Read the card in the image and return ONLY a valid JSON object matching the given schema.

Guidelines:
- Cross-validate the company name with the email domain
- Cross-validate the person's name with the email prefix
- If multiple emails exist, pick the primary one (typically the person's own email)
- Omit fields that are not on the card instead of guessing
- Always return valid JSON"""


class OllamaExtractor(Extractor):
    """Extractor using a local Ollama vision model."""

    def __init__(
        self,
        model: str = "llava",
        base_url: str = "http://localhost:11434",
        timeout: float = 120.0,
        client: httpx.Client | None = None,
    ):
        """
        Initialize Ollama extractor.

        Args:
            model: Ollama vision model name (e.g., "llava", "llama3.2-vision").
            base_url: Ollama API base URL.
            timeout: Request timeout in seconds.
            client: Optional preconfigured client, mainly for tests.
        """
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return f"ollama:{self._model}"

    def extract(
        self, image: bytes, config: ColumnConfig, mime_type: str = "image/jpeg"
    ) -> Record:
        """Extract contact fields using Ollama."""
        response = self._call_ollama(image, config, mime_type)
        return parse_response(response)

    def _call_ollama(self, image: bytes, config: ColumnConfig, mime_type: str) -> str:
        """Call Ollama API and return the response text."""
        request = build_request(image, config, mime_type)
        url = f"{self._base_url}/api/generate"
        payload = {
            "model": self._model,
            "prompt": request.prompt,
            "system": SYSTEM_PROMPT,
            "images": [request.image_b64],
            "stream": False,
            "format": request.json_schema,
        }

        try:
            if self._client is not None:
                resp = self._client.post(url, json=payload)
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    resp = client.post(url, json=payload)
            resp.raise_for_status()
        except httpx.ConnectError as e:
            raise ServiceError(
                f"Cannot connect to Ollama at {self._base_url}. "
                "Is Ollama running? Start it with: ollama serve"
            ) from e
        except httpx.HTTPStatusError as e:
            raise ServiceError(f"Ollama API error: {e.response.text}") from e
        except httpx.HTTPError as e:
            raise ServiceError(f"Ollama request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise UnknownServiceError("Ollama returned a non-JSON body") from e
        text = data.get("response") if isinstance(data, dict) else None
        return text if isinstance(text, str) else ""
