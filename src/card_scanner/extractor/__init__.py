"""Vision extractors that fill contact records from card images."""

from card_scanner.extractor.base import Extractor
from card_scanner.extractor.gemini import GeminiExtractor
from card_scanner.extractor.ollama import OllamaExtractor
from card_scanner.extractor.schema import ExtractionRequest, build_request, parse_response

__all__ = [
    "Extractor",
    "ExtractionRequest",
    "GeminiExtractor",
    "OllamaExtractor",
    "build_request",
    "parse_response",
]
