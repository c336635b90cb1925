"""Scan controller: card image in, prefilled contact record out."""

import logging
import mimetypes
import time
from pathlib import Path

from card_scanner.extractor.base import Extractor
from card_scanner.models.columns import ColumnConfig
from card_scanner.models.record import Record

logger = logging.getLogger(__name__)


class CardScanner:
    """Main controller for scanning business card images."""

    def __init__(self, extractor: Extractor):
        """
        Initialize the scanner.

        Args:
            extractor: Vision extractor that reads fields from the image.
        """
        self._extractor = extractor

    def scan(self, image_path: str | Path, config: ColumnConfig) -> Record:
        """
        Extract the configured fields from a card image.

        Args:
            image_path: Path to the business card image.
            config: Column configuration naming the fields to extract.

        Returns:
            Unsaved record, empty if nothing could be read.

        Raises:
            FileNotFoundError: If the image file does not exist.
            ConfigurationError: If the extractor is not configured.
            TransportError: If the extraction service fails.
        """
        path = Path(image_path)
        if not path.is_file():
            raise FileNotFoundError(f"Image not found: {path}")

        mime_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
        start_time = time.perf_counter()

        record = self._extractor.extract(path.read_bytes(), config, mime_type)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Extracted %d field(s) from %s with %s in %.0fms",
            len(record.values),
            path.name,
            self._extractor.name,
            elapsed_ms,
        )
        return record
