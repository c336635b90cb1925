"""Abstract base class for vision extractors."""

from abc import ABC, abstractmethod

from card_scanner.models.columns import ColumnConfig
from card_scanner.models.record import Record


class Extractor(ABC):
    """Abstract base class for vision extractors."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this extractor."""
        ...

    @abstractmethod
    def extract(
        self, image: bytes, config: ColumnConfig, mime_type: str = "image/jpeg"
    ) -> Record:
        """
        Extract contact fields from a card image.

        Args:
            image: Raw image bytes.
            config: Column configuration naming the fields to extract.
            mime_type: MIME type of ``image``.

        Returns:
            Record with whatever fields were found; empty if none.

        Raises:
            ConfigurationError: If credentials are missing or rejected.
            TransportError: If the service call fails.
        """
        ...
