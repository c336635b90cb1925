"""Abstract base class for record repositories."""

from abc import ABC, abstractmethod

from card_scanner.models.record import Record


class RecordRepository(ABC):
    """A collection of contact records behind some storage backend."""

    def __enter__(self) -> "RecordRepository":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Release any connection held by the backend."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this backend."""
        ...

    @abstractmethod
    def list_records(self) -> list[Record]:
        """Return all records, most recently added first."""
        ...

    @abstractmethod
    def get(self, record_id: str) -> Record | None:
        """Return the record with ``record_id``, or None."""
        ...

    @abstractmethod
    def create(self, record: Record) -> Record:
        """
        Store a new record.

        Args:
            record: Record to store. Its ``id`` is ignored.

        Returns:
            The stored record with its assigned identity.
        """
        ...

    @abstractmethod
    def update(self, record: Record) -> Record:
        """
        Replace the stored record that has the same ``id``.

        Raises:
            RecordNotFoundError: If no record has that identity.
        """
        ...

    @abstractmethod
    def delete(self, record_id: str) -> None:
        """Delete the record with ``record_id``. Unknown ids are ignored."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Delete every record."""
        ...

    @abstractmethod
    def short_id_exists(self, short_id: int) -> bool:
        """Return True if any stored record already uses ``short_id``."""
        ...
