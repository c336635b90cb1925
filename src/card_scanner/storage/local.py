"""Record repository persisted to a local JSON key/value file."""

import json
import logging
import time
from pathlib import Path

from card_scanner.errors import RecordNotFoundError, StorageError
from card_scanner.models.columns import DATE_KEY
from card_scanner.models.record import Record
from card_scanner.storage.base import RecordRepository

logger = logging.getLogger(__name__)

RECORDS_KEY = "visual-text-extractor-db"
CONFIG_KEY = "visual-text-extractor-config"


class LocalStorage:
    """
    String key/value store kept in a single JSON file.

    Every write rewrites the whole file. A missing or unreadable file reads
    as empty.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, RecursionError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: not a JSON object", self._path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as e:
            raise StorageError(f"Cannot write {self._path}: {e}") from e


class LocalRecordRepository(RecordRepository):
    """Records stored as a JSON array under one key of a LocalStorage."""

    def __init__(self, storage: LocalStorage):
        self._storage = storage

    @property
    def name(self) -> str:
        return f"local:{self._storage.path}"

    def list_records(self) -> list[Record]:
        records = self._load()
        # Stable sort keeps insertion order for equal or missing dates
        return sorted(records, key=lambda r: r.get(DATE_KEY) or "", reverse=True)

    def get(self, record_id: str) -> Record | None:
        for record in self._load():
            if record.id == record_id:
                return record
        return None

    def create(self, record: Record) -> Record:
        records = self._load()
        taken = {r.id for r in records}
        stored = record.model_copy(update={"id": self._new_id(taken)})
        records.append(stored)
        self._save(records)
        return stored

    def update(self, record: Record) -> Record:
        records = self._load()
        for index, existing in enumerate(records):
            if existing.id == record.id:
                records[index] = record
                self._save(records)
                return record
        raise RecordNotFoundError(f"No contact with id {record.id}")

    def delete(self, record_id: str) -> None:
        records = self._load()
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) != len(records):
            self._save(remaining)

    def clear(self) -> None:
        self._save([])

    def short_id_exists(self, short_id: int) -> bool:
        return any(r.short_id == short_id for r in self._load())

    def _load(self) -> list[Record]:
        raw = self._storage.get_item(RECORDS_KEY)
        if not raw:
            return []
        try:
            rows = json.loads(raw)
        except (json.JSONDecodeError, RecursionError) as e:
            logger.warning("Stored records are corrupt, starting empty: %s", e)
            return []
        if not isinstance(rows, list):
            logger.warning("Stored records are not a list, starting empty")
            return []
        return [Record.from_flat(row) for row in rows if isinstance(row, dict)]

    def _save(self, records: list[Record]) -> None:
        payload = [r.to_flat() for r in records]
        self._storage.set_item(RECORDS_KEY, json.dumps(payload, ensure_ascii=False))

    def _new_id(self, taken: set[str | None]) -> str:
        """Millisecond timestamp id, bumped until it is unused."""
        candidate = int(time.time() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)
