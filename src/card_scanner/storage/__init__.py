"""Record repositories for local and hosted storage."""

from card_scanner.storage.base import RecordRepository
from card_scanner.storage.hosted import HostedRecordRepository
from card_scanner.storage.local import LocalRecordRepository, LocalStorage

__all__ = [
    "RecordRepository",
    "HostedRecordRepository",
    "LocalRecordRepository",
    "LocalStorage",
]
