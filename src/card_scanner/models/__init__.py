"""Data models for contact records and their column configuration."""

from card_scanner.models.columns import (
    DATE_KEY,
    RESERVED_KEYS,
    SHORT_ID_KEY,
    SYSTEM_KEYS,
    ColumnConfig,
    FieldDefinition,
    default_columns,
    derive_key,
)
from card_scanner.models.record import Record

__all__ = [
    "DATE_KEY",
    "RESERVED_KEYS",
    "SHORT_ID_KEY",
    "SYSTEM_KEYS",
    "ColumnConfig",
    "FieldDefinition",
    "Record",
    "default_columns",
    "derive_key",
]
