"""Business card scanner with a configurable contact schema."""

from card_scanner.models.columns import ColumnConfig, FieldDefinition
from card_scanner.models.record import Record
from card_scanner.scanner import CardScanner

__version__ = "0.1.0"
__all__ = ["CardScanner", "ColumnConfig", "FieldDefinition", "Record"]
