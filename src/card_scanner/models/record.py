"""Contact record model."""

from typing import Any

from pydantic import BaseModel, Field

from card_scanner.models.columns import DATE_KEY, ID_KEY, SHORT_ID_KEY


class Record(BaseModel):
    """
    One contact entry.

    Field values live in a plain mapping keyed by field key, so the record
    shape follows whatever the column configuration currently says.
    """

    id: str | None = Field(default=None, description="Repository identity")
    short_id: int | None = Field(default=None, description="6-digit display id")
    values: dict[str, str | None] = Field(
        default_factory=dict, description="Field values keyed by field key"
    )

    def get(self, key: str) -> str | None:
        """Value for ``key``. The short id key reads the padded short id."""
        if key == SHORT_ID_KEY:
            return self.formatted_short_id() or None
        return self.values.get(key)

    def merged(self, edits: dict[str, str | None]) -> "Record":
        """Return a copy with ``edits`` laid over the current values."""
        return self.model_copy(update={"values": {**self.values, **edits}})

    def has_data(self) -> bool:
        """True if any user-facing field holds a non-empty value."""
        return any(
            isinstance(value, str) and value
            for key, value in self.values.items()
            if key not in (ID_KEY, DATE_KEY, SHORT_ID_KEY)
        )

    def formatted_short_id(self) -> str:
        """Short id as a zero-padded 6-character string, or "" if unset."""
        if self.short_id is None:
            return ""
        return str(self.short_id).zfill(6)

    def to_flat(self) -> dict[str, Any]:
        """Flatten to the stored row shape: id, six_digit_id and field keys."""
        flat: dict[str, Any] = dict(self.values)
        if self.id is not None:
            flat[ID_KEY] = self.id
        if self.short_id is not None:
            flat[SHORT_ID_KEY] = self.short_id
        return flat

    @classmethod
    def from_flat(cls, row: dict[str, Any]) -> "Record":
        """Build a record from a stored row, keeping unknown keys as values."""
        values: dict[str, str | None] = {}
        for key, value in row.items():
            if key in (ID_KEY, SHORT_ID_KEY):
                continue
            values[key] = None if value is None else str(value)

        record_id = row.get(ID_KEY)
        return cls(
            id=None if record_id is None else str(record_id),
            short_id=_to_int(row.get(SHORT_ID_KEY)),
            values=values,
        )


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
