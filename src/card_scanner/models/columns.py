"""Column configuration: the user-editable list of contact fields."""

import re
from collections.abc import Iterator

from pydantic import BaseModel, Field, RootModel

from card_scanner.errors import ValidationError

ID_KEY = "id"
DATE_KEY = "dateAdded"
SHORT_ID_KEY = "six_digit_id"

RESERVED_KEYS = frozenset({"name", DATE_KEY})
"""Keys that may be relabeled but never removed."""

SYSTEM_KEYS = frozenset({DATE_KEY, SHORT_ID_KEY})
"""Keys filled in by the application, never edited through the form."""

FORBIDDEN_KEYS = frozenset({ID_KEY})
"""Keys a new field may not take because records store their identity there."""

_WHITESPACE = re.compile(r"\s+")


class FieldDefinition(BaseModel):
    """One configurable contact field."""

    key: str = Field(description="Stable identifier, unique within the config")
    header: str = Field(description="Human readable label")
    visible: bool = Field(default=True, description="Shown in tables and exports")


def derive_key(header: str) -> str:
    """Turn a header like "Job Title" into a key like "job_title"."""
    return _WHITESPACE.sub("_", header.strip().lower())


class ColumnConfig(RootModel[list[FieldDefinition]]):
    """
    Ordered list of field definitions.

    The list order is the form and table order. Mutation methods return a
    new config and never modify the receiver.
    """

    root: list[FieldDefinition] = Field(default_factory=list)

    def __iter__(self) -> Iterator[FieldDefinition]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def keys(self) -> list[str]:
        return [f.key for f in self.root]

    def get(self, key: str) -> FieldDefinition | None:
        for definition in self.root:
            if definition.key == key:
                return definition
        return None

    def visible_fields(self) -> list[FieldDefinition]:
        """Fields shown in tables, printouts and exports, in order."""
        return [f for f in self.root if f.visible]

    def relabel(self, key: str, header: str) -> "ColumnConfig":
        """Change the header of ``key``. Any header is accepted."""
        self._require(key)
        return self._replace(key, header=header)

    def set_visible(self, key: str, visible: bool) -> "ColumnConfig":
        """Show or hide ``key``. Hiding every field is allowed."""
        self._require(key)
        return self._replace(key, visible=visible)

    def remove(self, key: str) -> "ColumnConfig":
        """
        Drop the field ``key``.

        Values already stored under the key are left in place and show up
        again if a field with the same key is added later.

        Raises:
            ValidationError: If ``key`` is reserved or unknown.
        """
        definition = self._require(key)
        if key in RESERVED_KEYS:
            raise ValidationError(
                f'The "{definition.header}" field is essential and cannot be deleted.'
            )
        return ColumnConfig([f.model_copy() for f in self.root if f.key != key])

    def add(self, header: str) -> "ColumnConfig":
        """
        Append a visible field whose key is derived from ``header``.

        Raises:
            ValidationError: If the header is blank or its key already exists.
        """
        trimmed = header.strip()
        if not trimmed:
            raise ValidationError("Field name cannot be empty.")

        key = derive_key(trimmed)
        if key in FORBIDDEN_KEYS:
            raise ValidationError(
                f'The key "{key}" is used for the contact identity. '
                "Please choose a different name."
            )
        if self.get(key) is not None:
            raise ValidationError(
                f'A field with the key "{key}" already exists. '
                "Please choose a different name."
            )

        fields = [f.model_copy() for f in self.root]
        fields.append(FieldDefinition(key=key, header=trimmed, visible=True))
        return ColumnConfig(fields)

    def _require(self, key: str) -> FieldDefinition:
        definition = self.get(key)
        if definition is None:
            raise ValidationError(f'No field with the key "{key}".')
        return definition

    def _replace(self, key: str, **changes) -> "ColumnConfig":
        return ColumnConfig(
            [f.model_copy(update=changes) if f.key == key else f.model_copy() for f in self.root]
        )


def default_columns() -> ColumnConfig:
    """Return a fresh copy of the built-in field set."""
    return ColumnConfig(
        [
            FieldDefinition(key="name", header="Name", visible=True),
            FieldDefinition(key="company", header="Company", visible=True),
            FieldDefinition(key="email", header="Email", visible=True),
            FieldDefinition(key="phone", header="Phone", visible=True),
            FieldDefinition(key=DATE_KEY, header="Date Added", visible=True),
            FieldDefinition(key="address", header="Address", visible=False),
        ]
    )
