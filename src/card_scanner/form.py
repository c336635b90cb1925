"""Record editing form driven by the column configuration."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from card_scanner.errors import CardScannerError
from card_scanner.models.columns import DATE_KEY, SYSTEM_KEYS, ColumnConfig
from card_scanner.models.record import Record
from card_scanner.short_id import ShortIdGenerator
from card_scanner.storage.base import RecordRepository

logger = logging.getLogger(__name__)

EMPTY_NOTICE = (
    "No contact details were automatically identified. "
    "You can enter them manually or retake the photo."
)
SAVED_MESSAGE = "Contact saved successfully!"
BUSY_MESSAGE = "A save is already in progress."


@dataclass
class FormField:
    """One labeled text input."""

    key: str
    label: str
    value: str
    placeholder: str


@dataclass
class FormView:
    """Everything needed to draw the form."""

    title: str
    fields: list[FormField] = field(default_factory=list)
    notice: str | None = None
    submit_label: str = "Save Contact"


@dataclass
class SaveOutcome:
    """Result of a form submission."""

    ok: bool
    message: str
    record: Record | None = None


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


class RecordForm:
    """Renders a record for editing and saves the edited result."""

    def __init__(
        self,
        repository: RecordRepository,
        short_ids: ShortIdGenerator | None = None,
        clock: Callable[[], str] = _now,
    ):
        """
        Initialize the form.

        Args:
            repository: Where submitted records are created or updated.
            short_ids: Assigns display ids to new records. None skips them.
            clock: Returns the date stamp written on every save.
        """
        self._repository = repository
        self._short_ids = short_ids
        self._clock = clock
        self._saving = False

    @property
    def is_saving(self) -> bool:
        """True while a submission is waiting on the repository."""
        return self._saving

    def render(self, record: Record, config: ColumnConfig, editing: bool = False) -> FormView:
        """
        Build one input per editable field, seeded from ``record``.

        The date stamp and short id are filled in by the application and
        are never shown as inputs.
        """
        fields = [
            FormField(
                key=definition.key,
                label=definition.header,
                value=record.get(definition.key) or "",
                placeholder=f"Enter {definition.header}...",
            )
            for definition in config
            if definition.key not in SYSTEM_KEYS
        ]

        notice = None
        if not editing and not record.has_data():
            notice = EMPTY_NOTICE

        return FormView(
            title="Edit Contact Details" if editing else "Verify & Save Data",
            fields=fields,
            notice=notice,
            submit_label="Update Contact" if editing else "Save Contact",
        )

    def submit(
        self,
        original: Record,
        edits: dict[str, str | None],
        editing: bool,
    ) -> SaveOutcome:
        """
        Merge ``edits`` over ``original`` and save the result.

        Args:
            original: Record the form was rendered from.
            edits: Edited values keyed by field key.
            editing: Update the existing record instead of creating one.

        Returns:
            SaveOutcome with the stored record, or the failure message.
        """
        if self._saving:
            return SaveOutcome(ok=False, message=BUSY_MESSAGE)

        self._saving = True
        try:
            record = original.merged(edits).merged({DATE_KEY: self._clock()})
            if editing:
                stored = self._repository.update(record)
            else:
                if self._short_ids is not None:
                    record = record.model_copy(
                        update={"short_id": self._short_ids.generate()}
                    )
                stored = self._repository.create(record)
        except CardScannerError as e:
            logger.warning("Saving contact failed: %s", e)
            return SaveOutcome(ok=False, message=str(e) or "Error saving contact")
        finally:
            self._saving = False

        logger.info("Saved contact %s", stored.id)
        return SaveOutcome(ok=True, message=SAVED_MESSAGE, record=stored)
