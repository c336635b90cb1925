"""Table view of saved records."""

from dataclasses import dataclass, field

from card_scanner.models.columns import ColumnConfig
from card_scanner.models.record import Record

ACTIONS = ("edit", "delete", "print")
EMPTY_MESSAGE = "No Saved Contacts"


@dataclass
class TableRow:
    """One record as table cells, in column order."""

    record_id: str | None
    cells: list[str]


@dataclass
class TableView:
    """Visible columns and the rows under them."""

    headers: list[str] = field(default_factory=list)
    keys: list[str] = field(default_factory=list)
    rows: list[TableRow] = field(default_factory=list)
    actions: tuple[str, ...] = ACTIONS

    @property
    def empty_message(self) -> str | None:
        return EMPTY_MESSAGE if not self.rows else None


def render_table(
    records: list[Record],
    config: ColumnConfig,
    placeholder: str = "N/A",
) -> TableView:
    """
    Lay out ``records`` under the visible columns of ``config``.

    Args:
        records: Records to show, in display order.
        config: Column configuration; hidden fields are left out.
        placeholder: Cell text for a missing or empty value.

    Returns:
        TableView whose columns are the visible fields in config order,
        followed by the fixed action set.
    """
    visible = config.visible_fields()
    rows = [
        TableRow(
            record_id=record.id,
            cells=[record.get(f.key) or placeholder for f in visible],
        )
        for record in records
    ]
    return TableView(
        headers=[f.header for f in visible],
        keys=[f.key for f in visible],
        rows=rows,
    )
