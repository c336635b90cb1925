"""Printable documents and file exports of saved records."""

import csv
import html
import io
import json
from dataclasses import dataclass, field

from card_scanner.models.columns import ColumnConfig
from card_scanner.models.record import Record


@dataclass
class Letterhead:
    """Sender block printed at the top of every page."""

    name: str
    lines: list[str] = field(default_factory=list)
    footer: list[str] = field(default_factory=list)


@dataclass
class PrintableDocument:
    """A single record laid out for printing."""

    short_id: str
    """Zero-padded 6-digit display id, or "" when unset."""

    bars: list[str]
    """Decorative bar per digit: "short" for even, "tall" for odd. Not a barcode."""

    fields: list[tuple[str, str]]
    """(header, value) pairs for the visible columns, in order."""

    title: str = "Contact Details"


@dataclass
class ExportDocument:
    """Several printable records, one per page."""

    pages: list[PrintableDocument] = field(default_factory=list)


def digit_bars(short_id: str) -> list[str]:
    """Map each digit to a short (even) or tall (odd) bar."""
    return ["tall" if int(d) % 2 else "short" for d in short_id if d.isdigit()]


def render_printable(record: Record, config: ColumnConfig) -> PrintableDocument:
    """Lay out ``record`` with the same columns the table shows."""
    short_id = record.formatted_short_id()
    return PrintableDocument(
        short_id=short_id,
        bars=digit_bars(short_id),
        fields=[(f.header, record.get(f.key) or "") for f in config.visible_fields()],
    )


def render_export_batch(records: list[Record], config: ColumnConfig) -> ExportDocument:
    """Lay out every record as its own page."""
    return ExportDocument(pages=[render_printable(r, config) for r in records])


PRINT_CSS = """
body { font-family: Arial, sans-serif; padding: 20px; background: white; color: black; }
.page { page-break-after: always; }
.page:last-child { page-break-after: auto; }
.print-header { display: flex; justify-content: space-between; align-items: center; margin-bottom: 30px; }
.company-name { font-size: 24px; font-weight: bold; }
.id-block { text-align: right; font-family: monospace; }
.id-number { font-size: 28px; letter-spacing: 6px; }
.bars { margin-top: 8px; display: flex; justify-content: flex-end; gap: 2px; }
.bar { width: 3px; background: black; }
.bar-short { height: 50px; }
.bar-tall { height: 90px; }
ul { list-style: none; padding: 0; }
li { margin-bottom: 8px; font-size: 16px; }
.footer { margin-top: 40px; text-align: center; font-size: 14px; color: gray; }
"""


def _page_html(doc: PrintableDocument, letterhead: Letterhead | None) -> str:
    parts = ['<div class="page">', '<div class="print-header">']

    if letterhead:
        lines = [html.escape(letterhead.name)] + [html.escape(x) for x in letterhead.lines]
        parts.append(f'<div class="company-name">{"<br />".join(lines)}</div>')
    else:
        parts.append("<div></div>")

    if doc.short_id:
        bars = "".join(f'<div class="bar bar-{b}"></div>' for b in doc.bars)
        parts.append(
            '<div class="id-block">'
            f'<div class="id-number">{doc.short_id}</div>'
            f'<div class="bars" aria-hidden="true">{bars}</div>'
            "</div>"
        )
    parts.append("</div>")

    parts.append(f"<h2>{html.escape(doc.title)}</h2>")
    parts.append("<ul>")
    for header, value in doc.fields:
        parts.append(
            f"<li><strong>{html.escape(header)}:</strong> {html.escape(value)}</li>"
        )
    parts.append("</ul>")

    if letterhead and letterhead.footer:
        footer = "".join(f"<p>{html.escape(line)}</p>" for line in letterhead.footer)
        parts.append(f'<div class="footer">{footer}</div>')

    parts.append("</div>")
    return "\n".join(parts)


def _wrap_html(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n"
        '<meta charset="utf-8" />\n'
        f"<title>{html.escape(title)}</title>\n"
        f"<style>{PRINT_CSS}</style>\n"
        "</head>\n<body>\n"
        f"{body}\n"
        "</body>\n</html>\n"
    )


def printable_to_html(doc: PrintableDocument, letterhead: Letterhead | None = None) -> str:
    """Render a single printable record as a standalone HTML page."""
    return _wrap_html("Print Contact", _page_html(doc, letterhead))


def export_to_html(doc: ExportDocument, letterhead: Letterhead | None = None) -> str:
    """Render an export batch as one HTML file with a page break per record."""
    body = "\n".join(_page_html(page, letterhead) for page in doc.pages)
    return _wrap_html("Contacts", body)


def records_to_csv(records: list[Record], config: ColumnConfig) -> str:
    """
    Format records as CSV with the visible headers as the header row.

    Args:
        records: Records to write.
        config: Column configuration selecting and ordering the columns.

    Returns:
        CSV string.
    """
    visible = config.visible_fields()
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([f.header for f in visible])
    for record in records:
        writer.writerow([record.get(f.key) or "" for f in visible])
    return output.getvalue()


def records_to_json(records: list[Record], config: ColumnConfig) -> str:
    """
    Format records as a JSON array of objects keyed by visible field key.

    The id and short id are included so the export can be matched back to
    stored records.
    """
    visible = config.visible_fields()
    rows = []
    for record in records:
        row = {"id": record.id, "short_id": record.formatted_short_id() or None}
        row.update({f.key: record.get(f.key) or "" for f in visible})
        rows.append(row)
    return json.dumps(rows, indent=2, ensure_ascii=False)
