"""CLI entry point for the card scanner."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from card_scanner.config_store import ColumnConfigStore
from card_scanner.errors import CardScannerError
from card_scanner.export import (
    Letterhead,
    export_to_html,
    printable_to_html,
    records_to_csv,
    records_to_json,
    render_export_batch,
    render_printable,
)
from card_scanner.extractor.base import Extractor
from card_scanner.extractor.gemini import GeminiExtractor
from card_scanner.extractor.ollama import OllamaExtractor
from card_scanner.form import FormView, RecordForm
from card_scanner.models.columns import RESERVED_KEYS, ColumnConfig
from card_scanner.models.record import Record
from card_scanner.scanner import CardScanner
from card_scanner.sheets import SheetsExporter
from card_scanner.short_id import ShortIdGenerator
from card_scanner.storage.base import RecordRepository
from card_scanner.storage.hosted import HostedRecordRepository
from card_scanner.storage.local import LocalRecordRepository, LocalStorage
from card_scanner.table import render_table

app = typer.Typer(
    name="cardscan",
    help="Scan business cards into a configurable contact table.",
    add_completion=False,
)
columns_app = typer.Typer(help="Customize the contact fields.", add_completion=False)
app.add_typer(columns_app, name="columns")
console = Console()

STORAGE_FILE = "storage.json"


@dataclass
class AppContext:
    """Settings shared by every command, built from the global options."""

    data_dir: Path
    backend: str
    supabase_url: str | None = None
    supabase_key: str | None = None

    def storage(self) -> LocalStorage:
        return LocalStorage(self.data_dir / STORAGE_FILE)

    def config_store(self) -> ColumnConfigStore:
        return ColumnConfigStore(self.storage())

    def repository(self) -> RecordRepository:
        if self.backend == "hosted":
            return HostedRecordRepository(self.supabase_url, self.supabase_key)
        return LocalRecordRepository(self.storage())


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Annotated[
        Path,
        typer.Option(
            "--data-dir",
            envvar="CARDSCAN_DATA_DIR",
            help="Directory holding local contacts and column settings",
        ),
    ] = Path.home() / ".cardscan",
    backend: Annotated[
        str,
        typer.Option(
            "--backend",
            "-b",
            help="Contact storage: local or hosted",
        ),
    ] = "local",
    supabase_url: Annotated[
        str | None,
        typer.Option("--supabase-url", envvar="SUPABASE_URL", help="Hosted storage URL"),
    ] = None,
    supabase_key: Annotated[
        str | None,
        typer.Option("--supabase-key", envvar="SUPABASE_KEY", help="Hosted storage API key"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
):
    """Scan business cards into a configurable contact table."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )

    backend = backend.lower()
    if backend not in ("local", "hosted"):
        console.print(f"[red]Error:[/red] Invalid backend '{backend}'. Use 'local' or 'hosted'.")
        raise typer.Exit(1)

    ctx.obj = AppContext(
        data_dir=data_dir,
        backend=backend,
        supabase_url=supabase_url,
        supabase_key=supabase_key,
    )


def _fail(error: Exception):
    console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(1)


def _create_extractor(extractor_spec: str, api_key: str | None, ollama_url: str) -> Extractor:
    """Create extractor instance from spec string."""
    if ":" in extractor_spec:
        backend, model = extractor_spec.split(":", 1)
    else:
        backend = extractor_spec
        model = None

    if backend == "gemini":
        return GeminiExtractor(api_key=api_key, model=model or "gemini-2.5-flash")
    elif backend == "ollama":
        return OllamaExtractor(model=model or "llava", base_url=ollama_url)
    else:
        raise ValueError(
            f"Unknown extractor backend: {backend}. Use 'gemini:<model>' or 'ollama:<model>'"
        )


def _fill_form(view: FormView, assume_yes: bool) -> dict[str, str]:
    """Prompt for every form field, prefilled with its current value."""
    console.print()
    console.print(f"[bold cyan]{view.title}[/bold cyan]")
    if view.notice:
        console.print(f"[yellow]{view.notice}[/yellow]")

    if assume_yes:
        return {f.key: f.value for f in view.fields}

    return {
        f.key: typer.prompt(f.label, default=f.value, show_default=bool(f.value))
        for f in view.fields
    }


def _save_through_form(
    ctx_obj: AppContext,
    record: Record,
    config: ColumnConfig,
    editing: bool,
    assume_yes: bool = False,
):
    with ctx_obj.repository() as repository:
        form = RecordForm(repository, short_ids=ShortIdGenerator(repository))
        view = form.render(record, config, editing=editing)
        edits = _fill_form(view, assume_yes)
        outcome = form.submit(record, edits, editing=editing)
    if not outcome.ok:
        _fail(outcome.message)

    console.print(f"[green]{outcome.message}[/green]")
    if outcome.record is not None:
        _print_table([outcome.record], config)


def _print_table(records: list[Record], config: ColumnConfig):
    view = render_table(records, config)
    if view.empty_message:
        console.print(f"[dim]{view.empty_message}[/dim]")
        return

    table = Table(title="Saved Contacts")
    for header in view.headers:
        table.add_column(header)
    table.add_column("ID", style="dim", justify="right")
    for row in view.rows:
        table.add_row(*row.cells, row.record_id or "")
    console.print(table)


def _load_record(ctx_obj: AppContext, record_id: str) -> Record:
    with ctx_obj.repository() as repository:
        record = repository.get(record_id)
    if record is None:
        _fail(f"No contact with id {record_id}")
    return record


def _letterhead(name: str | None, footer: list[str] | None) -> Letterhead | None:
    if not name:
        return None
    return Letterhead(name=name, footer=footer or [])


@app.command()
def scan(
    ctx: typer.Context,
    image_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the business card image",
            exists=True,
            readable=True,
        ),
    ],
    extractor: Annotated[
        str,
        typer.Option(
            "--extractor",
            "-e",
            help="Extractor backend: gemini:<model> or ollama:<model>",
        ),
    ] = "gemini:gemini-2.5-flash",
    api_key: Annotated[
        str | None,
        typer.Option("--api-key", envvar="GEMINI_API_KEY", help="Gemini API key"),
    ] = None,
    ollama_url: Annotated[
        str,
        typer.Option("--ollama-url", help="Ollama server base URL"),
    ] = "http://localhost:11434",
    assume_yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Save the extracted values without prompting"),
    ] = False,
):
    """Scan a business card image and save the contact."""
    try:
        config = ctx.obj.config_store().load()
        scanner = CardScanner(_create_extractor(extractor, api_key, ollama_url))
        with console.status("Analyzing image..."):
            record = scanner.scan(image_path, config)
        _save_through_form(ctx.obj, record, config, editing=False, assume_yes=assume_yes)
    except (CardScannerError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def add(ctx: typer.Context):
    """Enter a contact by hand."""
    try:
        config = ctx.obj.config_store().load()
        _save_through_form(ctx.obj, Record(), config, editing=False)
    except CardScannerError as e:
        _fail(e)


@app.command()
def edit(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="Id of the contact to edit")],
):
    """Edit a saved contact."""
    try:
        config = ctx.obj.config_store().load()
        record = _load_record(ctx.obj, record_id)
        _save_through_form(ctx.obj, record, config, editing=True)
    except CardScannerError as e:
        _fail(e)


@app.command(name="list")
def list_contacts(ctx: typer.Context):
    """Show saved contacts."""
    try:
        config = ctx.obj.config_store().load()
        with ctx.obj.repository() as repository:
            records = repository.list_records()
        _print_table(records, config)
    except CardScannerError as e:
        _fail(e)


@app.command()
def delete(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="Id of the contact to delete")],
    assume_yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask")] = False,
):
    """Delete a saved contact."""
    if not assume_yes:
        typer.confirm("Are you sure you want to delete this contact?", abort=True)
    try:
        with ctx.obj.repository() as repository:
            repository.delete(record_id)
    except CardScannerError as e:
        _fail(e)
    console.print(f"[green]Deleted:[/green] {record_id}")


@app.command()
def clear(
    ctx: typer.Context,
    assume_yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask")] = False,
):
    """Delete all saved contacts."""
    if not assume_yes:
        typer.confirm("Are you sure you want to delete all saved contacts?", abort=True)
    try:
        with ctx.obj.repository() as repository:
            repository.clear()
    except CardScannerError as e:
        _fail(e)
    console.print("[green]All contacts deleted.[/green]")


@app.command(name="print")
def print_contact(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="Id of the contact to print")],
    output: Annotated[Path, typer.Option("--output", "-o", help="HTML file to write")],
    letterhead: Annotated[
        str | None, typer.Option("--letterhead", help="Sender name printed on top")
    ] = None,
    footer: Annotated[
        list[str] | None, typer.Option("--footer", help="Footer line (repeatable)")
    ] = None,
):
    """Write a printable HTML page for one contact."""
    try:
        config = ctx.obj.config_store().load()
        record = _load_record(ctx.obj, record_id)
    except CardScannerError as e:
        _fail(e)

    doc = render_printable(record, config)
    output.write_text(printable_to_html(doc, _letterhead(letterhead, footer)), encoding="utf-8")
    console.print(f"Output: {output}")


@app.command()
def export(
    ctx: typer.Context,
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output file path"),
    ],
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: html, csv or json"),
    ] = "html",
    letterhead: Annotated[
        str | None, typer.Option("--letterhead", help="Sender name printed on each page")
    ] = None,
    footer: Annotated[
        list[str] | None, typer.Option("--footer", help="Footer line (repeatable)")
    ] = None,
):
    """Export all contacts using the visible columns."""
    format = format.lower()
    if format not in ("html", "csv", "json"):
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Use 'html', 'csv' or 'json'.")
        raise typer.Exit(1)

    try:
        config = ctx.obj.config_store().load()
        with ctx.obj.repository() as repository:
            records = repository.list_records()
    except CardScannerError as e:
        _fail(e)

    if format == "csv":
        content = records_to_csv(records, config)
    elif format == "json":
        content = records_to_json(records, config)
    else:
        content = export_to_html(
            render_export_batch(records, config), _letterhead(letterhead, footer)
        )

    output.write_text(content, encoding="utf-8")
    console.print(f"[green]Done:[/green] {len(records)} contact(s) exported")
    console.print(f"Output: {output}")


@app.command()
def sheet(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="Id of the contact to append")],
    token: Annotated[
        str | None,
        typer.Option("--token", envvar="GOOGLE_ACCESS_TOKEN", help="Google OAuth access token"),
    ] = None,
    spreadsheet: Annotated[
        str,
        typer.Option("--spreadsheet", help="Spreadsheet name to find or create"),
    ] = "Visual Text Extractor Contacts",
):
    """Append a saved contact to a Google Sheet."""
    try:
        config = ctx.obj.config_store().load()
        record = _load_record(ctx.obj, record_id)
        with SheetsExporter(token, spreadsheet_name=spreadsheet) as exporter:
            spreadsheet_id = exporter.append(record, config)
    except CardScannerError as e:
        _fail(e)
    console.print(f"[green]Saved![/green] Spreadsheet {spreadsheet_id}")


def _update_columns(ctx: typer.Context, change) -> ColumnConfig:
    store = ctx.obj.config_store()
    try:
        config = change(store.load())
        store.save(config)
    except CardScannerError as e:
        _fail(e)
    return config


def _print_columns(config: ColumnConfig):
    table = Table(title="Columns")
    table.add_column("Key")
    table.add_column("Header")
    table.add_column("Visible")
    for definition in config:
        key = definition.key
        if key in RESERVED_KEYS:
            key += " [dim](core)[/dim]"
        table.add_row(key, definition.header, "yes" if definition.visible else "no")
    console.print(table)


@columns_app.command(name="list")
def columns_list(ctx: typer.Context):
    """Show the configured fields."""
    _print_columns(ctx.obj.config_store().load())


@columns_app.command(name="add")
def columns_add(
    ctx: typer.Context,
    header: Annotated[str, typer.Argument(help="Field name, e.g. 'Job Title'")],
):
    """Add a new field."""
    _print_columns(_update_columns(ctx, lambda c: c.add(header)))


@columns_app.command(name="remove")
def columns_remove(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key of the field to remove")],
):
    """Remove a field. Stored values are kept."""
    _print_columns(_update_columns(ctx, lambda c: c.remove(key)))


@columns_app.command(name="rename")
def columns_rename(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key of the field to relabel")],
    header: Annotated[str, typer.Argument(help="New header")],
):
    """Change the header of a field."""
    _print_columns(_update_columns(ctx, lambda c: c.relabel(key, header)))


@columns_app.command(name="show")
def columns_show(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key of the field to show")],
):
    """Show a field in tables and exports."""
    _print_columns(_update_columns(ctx, lambda c: c.set_visible(key, True)))


@columns_app.command(name="hide")
def columns_hide(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key of the field to hide")],
):
    """Hide a field from tables and exports."""
    _print_columns(_update_columns(ctx, lambda c: c.set_visible(key, False)))


@columns_app.command(name="reset")
def columns_reset(ctx: typer.Context):
    """Restore the default fields."""
    try:
        config = ctx.obj.config_store().reset()
    except CardScannerError as e:
        _fail(e)
    _print_columns(config)


@app.command()
def version():
    """Show version information."""
    from card_scanner import __version__

    console.print(f"cardscan version {__version__}")


if __name__ == "__main__":
    app()
