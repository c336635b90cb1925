"""Tests for table rendering and printable/exported documents."""

import csv
import io
import json

import pytest

from card_scanner.export import (
    Letterhead,
    digit_bars,
    export_to_html,
    printable_to_html,
    records_to_csv,
    records_to_json,
    render_export_batch,
    render_printable,
)
from card_scanner.models.columns import default_columns
from card_scanner.models.record import Record
from card_scanner.table import ACTIONS, EMPTY_MESSAGE, render_table

CONFIGS = [
    default_columns(),
    default_columns().set_visible("address", True).set_visible("email", False),
    default_columns().add("Job Title").relabel("name", "Full Name"),
    default_columns().remove("company").remove("phone"),
]


class TestRenderTable:
    """Test the table view."""

    def test_visible_columns_in_order(self):
        view = render_table([], default_columns())
        assert view.headers == ["Name", "Company", "Email", "Phone", "Date Added"]
        assert view.actions == ACTIONS

    def test_missing_values_use_placeholder(self):
        record = Record(id="1", values={"name": "Jane", "company": ""})
        view = render_table([record], default_columns())
        assert view.rows[0].cells == ["Jane", "N/A", "N/A", "N/A", "N/A"]
        assert view.rows[0].record_id == "1"

    def test_custom_placeholder(self):
        view = render_table([Record()], default_columns(), placeholder="")
        assert view.rows[0].cells == [""] * 5

    def test_empty_state(self):
        assert render_table([], default_columns()).empty_message == EMPTY_MESSAGE
        assert render_table([Record()], default_columns()).empty_message is None

    def test_all_hidden_gives_empty_columns(self):
        config = default_columns()
        for key in config.keys():
            config = config.set_visible(key, False)
        view = render_table([Record(values={"name": "Jane"})], config)
        assert view.headers == []
        assert view.rows[0].cells == []

    def test_removed_field_values_not_shown(self):
        """Test values of a removed field stay in the record but not the table."""
        record = Record(values={"name": "Jane", "phone": "555"})
        view = render_table([record], default_columns().remove("phone"))
        assert "Phone" not in view.headers
        assert "555" not in view.rows[0].cells
        assert record.get("phone") == "555"


class TestWysiwyg:
    """Test that print and export use exactly the table columns."""

    @pytest.mark.parametrize("config", CONFIGS)
    def test_printable_matches_table(self, config):
        record = Record(short_id=7, values={"name": "Jane", "address": "1 Main St"})
        table = render_table([record], config)
        doc = render_printable(record, config)
        assert [header for header, _ in doc.fields] == table.headers

    @pytest.mark.parametrize("config", CONFIGS)
    def test_export_batch_matches_table(self, config):
        records = [Record(values={"name": "A"}), Record(values={"name": "B"})]
        table = render_table(records, config)
        batch = render_export_batch(records, config)
        assert len(batch.pages) == 2
        for page in batch.pages:
            assert [header for header, _ in page.fields] == table.headers

    @pytest.mark.parametrize("config", CONFIGS)
    def test_csv_header_matches_table(self, config):
        text = records_to_csv([Record(values={"name": "Jane"})], config)
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[0] == render_table([], config).headers


class TestPrintable:
    """Test the printable document."""

    def test_short_id_padded_with_bars(self):
        doc = render_printable(Record(short_id=4021), default_columns())
        assert doc.short_id == "004021"
        assert doc.bars == ["short", "short", "short", "short", "short", "tall"]

    def test_digit_bars_even_short_odd_tall(self):
        assert digit_bars("123456") == ["tall", "short", "tall", "short", "tall", "short"]

    def test_no_short_id(self):
        doc = render_printable(Record(), default_columns())
        assert doc.short_id == ""
        assert doc.bars == []

    def test_missing_values_blank(self):
        doc = render_printable(Record(values={"name": "Jane"}), default_columns())
        assert doc.fields[0] == ("Name", "Jane")
        assert doc.fields[1] == ("Company", "")

    def test_html_escapes_and_includes_letterhead(self):
        record = Record(short_id=135790, values={"name": "<Jane>"})
        html = printable_to_html(
            render_printable(record, default_columns()),
            Letterhead(name="Acme & Co", lines=["Main St"], footer=["Thank you!"]),
        )
        assert "&lt;Jane&gt;" in html
        assert "Acme &amp; Co" in html
        assert "135790" in html
        assert html.count('class="bar bar-tall"') == 5
        assert "Thank you!" in html

    def test_export_html_one_page_per_record(self):
        batch = render_export_batch([Record(), Record(), Record()], default_columns())
        assert export_to_html(batch).count('<div class="page">') == 3


class TestShortIdColumn:
    """Test a configured six_digit_id column shows the stored short id."""

    @pytest.fixture
    def config(self):
        return default_columns().add("Six Digit ID")

    def test_table_cell(self, config):
        view = render_table([Record(short_id=4021, values={"name": "Jane"})], config)
        assert view.rows[0].cells[-1] == "004021"

    def test_table_cell_without_short_id(self, config):
        view = render_table([Record(values={"name": "Jane"})], config)
        assert view.rows[0].cells[-1] == "N/A"

    def test_printable_field(self, config):
        doc = render_printable(Record(short_id=4021), config)
        assert doc.fields[-1] == ("Six Digit ID", "004021")

    def test_csv_cell(self, config):
        csv_text = records_to_csv([Record(short_id=987654)], config)
        rows = list(csv.reader(io.StringIO(csv_text)))
        assert rows[0][-1] == "Six Digit ID"
        assert rows[1][-1] == "987654"


class TestFileExports:
    """Test CSV and JSON exports."""

    def test_csv_rows(self):
        records = [Record(values={"name": "Jane", "email": "j@x.com"})]
        rows = list(csv.reader(io.StringIO(records_to_csv(records, default_columns()))))
        assert rows[1] == ["Jane", "", "j@x.com", "", ""]

    def test_json_rows(self):
        records = [Record(id="1", short_id=5, values={"name": "Jane", "address": "hidden"})]
        data = json.loads(records_to_json(records, default_columns()))
        assert data == [
            {
                "id": "1",
                "short_id": "000005",
                "name": "Jane",
                "company": "",
                "email": "",
                "phone": "",
                "dateAdded": "",
            }
        ]
