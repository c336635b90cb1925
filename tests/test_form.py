"""Tests for the short id generator and the record form."""

import random
from unittest.mock import Mock

import pytest

from card_scanner.errors import ServiceError, ShortIdExhaustedError
from card_scanner.form import BUSY_MESSAGE, EMPTY_NOTICE, SAVED_MESSAGE, RecordForm
from card_scanner.models.columns import default_columns
from card_scanner.models.record import Record
from card_scanner.storage.local import LocalRecordRepository, LocalStorage
from card_scanner.short_id import MAX_SHORT_ID, MIN_SHORT_ID, ShortIdGenerator


class TestShortIdGenerator:
    """Test the 6-digit id generator."""

    def test_range(self):
        """Test generated ids stay within six digits."""
        repo = Mock()
        repo.short_id_exists.return_value = False
        generator = ShortIdGenerator(repo, rng=random.Random(7))
        for _ in range(200):
            assert MIN_SHORT_ID <= generator.generate() <= MAX_SHORT_ID

    @pytest.mark.parametrize("taken", [0, 1, 4])
    def test_retries_until_free(self, taken):
        """Test N occupied candidates lead to exactly N+1 checks."""
        repo = Mock()
        repo.short_id_exists.side_effect = [True] * taken + [False]
        rng = Mock()
        rng.randint.side_effect = [100000 + i for i in range(taken + 1)]

        result = ShortIdGenerator(repo, rng=rng).generate()

        assert repo.short_id_exists.call_count == taken + 1
        assert result == 100000 + taken
        rng.randint.assert_called_with(MIN_SHORT_ID, MAX_SHORT_ID)

    def test_exhausted(self):
        """Test the generator gives up after max_attempts checks."""
        repo = Mock()
        repo.short_id_exists.return_value = True

        with pytest.raises(ShortIdExhaustedError):
            ShortIdGenerator(repo, max_attempts=3).generate()
        assert repo.short_id_exists.call_count == 3

    def test_invalid_max_attempts(self):
        with pytest.raises(ValueError):
            ShortIdGenerator(Mock(), max_attempts=0)


class TestRecordFormRender:
    """Test form rendering."""

    def test_fields_follow_config_without_system_keys(self):
        """Test one input per field, in order, without the date stamp."""
        form = RecordForm(Mock())
        view = form.render(Record(values={"name": "Jane"}), default_columns())

        assert [f.key for f in view.fields] == ["name", "company", "email", "phone", "address"]
        assert view.fields[0].value == "Jane"
        assert view.fields[1].value == ""
        assert view.fields[1].placeholder == "Enter Company..."

    def test_hidden_fields_still_editable(self):
        view = RecordForm(Mock()).render(Record(), default_columns())
        assert "address" in [f.key for f in view.fields]

    def test_short_id_field_never_rendered(self):
        config = default_columns().add("six digit id")
        view = RecordForm(Mock()).render(Record(), config)
        assert "six_digit_id" not in [f.key for f in view.fields]

    def test_empty_notice_in_creation_mode(self):
        view = RecordForm(Mock()).render(Record(), default_columns())
        assert view.notice == EMPTY_NOTICE
        assert view.title == "Verify & Save Data"

    def test_no_notice_when_editing(self):
        view = RecordForm(Mock()).render(Record(id="1"), default_columns(), editing=True)
        assert view.notice is None
        assert view.title == "Edit Contact Details"
        assert view.submit_label == "Update Contact"

    def test_no_notice_with_data(self):
        view = RecordForm(Mock()).render(Record(values={"email": "a@b.c"}), default_columns())
        assert view.notice is None


class TestRecordFormSubmit:
    """Test form submission."""

    def _form(self, repo=None, short_id=654321):
        repo = repo or Mock()
        repo.create.side_effect = lambda r: r.model_copy(update={"id": "new-id"})
        repo.update.side_effect = lambda r: r
        short_ids = Mock()
        short_ids.generate.return_value = short_id
        form = RecordForm(repo, short_ids=short_ids, clock=lambda: "2026-10-19T09:30:00")
        return form, repo

    def test_create_merges_and_stamps(self):
        form, repo = self._form()
        outcome = form.submit(Record(values={"name": "J"}), {"name": "Jane", "email": "j@x.com"}, editing=False)

        assert outcome.ok
        assert outcome.message == SAVED_MESSAGE
        saved = repo.create.call_args.args[0]
        assert saved.values == {"name": "Jane", "email": "j@x.com", "dateAdded": "2026-10-19T09:30:00"}
        assert saved.short_id == 654321
        assert outcome.record.id == "new-id"
        repo.update.assert_not_called()

    def test_empty_submission_allowed(self):
        form, repo = self._form()
        outcome = form.submit(Record(), {}, editing=False)
        assert outcome.ok
        repo.create.assert_called_once()

    def test_update_refreshes_date_and_keeps_short_id(self):
        form, repo = self._form()
        original = Record(id="r1", short_id=111111, values={"name": "Jane", "dateAdded": "2020-01-01"})

        outcome = form.submit(original, {"company": "Acme"}, editing=True)

        assert outcome.ok
        updated = repo.update.call_args.args[0]
        assert updated.id == "r1"
        assert updated.short_id == 111111
        assert updated.get("company") == "Acme"
        assert updated.get("dateAdded") == "2026-10-19T09:30:00"
        repo.create.assert_not_called()

    def test_repository_failure_reported(self):
        repo = Mock()
        form, _ = self._form(repo)
        repo.create.side_effect = ServiceError("Hosted storage error: boom")

        outcome = form.submit(Record(), {"name": "Jane"}, editing=False)

        assert not outcome.ok
        assert outcome.message == "Hosted storage error: boom"
        assert outcome.record is None
        assert not form.is_saving

    def test_local_write_failure_reported(self, tmp_path):
        """Test an unwritable storage file gives a failed outcome and clears the guard."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        repo = LocalRecordRepository(LocalStorage(blocker / "store.json"))
        short_ids = Mock()
        short_ids.generate.return_value = 123456
        form = RecordForm(repo, short_ids=short_ids)

        outcome = form.submit(Record(), {"name": "Jane"}, editing=False)

        assert not outcome.ok
        assert "Cannot write" in outcome.message
        assert outcome.record is None
        assert not form.is_saving

    def test_reentrant_submit_refused(self):
        """Test a second submit during a save is refused."""
        form, repo = self._form()
        inner = {}

        def create(record):
            inner["outcome"] = form.submit(Record(), {}, editing=False)
            assert form.is_saving
            return record

        repo.create.side_effect = create
        outcome = form.submit(Record(), {}, editing=False)

        assert outcome.ok
        assert inner["outcome"].ok is False
        assert inner["outcome"].message == BUSY_MESSAGE
        assert repo.create.call_count == 1
