"""Tests for the column configuration model."""

import pytest

from card_scanner.errors import ValidationError
from card_scanner.models.columns import (
    RESERVED_KEYS,
    ColumnConfig,
    FieldDefinition,
    default_columns,
    derive_key,
)


class TestDefaultColumns:
    """Test the built-in field set."""

    def test_default_keys_in_order(self):
        """Test default keys and their order."""
        config = default_columns()
        assert config.keys() == ["name", "company", "email", "phone", "dateAdded", "address"]

    def test_address_hidden_by_default(self):
        """Test only address starts hidden."""
        config = default_columns()
        hidden = [f.key for f in config if not f.visible]
        assert hidden == ["address"]

    def test_default_returns_fresh_copy(self):
        """Test callers cannot share the default list."""
        first = default_columns()
        first.root.append(FieldDefinition(key="x", header="X"))
        assert "x" not in default_columns().keys()


class TestDeriveKey:
    """Test header to key derivation."""

    def test_lowercase_and_underscores(self):
        assert derive_key("Job Title") == "job_title"

    def test_trims_and_collapses_whitespace(self):
        assert derive_key("  Linked   In\tURL ") == "linked_in_url"


class TestRelabel:
    """Test relabeling fields."""

    def test_relabel_changes_only_header(self):
        """Test relabel leaves keys and visibility of every entry untouched."""
        config = default_columns()
        updated = config.relabel("email", "E-mail Address")

        assert updated.get("email").header == "E-mail Address"
        assert updated.keys() == config.keys()
        assert [f.visible for f in updated] == [f.visible for f in config]
        others_before = [(f.key, f.header) for f in config if f.key != "email"]
        others_after = [(f.key, f.header) for f in updated if f.key != "email"]
        assert others_before == others_after

    def test_relabel_does_not_mutate_receiver(self):
        config = default_columns()
        config.relabel("name", "Full Name")
        assert config.get("name").header == "Name"

    def test_relabel_reserved_allowed(self):
        """Test core fields may be relabeled."""
        updated = default_columns().relabel("dateAdded", "Scanned On")
        assert updated.get("dateAdded").header == "Scanned On"

    def test_relabel_empty_header_allowed(self):
        updated = default_columns().relabel("company", "")
        assert updated.get("company").header == ""

    def test_relabel_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            default_columns().relabel("fax", "Fax")


class TestSetVisible:
    """Test toggling visibility."""

    def test_show_hidden_field(self):
        updated = default_columns().set_visible("address", True)
        assert updated.get("address").visible is True

    def test_hide_all_fields(self):
        """Test hiding every field is allowed and leaves nothing visible."""
        config = default_columns()
        for key in config.keys():
            config = config.set_visible(key, False)
        assert config.visible_fields() == []
        assert len(config) == 6


class TestRemove:
    """Test removing fields."""

    def test_remove_regular_field(self):
        updated = default_columns().remove("phone")
        assert "phone" not in updated.keys()
        assert len(updated) == 5

    @pytest.mark.parametrize("key", sorted(RESERVED_KEYS))
    def test_remove_reserved_rejected(self, key):
        """Test reserved fields cannot be removed and config is unchanged."""
        config = default_columns()
        with pytest.raises(ValidationError, match="cannot be deleted"):
            config.remove(key)
        assert config == default_columns()

    def test_remove_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            default_columns().remove("fax")


class TestAdd:
    """Test adding fields."""

    def test_add_derives_key(self):
        """Test "Job Title" becomes a visible job_title field at the end."""
        updated = default_columns().add("Job Title")
        last = updated.root[-1]
        assert last.key == "job_title"
        assert last.header == "Job Title"
        assert last.visible is True
        assert len(updated) == 7

    def test_add_trims_header(self):
        updated = default_columns().add("  Website ")
        assert updated.root[-1].header == "Website"
        assert updated.root[-1].key == "website"

    @pytest.mark.parametrize("header", ["", "   "])
    def test_add_empty_rejected(self, header):
        config = default_columns()
        with pytest.raises(ValidationError, match="cannot be empty"):
            config.add(header)
        assert config == default_columns()

    def test_add_colliding_key_rejected(self):
        """Test a header that normalizes onto an existing key is rejected."""
        config = default_columns().add("Job Title")
        with pytest.raises(ValidationError, match="job_title"):
            config.add("  JOB   title ")
        assert len(config) == 7

    def test_add_collides_with_default_key(self):
        with pytest.raises(ValidationError):
            default_columns().add("Email")

    @pytest.mark.parametrize("header", ["ID", " id ", "Id"])
    def test_add_identity_key_rejected(self, header):
        """Test a header deriving the record identity key is rejected."""
        config = default_columns()
        with pytest.raises(ValidationError, match="identity"):
            config.add(header)
        assert config == default_columns()

    def test_add_short_id_column_allowed(self):
        """Test the short id can be shown as a column."""
        updated = default_columns().add("Six Digit ID")
        assert updated.root[-1].key == "six_digit_id"


class TestSerialization:
    """Test JSON round trip through pydantic."""

    def test_dumps_plain_list(self):
        config = ColumnConfig([FieldDefinition(key="name", header="Name", visible=True)])
        assert config.model_dump() == [{"key": "name", "header": "Name", "visible": True}]

    def test_loads_plain_list(self):
        config = ColumnConfig.model_validate_json(
            '[{"key": "name", "header": "Name", "visible": false}]'
        )
        assert config.get("name").visible is False
