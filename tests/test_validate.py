"""Tests for worktrack.lib.validate module."""

from pathlib import Path

import pytest

from worktrack.lib.validate import ValidationError, collect_errors, validate, validate_before_write


def document(*items):
    return {"version": 1, "items": list(items)}


GOOD_ITEM = {"id": "r1", "kind": "request", "creator": "alice", "status": "pending"}


class TestStoreSchema:
    """Test the store document schema."""

    def test_valid_document(self):
        """A well-formed document passes."""
        validate(document(GOOD_ITEM))

    def test_empty_document(self):
        """An empty item list is valid."""
        assert collect_errors(document()) == []

    def test_wrong_version(self):
        """Only version 1 documents are accepted."""
        with pytest.raises(ValidationError, match="version"):
            validate({"version": 2, "items": []})

    def test_unknown_status(self):
        """Status must be one of the four values."""
        bad = dict(GOOD_ITEM, status="archived")
        errors = collect_errors(document(bad))
        assert len(errors) == 1
        assert errors[0].startswith("items.0.status:")

    def test_missing_required_fields(self):
        """kind, creator and status are required."""
        errors = collect_errors(document({"id": "r1"}))
        assert len(errors) == 3

    def test_errors_sorted_by_path(self):
        """Errors come back in document order."""
        errors = collect_errors(document(dict(GOOD_ITEM, kind="x"), dict(GOOD_ITEM, status="y")))
        assert errors[0].startswith("items.0")
        assert errors[1].startswith("items.1")


def test_validate_before_write_names_file():
    """Write refusals name the target file."""
    with pytest.raises(ValidationError) as exc_info:
        validate_before_write({"items": []}, Path("/tmp/items.json"))
    assert "Refusing to write invalid data to /tmp/items.json" in str(exc_info.value)
