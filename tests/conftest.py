"""Shared fixtures for worktrack tests."""

from datetime import datetime, timezone

import pytest

from worktrack.models import ItemKind, ItemStatus, WorkItem, invariant_violations

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_item(item_id: str, kind: ItemKind = ItemKind.REQUEST, **fields) -> WorkItem:
    """Build a WorkItem with sensible defaults."""
    fields.setdefault("creator", "alice")
    fields.setdefault("department", "it")
    fields.setdefault("title", f"Item {item_id}")
    fields.setdefault("status", ItemStatus.PENDING)
    fields.setdefault("date_created", datetime(2026, 1, 1, tzinfo=timezone.utc))
    return WorkItem(id=item_id, kind=kind, **fields)


def assert_invariants(items: list[WorkItem]) -> None:
    """Every item must satisfy the record invariants."""
    for item in items:
        assert invariant_violations(item) == [], f"{item.id}: {invariant_violations(item)}"


@pytest.fixture
def now():
    return NOW
