"""
In-memory store.

Keeps the collection in its serialized form so callers always get fresh
copies from load() and can't mutate stored state by accident.
"""

from worktrack.lib.errors import StoreUnavailable
from worktrack.lib.validate import ValidationError, validate
from worktrack.models import WorkItem
from worktrack.store.base import Store, to_document, warn_on_violations


class MemoryStore(Store):
    """Store adapter holding the collection in process memory."""

    def __init__(self, items: list[WorkItem] | None = None):
        super().__init__()
        self._records: list[dict] = [item.to_dict() for item in (items or [])]
        self.save_count = 0

    def load(self) -> list[WorkItem]:
        items = [WorkItem.from_dict(record) for record in self._records]
        warn_on_violations(items, "memory")
        return items

    def save(self, items: list[WorkItem]) -> None:
        document = to_document(items)
        try:
            validate(document)
        except ValidationError as e:
            raise StoreUnavailable(str(e)) from e
        self._records = document["items"]
        self.save_count += 1

    def snapshot(self) -> list[dict]:
        """Stored records as plain dicts (copies)."""
        return [dict(record) for record in self._records]
