"""
Store adapter contract.

A store reads and writes the whole work item collection as one unit. Every
mutation runs inside transaction(), which holds the store's lock across the
load, the caller's computation and the save.
"""

import logging
import threading
from contextlib import contextmanager

from worktrack.models import WorkItem, invariant_violations

logger = logging.getLogger(__name__)

STORE_VERSION = 1


class Transaction:
    """One locked read-modify-write step against a store."""

    def __init__(self, store: "Store", items: list[WorkItem]):
        self.store = store
        self.items = items

    def commit(self, items: list[WorkItem]) -> None:
        """Persist items as the new collection.

        Raises:
            StoreUnavailable: if the write fails (nothing is assumed written)
        """
        self.store.save(items)
        self.items = items


class Store:
    """Base class for store adapters.

    Subclasses implement load() and save(); they may extend locked() with
    their own serialization (e.g. a file lock).
    """

    def __init__(self):
        self._lock = threading.RLock()

    def load(self) -> list[WorkItem]:
        """Load the full collection. Empty or absent store returns []."""
        raise NotImplementedError

    def save(self, items: list[WorkItem]) -> None:
        """Replace the full collection."""
        raise NotImplementedError

    @contextmanager
    def locked(self):
        """Hold the store's serialization point."""
        with self._lock:
            yield

    @contextmanager
    def transaction(self):
        """Lock, load, and yield a Transaction. The lock is held until exit."""
        with self.locked():
            yield Transaction(self, self.load())


def to_document(items: list[WorkItem]) -> dict:
    """Build the stored document for a collection."""
    return {
        "version": STORE_VERSION,
        "items": [item.to_dict() for item in items],
    }


def warn_on_violations(items: list[WorkItem], source: str) -> None:
    """Log records breaking item invariants. They are kept, not rejected."""
    for item in items:
        for problem in invariant_violations(item):
            logger.warning(f"[STORE] {source}: item {item.id}: {problem}")
