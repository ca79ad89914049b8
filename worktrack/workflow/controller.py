"""
Lifecycle operations on work items.

Each operation is one locked step against the store:
load -> locate -> validate -> mutate -> save -> return.
Validation failures raise before anything is saved, so the stored collection
is untouched.

Usage:
    from worktrack.workflow.controller import LifecycleController

    controller = LifecycleController(store)
    controller.accept("req-1")
    controller.mark_completed("req-1")
"""

import logging
from datetime import datetime
from typing import Callable

from transitions import MachineError

from worktrack.lib.errors import InvalidOperation, NotFound
from worktrack.models import WorkItem, find_item, utcnow
from worktrack.store.base import Store
from worktrack.workflow.fsm import ItemFSM

logger = logging.getLogger(__name__)


class LifecycleController:
    """Status transitions, archival and deletion of work items."""

    def __init__(self, store: Store, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    # --- reads ---

    def get(self, item_id: str) -> WorkItem:
        """Load one item.

        Raises:
            NotFound: if no item has this id
        """
        item = find_item(self.store.load(), item_id)
        if item is None:
            raise NotFound(item_id)
        return item

    def list_items(self) -> list[WorkItem]:
        """Load the full collection."""
        return self.store.load()

    # --- status transitions ---

    def _fire(self, item_id: str, trigger: str, check: Callable[[WorkItem], None] | None = None) -> WorkItem:
        """Run an FSM trigger on one item and persist the collection."""
        with self.store.transaction() as txn:
            item = self._locate(txn.items, item_id)
            if check:
                check(item)

            fsm = ItemFSM(item)
            if not fsm.can(trigger):
                raise InvalidOperation(
                    f"Cannot {trigger} an item with status {item.status.value}", item_id
                )
            try:
                getattr(fsm, trigger)(now=self.clock())
            except MachineError as e:
                raise InvalidOperation(f"Cannot {trigger}: {e.value}", item_id) from e

            txn.commit(txn.items)
            return item

    def accept(self, item_id: str) -> WorkItem:
        """Move a pending item to in-process.

        Project quorum bookkeeping happens outside; callers invoke this once
        quorum is reached.

        Raises:
            NotFound, InvalidOperation (status not pending), StoreUnavailable
        """
        return self._fire(item_id, "accept")

    def mark_completed(self, item_id: str) -> WorkItem:
        """Mark an item completed from any status and stamp last_status_update.

        Raises:
            NotFound, StoreUnavailable
        """
        return self._fire(item_id, "complete")

    def abandon(self, item_id: str) -> WorkItem:
        """Reject a request. Projects cannot be abandoned.

        Raises:
            NotFound, InvalidOperation (item is a project), StoreUnavailable
        """
        def requests_only(item: WorkItem) -> None:
            if item.is_project:
                raise InvalidOperation("Projects cannot be abandoned", item.id)

        return self._fire(item_id, "abandon", check=requests_only)

    # --- archive ---

    def archive(self, item_id: str) -> WorkItem:
        """Soft-hide a project and start its purge clock.

        Raises:
            NotFound, InvalidOperation (item is a request), StoreUnavailable
        """
        with self.store.transaction() as txn:
            item = self._locate(txn.items, item_id)
            if not item.is_project:
                raise InvalidOperation("Only projects can be archived", item_id)

            item.archived = True
            item.archived_at = self.clock()
            txn.commit(txn.items)

        logger.info(f"[ARCHIVE] {item_id}: archived at {item.archived_at.isoformat()}")
        return item

    def unarchive(self, item_id: str) -> WorkItem:
        """Restore an item from the archive. Status is left alone.

        Raises:
            NotFound, StoreUnavailable
        """
        with self.store.transaction() as txn:
            item = self._locate(txn.items, item_id)
            item.archived = False
            item.archived_at = None
            txn.commit(txn.items)

        logger.info(f"[ARCHIVE] {item_id}: restored")
        return item

    # --- deletion ---

    def delete_permanently(self, item_id: str) -> WorkItem:
        """Remove an item unconditionally. Returns the removed item.

        Raises:
            NotFound, StoreUnavailable
        """
        with self.store.transaction() as txn:
            item = self._locate(txn.items, item_id)
            txn.commit([other for other in txn.items if other.id != item_id])

        logger.info(f"[DELETE] {item_id}: deleted permanently")
        return item

    def clear_history(self, creator: str) -> list[WorkItem]:
        """Remove every completed/rejected item owned by creator, at once.

        Ignores is_expired and elapsed time. Returns the removed items; the
        store is only written when something was removed.

        Raises:
            StoreUnavailable
        """
        with self.store.transaction() as txn:
            removed = [i for i in txn.items if i.creator == creator and i.is_terminal]
            if removed:
                removed_ids = {i.id for i in removed}
                txn.commit([i for i in txn.items if i.id not in removed_ids])

        logger.info(f"[HISTORY] {creator}: cleared {len(removed)} item(s)")
        return removed

    @staticmethod
    def _locate(items: list[WorkItem], item_id: str) -> WorkItem:
        item = find_item(items, item_id)
        if item is None:
            raise NotFound(item_id)
        return item
