"""Work item status machine using transitions library.

Statuses and the triggers between them:

    pending ──accept──> in_process
    (any)   ──complete─> completed
    (any)   ──abandon──> rejected

Kind-specific rules (only requests may be abandoned) are guards in the
lifecycle controller; this machine only knows about status.

Usage:
    from worktrack.workflow.fsm import ItemFSM

    fsm = ItemFSM(item)
    fsm.accept()
    fsm.complete(now=now)  # stamps item.last_status_update
"""

import logging
from datetime import datetime

from transitions import Machine

from worktrack.models import WorkItem, ItemStatus, utcnow

logger = logging.getLogger(__name__)


# State values must match ItemStatus enum
STATES = [status.value for status in ItemStatus]

TERMINAL_STATES = [ItemStatus.COMPLETED.value, ItemStatus.REJECTED.value]

TRANSITIONS = [
    {"trigger": "accept", "source": "pending", "dest": "in_process"},

    # Completion is allowed from anywhere, re-completion included
    {"trigger": "complete", "source": list(STATES), "dest": "completed"},

    {"trigger": "abandon", "source": list(STATES), "dest": "rejected"},
]


class ItemFSM:
    """State machine for one work item's status.

    Wraps the transitions library with item-specific logic:
    - Starts from the item's current status
    - Writes status changes back onto the item
    - Stamps last_status_update on entering completed/rejected
    - Logs all transitions
    """

    def __init__(self, item: WorkItem):
        """Initialize FSM for an item.

        Args:
            item: Item whose status is driven (mutated in place)
        """
        self.item = item

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=item.status.value,
            auto_transitions=False,  # Only explicit triggers
            send_event=True,  # Pass EventData to callbacks
            after_state_change="on_state_change",
        )

    def on_state_change(self, event) -> None:
        """Callback after any transition. Syncs the item and logs."""
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        self.item.status = ItemStatus(to_state)
        if to_state in TERMINAL_STATES:
            now: datetime = event.kwargs.get("now") or utcnow()
            self.item.last_status_update = now

        logger.info(f"[FSM] {self.item.id}: {from_state} -> {to_state} ({trigger})")

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)
