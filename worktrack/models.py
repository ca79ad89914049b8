"""
Data models for work items.

A work item is either a service request or a collaborative project. Both kinds
share one record shape; `kind` decides which lifecycle operations are legal.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class ItemKind(Enum):
    """Discriminant between the two kinds of work item."""

    REQUEST = "request"
    PROJECT = "project"


class ItemStatus(Enum):
    """Lifecycle status of a work item.

    Values match FSM state strings in workflow/fsm.py.
    """

    PENDING = "pending"
    IN_PROCESS = "in_process"
    COMPLETED = "completed"
    REJECTED = "rejected"


# Statuses that start the expiry clock
TERMINAL_STATUSES = (ItemStatus.COMPLETED, ItemStatus.REJECTED)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 string. Naive timestamps are taken as UTC."""
    if not value:
        return None
    # fromisoformat() only accepts a trailing Z from 3.11 on
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime | None) -> str | None:
    """Format a datetime for storage."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


@dataclass
class WorkItem:
    """A tracked request or project."""
    id: str
    kind: ItemKind
    creator: str
    department: str = ""
    title: str = ""
    status: ItemStatus = ItemStatus.PENDING
    users_needed: int = 0                         # Projects only
    users_accepted: int = 0                       # Projects only
    archived: bool = False
    archived_at: Optional[datetime] = None        # Set iff archived
    last_status_update: Optional[datetime] = None # Set on completed/rejected
    is_expired: bool = False                      # Fading, purged on next sweep
    date_created: Optional[datetime] = None

    @property
    def is_request(self) -> bool:
        return self.kind is ItemKind.REQUEST

    @property
    def is_project(self) -> bool:
        return self.kind is ItemKind.PROJECT

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def has_quorum(self) -> bool:
        """True when enough users accepted the project."""
        return self.users_accepted >= self.users_needed

    def to_dict(self) -> dict:
        """Serialize to the stored JSON shape."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "creator": self.creator,
            "department": self.department,
            "title": self.title,
            "status": self.status.value,
            "usersNeeded": self.users_needed,
            "usersAccepted": self.users_accepted,
            "archived": self.archived,
            "archivedAt": format_timestamp(self.archived_at),
            "lastStatusUpdate": format_timestamp(self.last_status_update),
            "isExpired": self.is_expired,
            "dateCreated": format_timestamp(self.date_created),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkItem":
        """Build a WorkItem from its stored JSON shape.

        Raises:
            KeyError: if a required key is missing
            ValueError: if an enum value or timestamp is malformed
        """
        return cls(
            id=str(data["id"]),
            kind=ItemKind(data["kind"]),
            creator=data["creator"],
            department=data.get("department", ""),
            title=data.get("title", ""),
            status=ItemStatus(data.get("status", ItemStatus.PENDING.value)),
            users_needed=int(data.get("usersNeeded") or 0),
            users_accepted=int(data.get("usersAccepted") or 0),
            archived=bool(data.get("archived", False)),
            archived_at=parse_timestamp(data.get("archivedAt")),
            last_status_update=parse_timestamp(data.get("lastStatusUpdate")),
            is_expired=bool(data.get("isExpired", False)),
            date_created=parse_timestamp(data.get("dateCreated")),
        )


def invariant_violations(item: WorkItem) -> list[str]:
    """Return the record invariants this item breaks (empty if none)."""
    problems = []
    if item.archived and item.archived_at is None:
        problems.append("archived without archivedAt")
    if not item.archived and item.archived_at is not None:
        problems.append("archivedAt set on unarchived item")
    if item.is_expired and not item.is_terminal:
        problems.append(f"isExpired set with status {item.status.value}")
    return problems


def find_item(items: list[WorkItem], item_id: str) -> Optional[WorkItem]:
    """Find an item by id."""
    for item in items:
        if item.id == item_id:
            return item
    return None
