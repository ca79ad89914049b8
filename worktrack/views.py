"""
Read-only projections over the work item collection.

These are the per-user views a front end shows: owned items, the archive,
accepted work, history, and a few derived figures. None of them touch the
store.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from worktrack.lib.config import DEFAULT_ARCHIVE_RETENTION_DAYS
from worktrack.models import ItemStatus, WorkItem

ADMIN_ROLE = "admin"
RECENT_ACTIVITY_LIMIT = 3


def owned_items(items: list[WorkItem], user: str) -> list[WorkItem]:
    """Items created by user."""
    return [i for i in items if i.creator == user]


def archived_projects(items: list[WorkItem], user: str, role: str = "", department: str = "") -> list[WorkItem]:
    """Archived projects visible to user.

    Admins see every archived project in their own department; everyone else
    sees only the ones they created.
    """
    visible = []
    for item in items:
        if not (item.is_project and item.archived):
            continue
        if role == ADMIN_ROLE:
            if item.department == department:
                visible.append(item)
        elif item.creator == user:
            visible.append(item)
    return visible


def accepted_items(items: list[WorkItem], user: str) -> list[WorkItem]:
    """In-process items owned by user.

    Projects only count once quorum is reached (users_accepted >= users_needed).
    """
    accepted = []
    for item in items:
        if item.creator != user or item.status is not ItemStatus.IN_PROCESS:
            continue
        if item.is_project and not item.has_quorum:
            continue
        accepted.append(item)
    return accepted


def history_items(items: list[WorkItem], user: str) -> list[WorkItem]:
    """Completed or rejected items owned by user."""
    return [i for i in items if i.creator == user and i.is_terminal]


def recent_activity(items: list[WorkItem], user: str, limit: int = RECENT_ACTIVITY_LIMIT) -> list[WorkItem]:
    """First few non-archived items owned by user, in collection order."""
    return [i for i in owned_items(items, user) if not i.archived][:limit]


def days_remaining(
    archived_at: datetime | None,
    now: datetime,
    retention: timedelta = timedelta(days=DEFAULT_ARCHIVE_RETENTION_DAYS),
) -> str:
    """Human-readable time left before an archived item is purged.

    Returns "N days" (rounded up), "Today" once the purge time is reached,
    or "Unknown" when the item has no archive timestamp.
    """
    if archived_at is None:
        return "Unknown"
    remaining = (archived_at + retention) - now
    days = math.ceil(remaining / timedelta(days=1))
    if days <= 0:
        return "Today"
    return f"{days} day" if days == 1 else f"{days} days"


@dataclass
class UserStats:
    """Status counts over a user's own items."""
    total: int
    pending: int
    in_process: int
    completed: int
    rejected: int


def user_stats(items: list[WorkItem], user: str) -> UserStats:
    """Count a user's items by status."""
    mine = owned_items(items, user)
    counts = {status: 0 for status in ItemStatus}
    for item in mine:
        counts[item.status] += 1
    return UserStats(
        total=len(mine),
        pending=counts[ItemStatus.PENDING],
        in_process=counts[ItemStatus.IN_PROCESS],
        completed=counts[ItemStatus.COMPLETED],
        rejected=counts[ItemStatus.REJECTED],
    )
