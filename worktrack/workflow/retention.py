"""
Retention sweep for work items.

One sweep applies two independent rules to the whole collection:

  Archive purge   - an archived item still pending is removed once
                    archived_at + archive_retention has passed.
  Two-phase expiry - a completed/rejected item is marked is_expired once
                    last_status_update + expiry_grace has passed, and removed
                    on the next sweep that finds it already marked.

sweep() is a pure function: it never mutates its input and never raises.
Records with missing timestamps are skipped, not rejected.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta

from worktrack.lib.config import (
    DEFAULT_ARCHIVE_RETENTION_DAYS,
    DEFAULT_EXPIRY_GRACE_DAYS,
    EngineConfig,
)
from worktrack.models import ItemStatus, WorkItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetentionPolicy:
    """Time windows applied by the sweep."""
    archive_retention: timedelta = timedelta(days=DEFAULT_ARCHIVE_RETENTION_DAYS)
    expiry_grace: timedelta = timedelta(days=DEFAULT_EXPIRY_GRACE_DAYS)

    @classmethod
    def from_config(cls, config: EngineConfig) -> "RetentionPolicy":
        return cls(
            archive_retention=timedelta(days=config.archive_retention_days),
            expiry_grace=timedelta(days=config.expiry_grace_days),
        )


@dataclass
class SweepResult:
    """Outcome of one sweep."""
    items: list[WorkItem]
    faded: list[str] = field(default_factory=list)            # ids newly marked is_expired
    purged_archived: list[str] = field(default_factory=list)  # ids removed by archive purge
    purged_expired: list[str] = field(default_factory=list)   # ids removed after fading

    @property
    def removed_count(self) -> int:
        return len(self.purged_archived) + len(self.purged_expired)

    @property
    def changed(self) -> bool:
        return bool(self.faded or self.removed_count)


def archive_due(item: WorkItem, now: datetime, policy: RetentionPolicy) -> bool:
    """True if an archived pending item is past its purge time."""
    if not item.archived or item.status is not ItemStatus.PENDING:
        return False
    if item.archived_at is None:
        # Inconsistent record, never due
        return False
    return now > item.archived_at + policy.archive_retention


def fade_due(item: WorkItem, now: datetime, policy: RetentionPolicy) -> bool:
    """True if a terminal item is past its grace period."""
    if not item.is_terminal or item.last_status_update is None:
        return False
    return now > item.last_status_update + policy.expiry_grace


def sweep(items: list[WorkItem], now: datetime, policy: RetentionPolicy | None = None) -> SweepResult:
    """Apply both retention rules at instant now.

    Args:
        items: Full collection (not modified)
        now: Evaluation instant (aware datetime)
        policy: Retention windows (defaults: 7 days archive, 1 day grace)

    Returns:
        SweepResult with the surviving collection and what changed
    """
    policy = policy or RetentionPolicy()
    result = SweepResult(items=[])

    for item in items:
        if archive_due(item, now, policy):
            result.purged_archived.append(item.id)
            continue

        if item.is_terminal and item.last_status_update is not None:
            if item.is_expired:
                result.purged_expired.append(item.id)
                continue
            if fade_due(item, now, policy):
                result.faded.append(item.id)
                result.items.append(replace(item, is_expired=True))
                continue

        result.items.append(replace(item))

    if result.changed:
        logger.info(
            f"[SWEEP] faded={len(result.faded)} "
            f"purged_archived={len(result.purged_archived)} "
            f"purged_expired={len(result.purged_expired)}"
        )
    else:
        logger.debug(f"[SWEEP] no changes ({len(items)} item(s))")

    return result
