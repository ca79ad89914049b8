"""
Desktop notifications for worktrack.

Uses notify-send (freedesktop compliant) for notifications.
Works with mako, dunst, GNOME, KDE notification daemons.
"""

import logging
import shutil
import subprocess

from worktrack.workflow.retention import SweepResult

logger = logging.getLogger(__name__)

APP_NAME = "worktrack"
VALID_URGENCIES = ("low", "normal", "critical")
NOTIFY_TIMEOUT_SECONDS = 5


def notify(title: str, message: str, urgency: str = "normal") -> bool:
    """
    Send desktop notification.

    Args:
        title: Notification title
        message: Notification body
        urgency: One of "low", "normal", "critical"

    Returns:
        True if notify-send ran successfully
    """
    if urgency not in VALID_URGENCIES:
        logger.warning(f"Invalid urgency '{urgency}', using 'normal'")
        urgency = "normal"

    if not shutil.which("notify-send"):
        logger.debug("notify-send not found, skipping notification")
        return False

    try:
        result = subprocess.run([
            "notify-send",
            "--urgency", urgency,
            "--app-name", APP_NAME,
            title,
            message,
        ], capture_output=True, text=True, timeout=NOTIFY_TIMEOUT_SECONDS)
    except subprocess.TimeoutExpired:
        logger.warning("notify-send timed out")
        return False
    except OSError as e:
        logger.warning(f"Failed to run notify-send: {e}")
        return False

    if result.returncode != 0:
        logger.warning(f"notify-send failed (exit {result.returncode}): {result.stderr}")
        return False
    return True


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def notify_items_removed(count: int) -> bool:
    """Notify that the sweep purged items."""
    return notify(
        "Items removed",
        f"Automatically deleted {_plural(count, 'item')}.",
        "normal",
    )


def notify_items_faded(count: int) -> bool:
    """Notify that items expired and will be removed on the next sweep."""
    return notify(
        "Items expiring",
        f"{_plural(count, 'item')} expired, removal on next sweep.",
        "low",
    )


def notify_sweep(result: SweepResult) -> None:
    """Scheduler on_change hook: report what a sweep did."""
    if result.purged_archived:
        notify(
            "Projects removed",
            "Some archived projects have been automatically deleted after the retention period.",
            "normal",
        )
    if result.purged_expired:
        notify_items_removed(len(result.purged_expired))
    if result.faded:
        notify_items_faded(len(result.faded))
