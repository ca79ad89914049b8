"""
wt archive - View and manage archived projects.
"""

from datetime import timedelta

from worktrack.lib.config import EngineConfig
from worktrack.models import ItemStatus, utcnow
from worktrack.store.json_store import JsonFileStore
from worktrack.workflow.controller import LifecycleController
from worktrack import views


def cmd_archive_list(args, config: EngineConfig) -> int:
    """List archived projects visible to the user, with time left before purge."""
    controller = LifecycleController(JsonFileStore.from_config(config))
    items = controller.list_items()

    if args.user:
        archived = views.archived_projects(items, args.user, args.role or "", args.department or "")
    else:
        archived = [i for i in items if i.is_project and i.archived]

    if not archived:
        print("No archived projects")
        return 0

    now = utcnow()
    retention = timedelta(days=config.archive_retention_days)

    print(f"{'ID':<16} {'STATUS':<11} {'DEPARTMENT':<14} {'PURGE IN':<10} TITLE")
    print("-" * 72)
    for item in archived:
        remaining = views.days_remaining(item.archived_at, now, retention)
        if item.status is not ItemStatus.PENDING:
            remaining = "-"  # Only pending archived projects are purged
        print(f"  {item.id:<14} {item.status.value:<11} {item.department:<14} {remaining:<10} {item.title}")
    print("-" * 72)
    print(f"{len(archived)} archived project(s)")
    return 0


def cmd_archive_add(args, config: EngineConfig) -> int:
    """Archive a project."""
    item = LifecycleController(JsonFileStore.from_config(config)).archive(args.id)
    print(f"Project '{item.id}' archived.")
    print(f"  Pending archived projects are deleted after {config.archive_retention_days:g} day(s).")
    print(f"  Use 'wt archive restore {item.id}' to restore it.")
    return 0


def cmd_archive_restore(args, config: EngineConfig) -> int:
    """Restore an archived project."""
    item = LifecycleController(JsonFileStore.from_config(config)).unarchive(args.id)
    print(f"Project '{item.id}' restored from the archive.")
    return 0
