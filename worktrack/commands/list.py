"""
wt list / wt show / wt stats - Read-only views of work items.
"""

from worktrack.lib.config import EngineConfig
from worktrack.models import WorkItem
from worktrack.store.json_store import JsonFileStore
from worktrack.workflow.controller import LifecycleController
from worktrack import views

VIEWS = ("all", "owned", "accepted", "history", "recent")


def format_item_row(item: WorkItem) -> str:
    """One table row for an item."""
    flags = []
    if item.archived:
        flags.append("archived")
    if item.is_expired:
        flags.append("expiring")
    flag_str = f" [{', '.join(flags)}]" if flags else ""
    title = item.title[:30] + "..." if len(item.title) > 30 else item.title
    return f"  {item.id:<14} {item.kind.value:<8} {item.status.value:<11} {item.creator:<12} {title}{flag_str}"


def select_view(items: list[WorkItem], view: str, user: str | None) -> list[WorkItem]:
    """Apply a named view to the collection."""
    if view == "all":
        return items if not user else views.owned_items(items, user)
    if view == "owned":
        return views.owned_items(items, user)
    if view == "accepted":
        return views.accepted_items(items, user)
    if view == "history":
        return views.history_items(items, user)
    if view == "recent":
        return views.recent_activity(items, user)
    raise ValueError(f"Unknown view '{view}'")


def cmd_list(args, config: EngineConfig) -> int:
    """List work items, optionally through a per-user view."""
    view = getattr(args, 'view', 'all') or 'all'
    if view != "all" and not args.user:
        print(f"ERROR: --user required for the '{view}' view")
        return 2

    items = LifecycleController(JsonFileStore.from_config(config)).list_items()
    selected = select_view(items, view, args.user)

    if not selected:
        print("Work items: none")
        return 0

    print(f"{'ID':<16} {'KIND':<8} {'STATUS':<11} {'CREATOR':<12} TITLE")
    print("-" * 72)
    for item in selected:
        print(format_item_row(item))
    print("-" * 72)
    print(f"{len(selected)} item(s)")
    return 0


def cmd_show(args, config: EngineConfig) -> int:
    """Show every field of one item."""
    item = LifecycleController(JsonFileStore.from_config(config)).get(args.id)
    for key, value in item.to_dict().items():
        print(f"{key + ':':<18} {'' if value is None else value}")
    return 0


def cmd_stats(args, config: EngineConfig) -> int:
    """Show a user's item counts by status."""
    items = LifecycleController(JsonFileStore.from_config(config)).list_items()
    stats = views.user_stats(items, args.user)

    print(f"Stats for: {args.user}")
    print(f"  Total:       {stats.total}")
    print(f"  Pending:     {stats.pending}")
    print(f"  In process:  {stats.in_process}")
    print(f"  Completed:   {stats.completed}")
    print(f"  Rejected:    {stats.rejected}")

    recent = views.recent_activity(items, args.user)
    if recent:
        print()
        print("Recent activity")
        for item in recent:
            print(format_item_row(item))

    expiring = [i for i in views.history_items(items, args.user) if i.is_expired]
    if expiring:
        print()
        print(f"{len(expiring)} history item(s) expire on the next sweep")
    return 0
