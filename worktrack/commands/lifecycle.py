"""
wt accept / complete / abandon / delete / clear-history - Item transitions.
"""

from worktrack.lib.config import EngineConfig
from worktrack.store.json_store import JsonFileStore
from worktrack.workflow.controller import LifecycleController


def _controller(config: EngineConfig) -> LifecycleController:
    return LifecycleController(JsonFileStore.from_config(config))


def cmd_accept(args, config: EngineConfig) -> int:
    """Move a pending item to in-process."""
    item = _controller(config).accept(args.id)
    print(f"Accepted '{item.id}' (now {item.status.value})")
    return 0


def cmd_complete(args, config: EngineConfig) -> int:
    """Mark an item completed."""
    item = _controller(config).mark_completed(args.id)
    print(f"Marked '{item.id}' as completed")
    print("  It fades from history after the grace period and is then removed.")
    return 0


def cmd_abandon(args, config: EngineConfig) -> int:
    """Abandon a request (mark rejected)."""
    item = _controller(config).abandon(args.id)
    print(f"Abandoned request '{item.id}' (now {item.status.value})")
    return 0


def cmd_delete(args, config: EngineConfig) -> int:
    """Permanently delete an item."""
    if not args.confirm:
        print("ERROR: --confirm required for permanent deletion")
        return 2

    item = _controller(config).delete_permanently(args.id)
    print(f"Work item '{item.id}' permanently deleted.")
    return 0


def cmd_clear_history(args, config: EngineConfig) -> int:
    """Remove all of a user's completed and rejected items."""
    if not args.confirm:
        print("ERROR: --confirm required to clear history")
        return 2

    removed = _controller(config).clear_history(args.user)
    if not removed:
        print(f"No history to clear for {args.user}")
        return 0

    print(f"Cleared {len(removed)} history item(s) for {args.user}:")
    for item in removed:
        print(f"  {item.id:<14} {item.status.value}")
    return 0
