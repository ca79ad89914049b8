#!/usr/bin/env python3
"""worktrack CLI entrypoint."""

import sys
import argparse
import logging

from worktrack.lib.config import EngineConfig, load_config, resolve_config_path
from worktrack.lib.errors import InvalidOperation, NotFound, StoreUnavailable
from worktrack.commands import archive as cmd_archive_module
from worktrack.commands import lifecycle as cmd_lifecycle_module
from worktrack.commands import list as cmd_list_module
from worktrack.commands import sweep as cmd_sweep_module


def get_config(args) -> EngineConfig:
    """Load engine config from --config, $WORKTRACK_CONFIG or ./worktrack.env."""
    config_path = resolve_config_path(getattr(args, 'config', None))
    try:
        return load_config(config_path)
    except ValueError as e:
        print(f"ERROR: Invalid config {config_path}: {e}")
        sys.exit(2)


def configure_logging(args) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif args.command == 'watch':
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def run_command(func, args) -> int:
    """Run a command handler, turning engine errors into exit codes."""
    config = get_config(args)
    try:
        return func(args, config)
    except (NotFound, InvalidOperation) as e:
        print(f"ERROR: {e}")
        return 1
    except StoreUnavailable as e:
        print(f"ERROR: Store unavailable: {e}")
        return 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='wt', description='Work item lifecycle and retention')
    parser.add_argument('--config', '-c', help='Path to worktrack.env')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # wt list
    p_list = subparsers.add_parser('list', help='List work items')
    p_list.add_argument('--user', '-u', help='Scope to items created by this user')
    p_list.add_argument('--view', choices=cmd_list_module.VIEWS, default='all',
                        help='Per-user view (all views except "all" need --user)')
    p_list.set_defaults(func=cmd_list_module.cmd_list)

    # wt show
    p_show = subparsers.add_parser('show', help='Show one work item')
    p_show.add_argument('id', help='Item ID')
    p_show.set_defaults(func=cmd_list_module.cmd_show)

    # wt stats
    p_stats = subparsers.add_parser('stats', help='Show status counts for a user')
    p_stats.add_argument('--user', '-u', required=True, help='User name')
    p_stats.set_defaults(func=cmd_list_module.cmd_stats)

    # wt accept
    p_accept = subparsers.add_parser('accept', help='Move a pending item to in-process')
    p_accept.add_argument('id', help='Item ID')
    p_accept.set_defaults(func=cmd_lifecycle_module.cmd_accept)

    # wt complete
    p_complete = subparsers.add_parser('complete', help='Mark an item completed')
    p_complete.add_argument('id', help='Item ID')
    p_complete.set_defaults(func=cmd_lifecycle_module.cmd_complete)

    # wt abandon
    p_abandon = subparsers.add_parser('abandon', help='Abandon a request (projects cannot be abandoned)')
    p_abandon.add_argument('id', help='Item ID')
    p_abandon.set_defaults(func=cmd_lifecycle_module.cmd_abandon)

    # wt delete
    p_delete = subparsers.add_parser('delete', help='Permanently delete an item')
    p_delete.add_argument('id', help='Item ID')
    p_delete.add_argument('--confirm', action='store_true', help='Confirm deletion')
    p_delete.set_defaults(func=cmd_lifecycle_module.cmd_delete)

    # wt clear-history
    p_clear = subparsers.add_parser('clear-history', help="Remove a user's completed and rejected items")
    p_clear.add_argument('--user', '-u', required=True, help='User whose history is cleared')
    p_clear.add_argument('--confirm', action='store_true', help='Confirm removal')
    p_clear.set_defaults(func=cmd_lifecycle_module.cmd_clear_history)

    # wt archive
    p_archive = subparsers.add_parser('archive', help='List archived projects')
    p_archive.add_argument('--user', '-u', help='Viewing user (admins see their department)')
    p_archive.add_argument('--role', help='Viewing user role (e.g. admin)')
    p_archive.add_argument('--department', help='Viewing user department')
    p_archive.set_defaults(func=cmd_archive_module.cmd_archive_list)
    archive_sub = p_archive.add_subparsers(dest='archive_cmd')

    # wt archive add
    p_archive_add = archive_sub.add_parser('add', help='Archive a project')
    p_archive_add.add_argument('id', help='Project ID')
    p_archive_add.set_defaults(func=cmd_archive_module.cmd_archive_add)

    # wt archive restore
    p_archive_restore = archive_sub.add_parser('restore', help='Restore an archived project')
    p_archive_restore.add_argument('id', help='Project ID')
    p_archive_restore.set_defaults(func=cmd_archive_module.cmd_archive_restore)

    # wt sweep
    p_sweep = subparsers.add_parser('sweep', help='Run the retention sweep once')
    p_sweep.add_argument('--at', help='Sweep as of this ISO-8601 instant instead of now')
    p_sweep.set_defaults(func=cmd_sweep_module.cmd_sweep)

    # wt watch
    p_watch = subparsers.add_parser('watch', help='Run the retention sweep on a timer')
    p_watch.add_argument('--quiet', '-q', action='store_true', help='No desktop notifications')
    p_watch.set_defaults(func=cmd_sweep_module.cmd_watch)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args)
    return run_command(args.func, args)


if __name__ == '__main__':
    sys.exit(main())
