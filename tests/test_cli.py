"""Tests for the wt CLI and its command handlers."""

import argparse
import threading
from datetime import timedelta

import pytest

from worktrack import cli
from worktrack.commands.sweep import cmd_watch, format_sweep_result
from worktrack.lib.config import load_config
from worktrack.models import ItemKind, ItemStatus
from worktrack.store import JsonFileStore
from worktrack.workflow.retention import SweepResult

from conftest import NOW, make_item


@pytest.fixture
def env_file(tmp_path):
    env = tmp_path / "worktrack.env"
    env.write_text("STORE_PATH=items.json\nNOTIFICATIONS=false\n")
    return env


@pytest.fixture
def store(env_file):
    store = JsonFileStore(env_file.parent / "items.json")
    store.save([
        make_item("req", creator="alice"),
        make_item("proj", ItemKind.PROJECT, creator="alice", users_needed=1, users_accepted=1),
        make_item("done", creator="alice", status=ItemStatus.COMPLETED, last_status_update=NOW),
    ])
    return store


def run(env_file, *argv):
    return cli.main(["--config", str(env_file), *argv])


class TestReadCommands:
    """Tests for wt list / show / stats."""

    def test_list_all(self, env_file, store, capsys):
        """wt list prints every item."""
        assert run(env_file, "list") == 0
        out = capsys.readouterr().out
        assert "req" in out
        assert "3 item(s)" in out

    def test_list_view_requires_user(self, env_file, store, capsys):
        """Per-user views need --user."""
        assert run(env_file, "list", "--view", "history") == 2
        assert "--user required" in capsys.readouterr().out

    def test_list_history_view(self, env_file, store, capsys):
        """--view history shows finished items."""
        assert run(env_file, "list", "--view", "history", "--user", "alice") == 0
        assert "1 item(s)" in capsys.readouterr().out

    def test_list_empty_store(self, env_file, capsys):
        """An empty store prints a placeholder."""
        assert run(env_file, "list") == 0
        assert "Work items: none" in capsys.readouterr().out

    def test_show(self, env_file, store, capsys):
        """wt show prints the item's fields."""
        assert run(env_file, "show", "proj") == 0
        out = capsys.readouterr().out
        assert "kind:" in out
        assert "project" in out

    def test_show_missing(self, env_file, store, capsys):
        """Unknown ids exit 1 with an error line."""
        assert run(env_file, "show", "ghost") == 1
        assert "ERROR: Work item 'ghost' not found" in capsys.readouterr().out

    def test_stats(self, env_file, store, capsys):
        """wt stats prints status counts."""
        assert run(env_file, "stats", "--user", "alice") == 0
        out = capsys.readouterr().out
        assert "Total:       3" in out
        assert "Completed:   1" in out


class TestLifecycleCommands:
    """Tests for transitions through the CLI."""

    def test_accept_then_complete(self, env_file, store):
        """accept then complete is persisted."""
        assert run(env_file, "accept", "req") == 0
        assert run(env_file, "complete", "req") == 0
        item = next(i for i in store.load() if i.id == "req")
        assert item.status is ItemStatus.COMPLETED
        assert item.last_status_update is not None

    def test_accept_twice_fails(self, env_file, store, capsys):
        """Illegal transitions exit 1."""
        run(env_file, "accept", "req")
        assert run(env_file, "accept", "req") == 1
        assert "Cannot accept" in capsys.readouterr().out

    def test_abandon_project_refused(self, env_file, store, capsys):
        """Abandoning a project exits 1 and changes nothing."""
        before = store.load()
        assert run(env_file, "abandon", "proj") == 1
        assert "Projects cannot be abandoned" in capsys.readouterr().out
        assert store.load() == before

    def test_delete_needs_confirm(self, env_file, store):
        """delete without --confirm exits 2."""
        assert run(env_file, "delete", "req") == 2
        assert len(store.load()) == 3

    def test_delete(self, env_file, store):
        """delete --confirm removes the item."""
        assert run(env_file, "delete", "req", "--confirm") == 0
        assert [i.id for i in store.load()] == ["proj", "done"]

    def test_clear_history(self, env_file, store, capsys):
        """clear-history removes the user's finished items."""
        assert run(env_file, "clear-history", "--user", "alice", "--confirm") == 0
        assert "Cleared 1 history item(s) for alice" in capsys.readouterr().out
        assert [i.id for i in store.load()] == ["req", "proj"]

    def test_corrupt_store_exit_code(self, env_file, store, capsys):
        """An unreadable store exits 2."""
        store.path.write_text("{broken")
        assert run(env_file, "accept", "req") == 2
        assert "Store unavailable" in capsys.readouterr().out


class TestArchiveCommands:
    """Tests for wt archive."""

    def test_archive_and_restore(self, env_file, store, capsys):
        """archive add, list and restore round trip."""
        assert run(env_file, "archive", "add", "proj") == 0
        assert next(i for i in store.load() if i.id == "proj").archived is True

        assert run(env_file, "archive", "--user", "alice") == 0
        out = capsys.readouterr().out
        assert "7 days" in out
        assert "1 archived project(s)" in out

        assert run(env_file, "archive", "restore", "proj") == 0
        assert next(i for i in store.load() if i.id == "proj").archived is False

    def test_archive_request_refused(self, env_file, store, capsys):
        """Requests cannot be archived."""
        assert run(env_file, "archive", "add", "req") == 1
        assert "Only projects can be archived" in capsys.readouterr().out

    def test_empty_archive(self, env_file, store, capsys):
        """An empty archive prints a placeholder."""
        assert run(env_file, "archive") == 0
        assert "No archived projects" in capsys.readouterr().out


class TestSweepCommands:
    """Tests for wt sweep / wt watch."""

    def test_sweep_at_instant(self, env_file, store, capsys):
        """sweep --at fades items past their grace period."""
        at = (NOW + timedelta(days=2)).isoformat()
        assert run(env_file, "sweep", "--at", at) == 0
        assert "1 marked expiring" in capsys.readouterr().out
        assert next(i for i in store.load() if i.id == "done").is_expired is True

    def test_sweep_no_changes(self, env_file, store, capsys):
        """A sweep with nothing due says so."""
        assert run(env_file, "sweep", "--at", NOW.isoformat()) == 0
        assert "No changes" in capsys.readouterr().out

    def test_sweep_bad_timestamp(self, env_file, store, capsys):
        """A malformed --at exits 2."""
        assert run(env_file, "sweep", "--at", "yesterday") == 2
        assert "Invalid timestamp" in capsys.readouterr().out

    def test_sweep_unavailable_store(self, env_file, store, capsys):
        """A sweep against a broken store exits 2."""
        store.path.write_text("[1, 2")
        assert run(env_file, "sweep") == 2
        assert "sweep skipped" in capsys.readouterr().out

    def test_watch_stops(self, env_file, store, capsys):
        """watch returns once its stop event is set."""
        config = load_config(env_file)
        stop_event = threading.Event()
        stop_event.set()
        args = argparse.Namespace(quiet=True)

        assert cmd_watch(args, config, stop_event=stop_event) == 0
        out = capsys.readouterr().out
        assert "Watching" in out
        assert "Stopped." in out


def test_format_sweep_result():
    """The summary lists every kind of change."""
    result = SweepResult(items=[], faded=["a"], purged_expired=["b"], purged_archived=["c", "d"])
    assert format_sweep_result(result) == (
        "1 marked expiring, 1 expired item(s) removed, 2 archived project(s) removed"
    )


def test_invalid_config_exits(tmp_path, capsys):
    """Unsafe config values exit 2."""
    env = tmp_path / "worktrack.env"
    env.write_text("STORE_PATH=`rm -rf`\n")
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--config", str(env), "list"])
    assert exc_info.value.code == 2
