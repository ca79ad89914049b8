"""
Lock management for the file store.

Uses flock on a sidecar lock file so a read-modify-write of the store is
never interleaved with another one.
"""

import fcntl
import logging
import os
import time
from contextlib import contextmanager
from pathlib import Path

from worktrack.lib.errors import StoreUnavailable

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 0.05


class LockTimeout(StoreUnavailable):
    """Lock acquisition timed out."""
    pass


def lock_path_for(store_path: Path) -> Path:
    """Sidecar lock file for a store file (items.json -> items.json.lock)."""
    return store_path.with_name(store_path.name + ".lock")


@contextmanager
def file_lock(lock_file: Path, timeout: float):
    """
    Acquire an exclusive flock on lock_file, yield, release on exit.

    Note: lock files are never deleted. Deleting them lets two holders end up
    with "exclusive" locks on different inodes behind the same path.

    Raises:
        LockTimeout: if the lock is not acquired within timeout seconds
        StoreUnavailable: if the lock file cannot be opened
    """
    try:
        lock_file.parent.mkdir(parents=True, exist_ok=True)
        fd = open(lock_file, 'w')
    except OSError as e:
        raise StoreUnavailable(f"Cannot open lock file {lock_file}: {e}") from e

    start = time.monotonic()
    try:
        while True:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() - start > timeout:
                    raise LockTimeout(f"Could not acquire store lock {lock_file} within {timeout:g}s")
                time.sleep(POLL_INTERVAL_SECONDS)

        fd.write(f"{os.getpid()}\n")
        fd.flush()
        try:
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        fd.close()
