"""
JSON file store.

The whole collection lives in one JSON document:

  {"version": 1, "items": [{"id": "...", "kind": "request", ...}, ...]}

A bare JSON array of items is also accepted on read, as a convenience for
hand-written files, and rewritten in the versioned layout on the next save.
"""

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path

from worktrack.lib.config import DEFAULT_LOCK_TIMEOUT_SECONDS, EngineConfig
from worktrack.lib.errors import StoreUnavailable
from worktrack.lib.validate import ValidationError, collect_errors, validate_before_write
from worktrack.models import WorkItem
from worktrack.store.base import STORE_VERSION, Store, to_document, warn_on_violations
from worktrack.store.locking import file_lock, lock_path_for

logger = logging.getLogger(__name__)

# Cap on schema errors quoted in a StoreUnavailable message
MAX_REPORTED_ERRORS = 3


class JsonFileStore(Store):
    """Store adapter backed by a single JSON file."""

    def __init__(self, path: Path, lock_timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS):
        super().__init__()
        self.path = Path(path)
        self.lock_path = lock_path_for(self.path)
        self.lock_timeout = lock_timeout
        self._depth = 0

    @classmethod
    def from_config(cls, config: EngineConfig) -> "JsonFileStore":
        return cls(config.store_path, lock_timeout=config.lock_timeout_seconds)

    def __repr__(self) -> str:
        return f"JsonFileStore({str(self.path)!r})"

    @contextmanager
    def locked(self):
        """Hold the in-process lock and, on first entry, the file lock."""
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            with file_lock(self.lock_path, self.lock_timeout):
                self._depth = 1
                try:
                    yield
                finally:
                    self._depth = 0

    def load(self) -> list[WorkItem]:
        """Load all items from the JSON file.

        Raises:
            StoreUnavailable: if the file can't be read, isn't valid JSON,
                or doesn't match the store schema
        """
        if not self.path.exists():
            return []

        try:
            content = self.path.read_text()
        except OSError as e:
            raise StoreUnavailable(f"Cannot read store {self.path}: {e}") from e

        if not content.strip():
            return []

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise StoreUnavailable(f"Invalid JSON in store {self.path}: {e}") from e

        if isinstance(data, list):
            logger.info(f"[STORE] {self.path}: bare array layout, will rewrite as versioned document on next save")
            data = {"version": STORE_VERSION, "items": data}

        errors = collect_errors(data)
        if errors:
            shown = "; ".join(errors[:MAX_REPORTED_ERRORS])
            more = f" (+{len(errors) - MAX_REPORTED_ERRORS} more)" if len(errors) > MAX_REPORTED_ERRORS else ""
            raise StoreUnavailable(f"Store {self.path} failed schema validation: {shown}{more}")

        try:
            items = [WorkItem.from_dict(entry) for entry in data["items"]]
        except (KeyError, ValueError) as e:
            raise StoreUnavailable(f"Malformed item in store {self.path}: {e}") from e

        warn_on_violations(items, str(self.path))
        logger.debug(f"[STORE] Loaded {len(items)} item(s) from {self.path}")
        return items

    def save(self, items: list[WorkItem]) -> None:
        """Atomically replace the JSON file with items.

        Writes to a temp file in the same directory, then renames it over the
        store so readers never see a partial document.

        Raises:
            StoreUnavailable: on validation or write failure
        """
        document = to_document(items)
        try:
            validate_before_write(document, self.path)
        except ValidationError as e:
            raise StoreUnavailable(str(e)) from e

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                json.dump(document, tmp, indent=2)
                tmp.write("\n")
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreUnavailable(f"Cannot write store {self.path}: {e}") from e

        logger.debug(f"[STORE] Saved {len(items)} item(s) to {self.path}")
