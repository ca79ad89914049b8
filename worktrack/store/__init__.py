"""
Store adapters for worktrack.

Persistence is injected into the engine; JsonFileStore is the durable
implementation, MemoryStore is for tests and embedding.
"""

from worktrack.store.base import Store, Transaction
from worktrack.store.json_store import JsonFileStore
from worktrack.store.locking import LockTimeout
from worktrack.store.memory import MemoryStore

__all__ = [
    "Store",
    "Transaction",
    "JsonFileStore",
    "MemoryStore",
    "LockTimeout",
]
