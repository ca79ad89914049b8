"""
Exception taxonomy for worktrack.

Controller operations raise these to the caller; none of them is fatal to
the process.
"""


class WorkTrackError(Exception):
    """Base class for all worktrack errors."""
    pass


class NotFound(WorkTrackError):
    """Operation referenced an item id that is not in the collection."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Work item '{item_id}' not found")


class InvalidOperation(WorkTrackError):
    """Operation is not legal for the item's kind or current status."""

    def __init__(self, message: str, item_id: str = ""):
        self.item_id = item_id
        super().__init__(message + (f" (item: {item_id})" if item_id else ""))


class StoreUnavailable(WorkTrackError):
    """The backing store could not be read or written."""
    pass
