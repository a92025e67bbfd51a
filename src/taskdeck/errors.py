# src/taskdeck/errors.py

"""Domain errors raised by stores and engines."""

from __future__ import annotations


class TaskdeckError(Exception):
    """Base class for every rejection the engines can surface."""


class ValidationError(TaskdeckError):
    """A required field is empty or a value has the wrong shape."""


class CapacityExceeded(TaskdeckError):
    """The daily checklist is full."""

    def __init__(self, limit: int) -> None:
        super().__init__(
            f"You can only have {limit} daily tasks. Please remove one to add a new task."
        )
        self.limit = limit


class NotFound(TaskdeckError):
    def __init__(self, kind: str, item_id: object) -> None:
        super().__init__(f"{kind} not found: {item_id}")
        self.kind = kind
        self.item_id = item_id


class PersistenceError(TaskdeckError):
    """The local store could not be read or written."""


class ConfirmationError(TaskdeckError):
    """Unknown, already used or foreign confirmation token."""
