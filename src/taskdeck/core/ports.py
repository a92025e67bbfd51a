# src/taskdeck/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the engines.

Engines depend on Protocols instead of concrete implementations.
This keeps storage swappable and makes testing easier.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol

Clock = Callable[[], datetime]
# Returns the current time as a timezone-aware datetime in the user's local zone.


def local_now() -> datetime:
    return datetime.now().astimezone()


class KeyValueStore(Protocol):
    """Durable local key-value space holding whole collections and scalar markers."""

    def load(self, key: str) -> list[dict[str, Any]]: ...
    def save(self, key: str, items: list[dict[str, Any]]) -> None: ...
    def get_marker(self, key: str) -> str | None: ...
    def set_marker(self, key: str, value: str) -> None: ...
