# src/taskdeck/tasks/models.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from ..errors import ValidationError

logger = logging.getLogger(__name__)


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: str | Priority | None) -> Priority:
        """Blank means medium; anything outside low/medium/high is rejected."""
        if isinstance(raw, Priority):
            return raw
        if raw is None or not str(raw).strip():
            return cls.MEDIUM
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown priority: {raw!r} (use low, medium or high)") from None

    @classmethod
    def from_db(cls, raw: Any) -> Priority:
        try:
            return cls.parse(raw)
        except ValidationError:
            return cls.MEDIUM


class TaskFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: str | TaskFilter | None) -> TaskFilter:
        if isinstance(raw, TaskFilter):
            return raw
        if raw is None or not str(raw).strip():
            return cls.ALL
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown filter: {raw!r} (use all, active or completed)") from None


def normalize_due_date(raw: str | date | None) -> str:
    """Return "" for no due date, otherwise a validated YYYY-MM-DD string."""
    if raw is None:
        return ""
    if isinstance(raw, date):
        return raw.isoformat()
    s = str(raw).strip()
    if not s:
        return ""
    try:
        return date.fromisoformat(s).isoformat()
    except ValueError:
        raise ValidationError(f"Invalid due date: {raw!r} (expected YYYY-MM-DD)") from None


def _parse_ts(raw: Any) -> datetime | None:
    if not raw:
        return None
    try:
        dt = datetime.fromisoformat(str(raw))
    except ValueError:
        return None
    # Naive timestamps are taken as local time.
    return dt if dt.tzinfo is not None else dt.astimezone()


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    title: str
    description: str
    due_date: str  # "" when absent
    priority: Priority
    completed: bool
    created_at: datetime
    completed_at: datetime | None = None

    @property
    def due(self) -> date | None:
        return date.fromisoformat(self.due_date) if self.due_date else None

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "dueDate": self.due_date,
            "priority": self.priority.value,
            "completed": self.completed,
            "createdAt": self.created_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> Task | None:
        """Tolerant decoding; returns None for records that cannot be salvaged."""
        task_id = rec.get("id")
        created_at = _parse_ts(rec.get("createdAt"))
        if task_id is None or str(task_id) == "" or created_at is None:
            logger.warning("Skipping malformed task record: %r", rec)
            return None

        try:
            due_date = normalize_due_date(rec.get("dueDate"))
        except ValidationError:
            due_date = ""

        completed = rec.get("completed") is True
        completed_at = _parse_ts(rec.get("completedAt")) if completed else None
        if completed and completed_at is None:
            completed_at = created_at

        return cls(
            id=str(task_id),
            title=str(rec.get("title") or ""),
            description=str(rec.get("description") or ""),
            due_date=due_date,
            priority=Priority.from_db(rec.get("priority")),
            completed=completed,
            created_at=created_at,
            completed_at=completed_at,
        )


@dataclass(slots=True, frozen=True)
class DailyTask:
    id: int
    name: str
    completed: bool = False

    def to_record(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "completed": self.completed}

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> DailyTask | None:
        try:
            item_id = int(rec["id"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed daily task record: %r", rec)
            return None
        name = str(rec.get("name") or "").strip()
        if not name:
            logger.warning("Skipping daily task record without a name: %r", rec)
            return None
        return cls(id=item_id, name=name, completed=rec.get("completed") is True)
