"""Domain entities synchronised with the remote document store."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import IntEnum
from uuid import uuid4

from .const import DEFAULT_LIST_COLOR


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _new_id() -> str:
    return str(uuid4()).upper()


class TaskPriority(IntEnum):
    """Priority levels as stored on the wire."""

    NONE = -1
    LOW = 0
    MEDIUM = 1
    HIGH = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(slots=True)
class TaskList:
    """Named, ordered container for tasks."""

    name: str
    id: str = field(default_factory=_new_id)
    color_hex: str = DEFAULT_LIST_COLOR
    order_index: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def color_rgba(self) -> tuple[float, float, float, float]:
        return parse_hex_color(self.color_hex)


@dataclass(slots=True)
class Task:
    """Unit of work belonging to exactly one :class:`TaskList`."""

    title: str
    list_id: str
    id: str = field(default_factory=_new_id)
    notes: str | None = None
    due_date: datetime | None = None
    is_completed: bool = False
    priority: TaskPriority = TaskPriority.NONE
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def toggled(self) -> Task:
        return replace(self, is_completed=not self.is_completed)

    def is_overdue(self, now: datetime | None = None) -> bool:
        """Return ``True`` when the due day is already behind ``now``.

        Completed tasks are never overdue and the comparison ignores the
        time of day.
        """

        if self.is_completed or self.due_date is None:
            return False
        now = now or _utcnow()
        return _local_day(self.due_date, now) < now.date()

    def is_due_today(self, now: datetime | None = None) -> bool:
        if self.due_date is None:
            return False
        now = now or _utcnow()
        return _local_day(self.due_date, now) == now.date()


def _local_day(moment: datetime, reference: datetime):
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    if reference.tzinfo is not None:
        moment = moment.astimezone(reference.tzinfo)
    return moment.date()


def next_order_index(lists: Iterable[TaskList]) -> int:
    """Return the order index for a list appended after ``lists``."""

    return max((item.order_index for item in lists), default=-1) + 1


def split_tasks_by_completion(tasks: Iterable[Task]) -> tuple[list[Task], list[Task]]:
    """Split ``tasks`` into pending (newest first) and completed (recently finished first)."""

    pending: list[Task] = []
    completed: list[Task] = []
    for task in tasks:
        (completed if task.is_completed else pending).append(task)
    pending.sort(key=lambda task: task.created_at, reverse=True)
    completed.sort(key=lambda task: task.updated_at, reverse=True)
    return pending, completed


def parse_hex_color(text: str | None) -> tuple[float, float, float, float]:
    """Parse ``#RGB``, ``#RRGGBB`` or ``#AARRGGBB`` into RGBA floats.

    Anything else yields opaque black.
    """

    digits = "".join(ch for ch in str(text or "") if ch.isalnum())
    try:
        value = int(digits, 16) if digits else 0
    except ValueError:
        return (0.0, 0.0, 0.0, 1.0)
    if len(digits) == 3:
        a, r, g, b = 255, (value >> 8) * 17, (value >> 4 & 0xF) * 17, (value & 0xF) * 17
    elif len(digits) == 6:
        a, r, g, b = 255, value >> 16, value >> 8 & 0xFF, value & 0xFF
    elif len(digits) == 8:
        a, r, g, b = value >> 24, value >> 16 & 0xFF, value >> 8 & 0xFF, value & 0xFF
    else:
        a, r, g, b = 255, 0, 0, 0
    return (r / 255.0, g / 255.0, b / 255.0, a / 255.0)


__all__ = [
    "Task",
    "TaskList",
    "TaskPriority",
    "next_order_index",
    "parse_hex_color",
    "split_tasks_by_completion",
]
