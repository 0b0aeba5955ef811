from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from .enums import Priority, TaskStatus
from .errors import ValidationError

DATE_FORMAT = "%Y-%m-%d"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _now() -> datetime:
    # Stored timestamps carry whole seconds only.
    return datetime.now().replace(microsecond=0)


def _single_line(value: str, field: str) -> str:
    # Rows in the task file are one line each.
    if "\n" in value or "\r" in value:
        raise ValidationError(f"{field} cannot contain line breaks.")
    return value


def _require_text(value: object, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} cannot be empty.")
    return _single_line(value, field)


def _optional_text(value: object, field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be text.")
    return _single_line(value, field)


def _coerce_priority(value: object) -> Priority:
    if isinstance(value, Priority):
        return value
    if isinstance(value, str):
        try:
            return Priority.parse(value)
        except ValueError:
            pass
    raise ValidationError(f"Priority must be one of Low, Medium, High (got {value!r}).")


def _coerce_status(value: object) -> TaskStatus:
    if isinstance(value, TaskStatus):
        return value
    if isinstance(value, str):
        try:
            return TaskStatus.parse(value)
        except ValueError:
            pass
    raise ValidationError(
        f"Status must be one of NotStarted, InProgress, Completed (got {value!r})."
    )


class Task:
    """One unit of trackable work.

    ``completed_at`` is kept in step with ``status`` by every mutator: it is
    set while the task is Completed and ``None`` otherwise. ``category`` is
    fixed for the life of the object; use :meth:`with_category` to get a
    rebuilt copy.
    """

    __slots__ = (
        "_id",
        "_title",
        "_description",
        "_category",
        "_priority",
        "_status",
        "due_date",
        "_created_at",
        "_completed_at",
    )

    def __init__(
        self,
        title: str,
        category: str,
        priority: Priority | str,
        status: TaskStatus | str,
        description: Optional[str] = None,
        due_date: Optional[date] = None,
    ) -> None:
        # Validate everything before assigning anything.
        title = _require_text(title, "Title")
        category = _require_text(category, "Category")
        description = _optional_text(description, "Description")
        priority = _coerce_priority(priority)
        status = _coerce_status(status)

        now = _now()
        self._id = uuid.uuid4().hex
        self._title = title
        self._description = description
        self._category = category
        self._priority = priority
        self._status = status
        self.due_date = due_date
        self._created_at = now
        self._completed_at = now if status is TaskStatus.COMPLETED else None

    @classmethod
    def restore(
        cls,
        title: str,
        category: str,
        priority: Priority | str,
        status: TaskStatus | str,
        description: Optional[str],
        due_date: Optional[date],
        created_at: datetime,
        completed_at: Optional[datetime],
    ) -> Task:
        """Rebuild a task from persisted state, timestamps included."""
        task = cls(title, category, priority, status, description, due_date)
        task._created_at = created_at
        if task._status is TaskStatus.COMPLETED:
            task._completed_at = completed_at or created_at
        else:
            task._completed_at = None
        return task

    @property
    def id(self) -> str:
        return self._id

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, value: str) -> None:
        self._title = _require_text(value, "Title")

    @property
    def description(self) -> Optional[str]:
        return self._description

    @description.setter
    def description(self, value: Optional[str]) -> None:
        self._description = _optional_text(value, "Description")

    @property
    def category(self) -> str:
        return self._category

    @property
    def priority(self) -> Priority:
        return self._priority

    @property
    def status(self) -> TaskStatus:
        return self._status

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def completed_at(self) -> Optional[datetime]:
        return self._completed_at

    @property
    def is_completed(self) -> bool:
        return self._status is TaskStatus.COMPLETED

    def update_status(self, status: TaskStatus | str) -> None:
        status = _coerce_status(status)
        self._status = status
        if status is TaskStatus.COMPLETED:
            if self._completed_at is None:
                self._completed_at = _now()
        else:
            self._completed_at = None

    def mark_completed(self) -> None:
        self._status = TaskStatus.COMPLETED
        self._completed_at = _now()

    def update_priority(self, priority: Priority | str) -> None:
        self._priority = _coerce_priority(priority)

    def with_category(self, category: str) -> Task:
        """Return a copy filed under ``category``; every other field, id included, is kept."""
        category = _require_text(category, "Category")
        clone = self.copy()
        clone._category = category
        return clone

    def copy(self) -> Task:
        clone = Task.__new__(Task)
        for slot in Task.__slots__:
            setattr(clone, slot, getattr(self, slot))
        return clone

    def render(self) -> str:
        parts = [f"{self._title} [{self._priority.label}] - {self._status.value}"]
        if self.due_date is not None:
            parts.append(f"Due: {self.due_date.strftime(DATE_FORMAT)}")
        if self._category:
            parts.append(f"Category: {self._category}")
        parts.append(f"Created: {self._created_at.strftime(TIMESTAMP_FORMAT)}")
        if self._completed_at is not None:
            parts.append(f"Completed: {self._completed_at.strftime(TIMESTAMP_FORMAT)}")
        return " ".join(parts)

    def _values(self) -> tuple:
        return (
            self._title,
            self._description,
            self._category,
            self._priority,
            self._status,
            self.due_date,
            self._created_at,
            self._completed_at,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Task):
            return NotImplemented
        return self._values() == other._values()

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return (
            f"Task(title={self._title!r}, category={self._category!r}, "
            f"priority={self._priority.label}, status={self._status.value}, "
            f"due_date={self.due_date!r})"
        )
