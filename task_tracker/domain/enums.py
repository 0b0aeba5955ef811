from __future__ import annotations

from enum import IntEnum, StrEnum


class TaskStatus(StrEnum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"

    @classmethod
    def parse(cls, raw: str) -> TaskStatus:
        """Case-insensitive lookup by stored name; raises ValueError."""
        key = raw.strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"unknown status {raw!r}")


class Priority(IntEnum):
    """Ordered by rank so that ``max``/``sorted`` put HIGH last."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    def __str__(self) -> str:
        return self.label

    @classmethod
    def parse(cls, raw: str) -> Priority:
        key = raw.strip().lower()
        for member in cls:
            if member.label.lower() == key:
                return member
        raise ValueError(f"unknown priority {raw!r}")
