"""Read-only views over a task list.

Nothing here mutates its input; every function returns a fresh list (or a
fresh grouping) so callers may keep the original ordering for display.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

from .entities import Task
from .enums import TaskStatus
from .errors import ValidationError


@dataclass(frozen=True)
class DueAlert:
    task: Task
    overdue: bool


@dataclass
class DateGroups:
    days: dict[date, list[Task]] = field(default_factory=dict)
    no_due_date: list[Task] = field(default_factory=list)


def filter_by_category(tasks: Iterable[Task], name: str) -> list[Task]:
    needle = name.casefold()
    return [task for task in tasks if task.category.casefold() == needle]


def filter_by_status(tasks: Iterable[Task], status: TaskStatus) -> list[Task]:
    return [task for task in tasks if task.status is status]


def filter_by_due_range(tasks: Iterable[Task], start: date, end: date) -> list[Task]:
    return [
        task
        for task in tasks
        if task.due_date is not None and start <= task.due_date <= end
    ]


def search(tasks: Iterable[Task], keyword: str) -> list[Task]:
    needle = keyword.casefold()
    return [
        task
        for task in tasks
        if needle in task.title.casefold()
        or (task.description is not None and needle in task.description.casefold())
    ]


def sort_by_due_date(tasks: Iterable[Task]) -> list[Task]:
    return sorted(tasks, key=lambda task: task.due_date or date.max)


def sort_by_priority(tasks: Iterable[Task]) -> list[Task]:
    return sorted(tasks, key=lambda task: task.priority, reverse=True)


def sort_by_title(tasks: Iterable[Task]) -> list[Task]:
    return sorted(tasks, key=lambda task: task.title.casefold())


def _day_order(task: Task) -> tuple:
    return (-task.priority, task.title.casefold())


def group_by_date_range(tasks: Iterable[Task], start: date, end: date) -> DateGroups:
    if start > end:
        raise ValidationError("Start date must not be after end date.")
    tasks = list(tasks)
    groups = DateGroups()
    for offset in range((end - start).days + 1):
        day = start + timedelta(days=offset)
        groups.days[day] = sorted(
            (task for task in tasks if task.due_date == day),
            key=_day_order,
        )
    groups.no_due_date = [task for task in tasks if task.due_date is None]
    return groups


def due_soon(tasks: Iterable[Task], now: datetime, horizon_hours: int = 24) -> list[DueAlert]:
    """Open tasks due by ``now + horizon_hours``, soonest first.

    A due date counts from midnight of that day, so a task due today is
    already overdue once the day has started.
    """
    cutoff = now + timedelta(hours=horizon_hours)
    candidates = [
        task
        for task in tasks
        if task.due_date is not None
        and task.status is not TaskStatus.COMPLETED
        and datetime.combine(task.due_date, time.min) <= cutoff
    ]
    return [
        DueAlert(task=task, overdue=datetime.combine(task.due_date, time.min) < now)
        for task in sort_by_due_date(candidates)
    ]
