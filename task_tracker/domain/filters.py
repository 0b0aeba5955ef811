from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Optional

from . import queries
from .entities import Task
from .enums import TaskStatus


class SortKey(StrEnum):
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    TITLE = "title"


_SORTERS = {
    SortKey.DUE_DATE: queries.sort_by_due_date,
    SortKey.PRIORITY: queries.sort_by_priority,
    SortKey.TITLE: queries.sort_by_title,
}


@dataclass(frozen=True)
class TaskFilters:
    category: str | None = None
    status: TaskStatus | None = None
    due_from: Optional[date] = None
    due_to: Optional[date] = None
    search: str | None = None
    sort: SortKey | None = None


def apply_filters(tasks: Iterable[Task], filters: TaskFilters) -> list[Task]:
    result = list(tasks)

    if filters.category:
        result = queries.filter_by_category(result, filters.category)

    if filters.status is not None:
        result = queries.filter_by_status(result, filters.status)

    if filters.due_from or filters.due_to:
        result = queries.filter_by_due_range(
            result,
            filters.due_from or date.min,
            filters.due_to or date.max,
        )

    if filters.search:
        result = queries.search(result, filters.search)

    if filters.sort is not None:
        result = _SORTERS[filters.sort](result)

    return result
