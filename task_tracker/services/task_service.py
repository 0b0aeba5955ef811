from __future__ import annotations

import logging
import os
from datetime import date, datetime
from enum import StrEnum
from pathlib import Path

from task_tracker.config import SETTINGS
from task_tracker.domain import queries
from task_tracker.domain.entities import Task
from task_tracker.domain.enums import Priority, TaskStatus
from task_tracker.domain.errors import StorageError, TaskNotFoundError
from task_tracker.domain.filters import TaskFilters, apply_filters
from task_tracker.infra.repository import DEFAULT_EXTENSION, CsvTaskRepository, LoadResult

logger = logging.getLogger(__name__)

_UNSET = object()


class LoadMode(StrEnum):
    REPLACE = "replace"
    REPLACE_WITH_BACKUP = "replace_with_backup"
    APPEND = "append"


class TaskService:
    def __init__(self, repo: CsvTaskRepository, tasks: list[Task] | None = None) -> None:
        self._repo = repo
        self._tasks: list[Task] = list(tasks or [])

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def list_tasks(self, filters: TaskFilters | None = None) -> list[Task]:
        if filters is None:
            return self.tasks
        return apply_filters(self._tasks, filters)

    def get_task(self, index: int) -> Task:
        if not 0 <= index < len(self._tasks):
            raise TaskNotFoundError(f"No task at index {index}.")
        return self._tasks[index]

    def find(self, task_id: str) -> Task:
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise TaskNotFoundError(f"No task with id {task_id}.")

    def index_of(self, task: Task) -> int:
        for index, candidate in enumerate(self._tasks):
            if candidate is task:
                return index
        raise TaskNotFoundError(f"Task {task.title!r} is not in the list.")

    def add_task(
        self,
        title: str,
        category: str,
        priority: Priority | str = Priority.MEDIUM,
        status: TaskStatus | str = TaskStatus.NOT_STARTED,
        description: str | None = None,
        due_date: date | None = None,
    ) -> Task:
        task = Task(title, category, priority, status, description, due_date)
        self._tasks.append(task)
        logger.info("Added task %r", task.title)
        return task

    def edit_task(
        self,
        index: int,
        *,
        title: str | None = None,
        description: object = _UNSET,
        category: str | None = None,
        due_date: object = _UNSET,
        priority: Priority | str | None = None,
        status: TaskStatus | str | None = None,
    ) -> Task:
        """Apply the given changes to the task at ``index``.

        ``None`` for title/category/priority/status means "keep"; pass
        ``None`` explicitly for description or due_date to clear them.
        All changes are made on a copy, so a rejected value leaves the
        stored task as it was.
        """
        current = self.get_task(index)
        draft = current.copy()
        if title is not None:
            draft.title = title
        if description is not _UNSET:
            draft.description = description
        if due_date is not _UNSET:
            draft.due_date = due_date
        if priority is not None:
            draft.update_priority(priority)
        if status is not None:
            draft.update_status(status)
        if category is not None and category != draft.category:
            draft = draft.with_category(category)

        self._tasks[index] = draft
        logger.info("Updated task %r", draft.title)
        return draft

    def delete_task(self, index: int) -> Task:
        task = self.get_task(index)
        del self._tasks[index]
        logger.info("Deleted task %r", task.title)
        return task

    def mark_completed(self, index: int) -> Task:
        task = self.get_task(index)
        task.mark_completed()
        return task

    def due_soon_alerts(self, now: datetime | None = None) -> list[queries.DueAlert]:
        return queries.due_soon(self._tasks, now or datetime.now(), SETTINGS.due_soon_hours)

    def group_by_date_range(self, start: date, end: date) -> queries.DateGroups:
        return queries.group_by_date_range(self._tasks, start, end)

    def save(self, path: str | os.PathLike) -> Path:
        target = normalize_save_path(path)
        return self._repo.save(self._tasks, target)

    def load(self, path: str | os.PathLike, mode: LoadMode = LoadMode.REPLACE) -> LoadResult:
        mode = LoadMode(mode)
        result = self._repo.load(path)
        if not result.tasks:
            logger.info("No valid tasks in %s; keeping current list", path)
            return result

        if mode is LoadMode.APPEND:
            self._tasks.extend(result.tasks)
        else:
            if mode is LoadMode.REPLACE_WITH_BACKUP and self._tasks:
                self._repo.create_backup(self._tasks, path)
            self._tasks = list(result.tasks)
        logger.info("Loaded %d task(s) from %s (%s)", len(result.tasks), path, mode.value)
        return result


def normalize_save_path(path: str | os.PathLike) -> Path:
    raw = str(path).strip()
    if not raw:
        raise StorageError("Invalid path.", path)
    target = Path(raw)
    if target.is_dir():
        raise StorageError(
            f"'{target}' is a directory. Please provide a file name (for example: tasks.csv).",
            target,
        )
    if not target.suffix:
        target = target.with_name(target.name + DEFAULT_EXTENSION)
    return target
