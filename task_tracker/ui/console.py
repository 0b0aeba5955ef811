"""Interactive menu loop.

Everything here is prompt/print glue around :class:`TaskService`; the
input and output callables are injectable so the loop can be scripted.
"""
from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import TypeVar

from task_tracker.config import SETTINGS
from task_tracker.domain.entities import DATE_FORMAT, Task
from task_tracker.domain.enums import Priority, TaskStatus
from task_tracker.domain.errors import StorageError, TaskNotFoundError, ValidationError
from task_tracker.domain.filters import SortKey, TaskFilters
from task_tracker.infra.codec import parse_date
from task_tracker.services.task_service import LoadMode, TaskService

SEPARATOR = "------------"

MAIN_MENU = [
    ("1", "Add new task"),
    ("2", "Edit existing task"),
    ("3", "Delete task"),
    ("4", "Mark task as completed"),
    ("5", "View / Filter / Sort tasks"),
    ("6", "Search tasks by keyword"),
    ("7", "View tasks due within date range"),
    ("8", "Day / Week view (grouped by date)"),
    ("9", "Save tasks to file"),
    ("10", "Load tasks from file"),
    ("0", "Exit"),
]

E = TypeVar("E", Priority, TaskStatus)


def format_task(task: Task, index: int) -> str:
    due = task.due_date.strftime(DATE_FORMAT) if task.due_date else "none"
    desc = task.description if task.description and task.description.strip() else "<none>"
    created = task.created_at.strftime(DATE_FORMAT)
    completed = (
        f" | Completed: {task.completed_at.strftime(DATE_FORMAT)}" if task.completed_at else ""
    )
    return (
        f"[{index}] {task.title} | Category: {task.category} | Priority: {task.priority.label} "
        f"| Status: {task.status.value} | Due: {due} | Created: {created}{completed} | Desc: {desc}"
    )


class ConsoleShell:
    def __init__(
        self,
        service: TaskService,
        input_fn: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.service = service
        self._input = input_fn
        self._out = output
        self._clock = clock
        self._actions: dict[str, Callable[[], None]] = {
            "1": self.add_task,
            "2": self.edit_task,
            "3": self.delete_task,
            "4": self.mark_completed,
            "5": self.view_tasks,
            "6": self.search_tasks,
            "7": self.view_due_range,
            "8": self.day_week_view,
            "9": self.save_tasks,
            "10": self.load_tasks,
        }

    def run(self) -> None:
        self._out("Personal Task & Schedule Management System")
        try:
            while True:
                self.show_due_alerts()
                self._print_menu()
                choice = self._input("Choose an option: ").strip()
                if choice == "0":
                    return
                action = self._actions.get(choice)
                if action is None:
                    self._out("Invalid choice. Try again.")
                    continue
                try:
                    action()
                except (ValidationError, TaskNotFoundError) as exc:
                    self._out(f"Invalid task data: {exc}")
                except StorageError as exc:
                    self._out(str(exc))
                self._out(SEPARATOR)
        except (KeyboardInterrupt, EOFError):
            self._out("")
            self._out("Goodbye.")

    # -------------------- menu actions --------------------
    def add_task(self) -> None:
        self._header("Add New Task")
        title = self._prompt_required("Title: ")
        description = self._prompt_optional("Description (optional): ")
        category = self._prompt_required("Category: ")
        due_date = self._prompt_date("Due date (yyyy-MM-dd) (optional): ")
        priority = self._prompt_enum(
            Priority, "Priority (Low, Medium, High) [Defaults to Medium]: ", Priority.MEDIUM
        )
        status = self._prompt_enum(
            TaskStatus,
            "Status (NotStarted, InProgress, Completed) [Defaults to NotStarted]: ",
            TaskStatus.NOT_STARTED,
        )
        task = self.service.add_task(title, category, priority, status, description, due_date)
        self._out("Task added:")
        self._out(format_task(task, self.service.index_of(task)))

    def edit_task(self) -> None:
        self._header("Edit Task")
        index = self._prompt_index()
        if index is None:
            return
        task = self.service.get_task(index)
        self._out("Current:")
        self._out(format_task(task, index))
        self._out("Leave a field blank to keep it; enter '-' to clear an optional field.")

        changes: dict = {}
        title = self._input(f"Title [{task.title}]: ").strip()
        if title:
            changes["title"] = title
        description = self._input("Description: ").strip()
        if description == "-":
            changes["description"] = None
        elif description:
            changes["description"] = description
        category = self._input(f"Category [{task.category}]: ").strip()
        if category:
            changes["category"] = category
        due_raw = self._input("Due date (yyyy-MM-dd): ").strip()
        if due_raw == "-":
            changes["due_date"] = None
        elif due_raw:
            changes["due_date"] = self._parse_date_or_fail(due_raw)
        priority_raw = self._input(f"Priority [{task.priority.label}]: ").strip()
        if priority_raw:
            changes["priority"] = priority_raw
        status_raw = self._input(f"Status [{task.status.value}]: ").strip()
        if status_raw:
            changes["status"] = status_raw

        updated = self.service.edit_task(index, **changes)
        self._out("Task updated:")
        self._out(format_task(updated, index))

    def delete_task(self) -> None:
        self._header("Delete Task")
        index = self._prompt_index()
        if index is None:
            return
        self._out("Selected:")
        self._out(format_task(self.service.get_task(index), index))
        if self._ask_yes_no("Delete this task? (y/N): "):
            self.service.delete_task(index)
            self._out("Task deleted.")
        else:
            self._out("Delete cancelled.")

    def mark_completed(self) -> None:
        self._header("Mark Task Completed")
        index = self._prompt_index()
        if index is None:
            return
        task = self.service.mark_completed(index)
        self._out("Task marked completed:")
        self._out(format_task(task, index))

    def view_tasks(self) -> None:
        self._header("View / Filter / Sort")
        self._out("1) View all")
        self._out("2) Filter by category")
        self._out("3) Filter by status")
        self._out("4) Filter by due date range")
        self._out("5) Sort tasks")
        self._out("0) Back")
        choice = self._input("Choose an option: ").strip()
        if choice == "1":
            filters = TaskFilters()
        elif choice == "2":
            filters = TaskFilters(category=self._prompt_required("Category: "))
        elif choice == "3":
            filters = TaskFilters(
                status=self._prompt_enum(
                    TaskStatus, "Status (NotStarted, InProgress, Completed): ", None
                )
            )
        elif choice == "4":
            start, end = self._prompt_range()
            filters = TaskFilters(due_from=start, due_to=end)
        elif choice == "5":
            filters = TaskFilters(sort=self._prompt_sort())
        else:
            return
        self._display(self.service.list_tasks(filters))

    def search_tasks(self) -> None:
        self._header("Search Tasks")
        keyword = self._prompt_required("Keyword: ")
        self._display(self.service.list_tasks(TaskFilters(search=keyword)))

    def view_due_range(self) -> None:
        self._header("Tasks Due Within Range")
        self._out("Quick choices:")
        self._out("1) Next 7 days")
        self._out("2) Next 30 days")
        self._out("3) Custom range")
        choice = self._input("Choose an option: ").strip()
        today = self._clock().date()
        if choice == "1":
            start, end = today, today + timedelta(days=7)
        elif choice == "2":
            start, end = today, today + timedelta(days=30)
        elif choice == "3":
            start, end = self._prompt_range()
        else:
            self._out("Invalid choice.")
            return
        filters = TaskFilters(due_from=start, due_to=end, sort=SortKey.DUE_DATE)
        self._display(self.service.list_tasks(filters))

    def day_week_view(self) -> None:
        self._header("Day / Week View")
        self._out("1) Day view")
        self._out("2) Week view (7 days)")
        choice = self._input("Choose an option: ").strip()
        if choice not in ("1", "2"):
            self._out("Invalid choice.")
            return
        start = self._prompt_date("Start date (yyyy-MM-dd) [today]: ") or self._clock().date()
        end = start if choice == "1" else start + timedelta(days=6)

        groups = self.service.group_by_date_range(start, end)
        self._header(f"Tasks {start.strftime(DATE_FORMAT)} to {end.strftime(DATE_FORMAT)}")
        for day, tasks in groups.days.items():
            self._out("")
            self._out(day.strftime("%Y-%m-%d (%A)"))
            if not tasks:
                self._out("  (no tasks)")
            for task in tasks:
                self._out("  " + format_task(task, self.service.index_of(task)))

        self._out("")
        self._out(SEPARATOR)
        self._out("No due date:")
        if not groups.no_due_date:
            self._out("  (none)")
        for task in groups.no_due_date:
            self._out("  " + format_task(task, self.service.index_of(task)))

    def save_tasks(self) -> None:
        if not len(self.service):
            self._out("No tasks to save.")
            return
        raw = self._prompt_required("Enter file path to save tasks (e.g. tasks.csv): ")
        target = Path(raw)
        if target.suffix and target.suffix.lower() != ".csv":
            self._out(f"Provided file has extension '{target.suffix}'.")
            if self._ask_yes_no("Replace extension with '.csv'? (Y/n): ", default=True):
                raw = str(target.with_suffix(".csv"))
        candidate = Path(raw)
        if candidate.is_file() and not self._ask_yes_no(
            f"File '{candidate}' already exists. Overwrite? (y/N): "
        ):
            self._out("Save cancelled.")
            return
        saved = self.service.save(raw)
        self._out(f"Tasks saved to '{saved}'.")

    def load_tasks(self) -> None:
        raw = self._prompt_required(
            f"Enter file path to load tasks from [{SETTINGS.tasks_file}]: ",
            default=SETTINGS.tasks_file,
        )
        path = Path(raw)
        if not path.is_file():
            self._out("File not found.")
            return

        mode = LoadMode.REPLACE
        if len(self.service):
            self._out("1) Replace and backup current tasks")
            self._out("2) Replace current tasks")
            self._out("3) Append to current tasks")
            choice = self._input("Choose an option: ").strip()
            mode = {
                "1": LoadMode.REPLACE_WITH_BACKUP,
                "2": LoadMode.REPLACE,
                "3": LoadMode.APPEND,
            }.get(choice)
            if mode is None:
                self._out("Load cancelled.")
                return

        result = self.service.load(path, mode)
        if not result.tasks:
            self._out("No valid tasks were read from the file.")
        else:
            self._out(f"Loaded {len(result.tasks)} task(s) ({mode.value}).")
        if result.skipped:
            where = f" See '{result.log_path}'." if result.log_path else ""
            self._out(f"Skipped {result.skipped} invalid line(s).{where}")

    def show_due_alerts(self) -> None:
        now = self._clock()
        alerts = self.service.due_soon_alerts(now)
        if not alerts:
            return
        self._out("")
        self._out(f"!!! ALERT: Tasks due within next {SETTINGS.due_soon_hours} hours or overdue !!!")
        self._out(SEPARATOR)
        for alert in alerts:
            task = alert.task
            overdue = " (OVERDUE)" if alert.overdue else ""
            self._out(
                f" - {task.title} | Due: {task.due_date.strftime(DATE_FORMAT)}{overdue} "
                f"| Priority: {task.priority.label} | Status: {task.status.value}"
            )
        self._out("")

    # -------------------- prompt helpers --------------------
    def _print_menu(self) -> None:
        self._out("")
        self._out(SEPARATOR)
        for key, label in MAIN_MENU:
            self._out(f"{key}) {label}")

    def _header(self, title: str) -> None:
        self._out("")
        self._out(SEPARATOR)
        self._out(title)
        self._out(SEPARATOR)

    def _display(self, tasks: Sequence[Task]) -> None:
        if not tasks:
            self._out("No tasks found.")
            return
        for task in tasks:
            self._out(format_task(task, self.service.index_of(task)))

    def _prompt_required(self, prompt: str, default: str | None = None) -> str:
        while True:
            value = self._input(prompt).strip()
            if value:
                return value
            if default is not None:
                return default
            self._out("Value required.")

    def _prompt_optional(self, prompt: str) -> str | None:
        value = self._input(prompt).strip()
        return value or None

    def _prompt_date(self, prompt: str) -> date | None:
        while True:
            raw = self._input(prompt).strip()
            if not raw:
                return None
            try:
                return parse_date(raw)
            except ValueError:
                self._out("Invalid date. Use yyyy-MM-dd.")

    def _parse_date_or_fail(self, raw: str) -> date:
        try:
            return parse_date(raw)
        except ValueError:
            raise ValidationError(f"Invalid date '{raw}'.") from None

    def _prompt_range(self) -> tuple[date, date]:
        today = self._clock().date()
        start = self._prompt_date("Start date (yyyy-MM-dd) [today]: ") or today
        end = self._prompt_date("End date (yyyy-MM-dd) [start + 7 days]: ") or start + timedelta(days=7)
        if end < start:
            start, end = end, start
        return start, end

    def _prompt_sort(self) -> SortKey:
        self._out("1) Due date (earliest first)")
        self._out("2) Priority (High -> Low)")
        self._out("3) Title (A -> Z)")
        choice = self._input("Sort by: ").strip()
        return {"2": SortKey.PRIORITY, "3": SortKey.TITLE}.get(choice, SortKey.DUE_DATE)

    def _prompt_enum(self, enum_type: type[E], prompt: str, default: E | None) -> E:
        while True:
            raw = self._input(prompt).strip()
            if not raw and default is not None:
                return default
            try:
                return enum_type.parse(raw)
            except ValueError:
                self._out("Invalid value. Try again.")

    def _prompt_index(self) -> int | None:
        tasks = self.service.tasks
        if not tasks:
            self._out("No tasks available.")
            return None
        self._display(tasks)
        raw = self._input("Enter task index: ").strip()
        if raw.isdigit() and int(raw) < len(tasks):
            return int(raw)
        self._out("Invalid index.")
        return None

    def _ask_yes_no(self, prompt: str, default: bool = False) -> bool:
        answer = self._input(prompt).strip().lower()
        if not answer:
            return default
        return answer in ("y", "yes")
