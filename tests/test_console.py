from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from pathlib import Path

from task_tracker.domain.enums import Priority, TaskStatus
from task_tracker.infra.repository import CsvTaskRepository
from task_tracker.services.task_service import TaskService
from task_tracker.ui.console import ConsoleShell

NOW = datetime(2025, 1, 1, 9, 0, 0)


def _run(service: TaskService, answers: Iterable[str]) -> list[str]:
    replies = iter(answers)
    output: list[str] = []

    def fake_input(prompt: str) -> str:
        output.append(prompt)
        try:
            return next(replies)
        except StopIteration:
            raise EOFError from None

    ConsoleShell(service, input_fn=fake_input, output=output.append, clock=lambda: NOW).run()
    return output


def test_add_task_flow() -> None:
    service = TaskService(CsvTaskRepository())

    _run(service, ["1", "Buy milk", "", "Errands", "2025-01-10", "high", "", "0"])

    task = service.get_task(0)
    assert task.title == "Buy milk"
    assert task.description is None
    assert task.category == "Errands"
    assert task.due_date == date(2025, 1, 10)
    assert task.priority is Priority.HIGH
    assert task.status is TaskStatus.NOT_STARTED


def test_invalid_edit_is_reported_and_loop_continues() -> None:
    service = TaskService(CsvTaskRepository())
    service.add_task("Buy milk", "Errands")

    output = _run(service, ["2", "0", "", "", "", "", "Critical", "", "0"])

    assert any(line.startswith("Invalid task data:") for line in output)
    assert service.get_task(0).priority is Priority.MEDIUM


def test_due_alert_is_shown() -> None:
    service = TaskService(CsvTaskRepository())
    service.add_task("Pay rent", "Home", due_date=date(2024, 12, 31))

    output = _run(service, ["0"])

    assert any("Pay rent" in line and "(OVERDUE)" in line for line in output)


def test_save_and_load_flows(tmp_path: Path) -> None:
    service = TaskService(CsvTaskRepository())
    service.add_task("Buy milk", "Errands")
    target = tmp_path / "tasks"

    _run(service, ["9", str(target), "0"])
    assert (tmp_path / "tasks.csv").is_file()

    fresh = TaskService(CsvTaskRepository())
    fresh.add_task("Existing", "Misc")
    output = _run(fresh, ["10", str(tmp_path / "tasks.csv"), "3", "0"])

    assert [t.title for t in fresh.tasks] == ["Existing", "Buy milk"]
    assert any(line.startswith("Loaded 1 task(s)") for line in output)


def test_eof_ends_the_session() -> None:
    service = TaskService(CsvTaskRepository())

    output = _run(service, [])

    assert output[-1] == "Goodbye."
