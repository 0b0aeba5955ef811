from __future__ import annotations

import logging
import sys
from pathlib import Path

from task_tracker.config import SETTINGS
from task_tracker.domain.errors import StorageError
from task_tracker.infra.logging import setup_logging
from task_tracker.infra.repository import CsvTaskRepository
from task_tracker.services.task_service import TaskService
from task_tracker.ui.console import ConsoleShell

logger = logging.getLogger(__name__)


def build_service(tasks_file: str | None = None) -> TaskService:
    """Create the service, preloading ``tasks_file`` when it exists."""
    service = TaskService(CsvTaskRepository())
    path = Path(tasks_file or SETTINGS.tasks_file)
    if path.is_file():
        try:
            result = service.load(path)
        except StorageError as exc:
            logger.warning("Could not preload %s: %s", path, exc)
        else:
            if result.skipped:
                logger.warning("Skipped %d invalid line(s) in %s", result.skipped, path)
    return service


def main(argv: list[str] | None = None) -> None:
    setup_logging()
    args = sys.argv[1:] if argv is None else argv
    service = build_service(args[0] if args else None)
    ConsoleShell(service).run()


if __name__ == "__main__":
    main()
