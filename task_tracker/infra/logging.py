from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from task_tracker.config import SETTINGS


def setup_logging() -> None:
    log_dir = SETTINGS.resolved_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "task_tracker.log"

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(formatter)

    # The console belongs to the menu; only problems go there.
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.WARNING)

    logging.basicConfig(
        level=SETTINGS.log_level.upper(),
        handlers=[file_handler, console_handler],
    )
