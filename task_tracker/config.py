from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    tasks_file: str = "tasks.csv"
    log_level: str = "INFO"
    log_dir: str = "logs"
    due_soon_hours: int = 24
    load_log_suffix: str = ".load.log"
    backup_prefix: str = "tasks-list-backup"

    def resolved_log_dir(self) -> Path:
        # Relative paths follow the working directory, or the executable when frozen.
        path = Path(self.log_dir).expanduser()
        if path.is_absolute():
            return path
        base = PROJECT_ROOT if getattr(sys, "frozen", False) else Path.cwd()
        return base / path


load_env()

SETTINGS = Settings(
    tasks_file=os.getenv("TASKS_FILE", "").strip() or "tasks.csv",
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    log_dir=os.getenv("LOG_DIR", "logs"),
    due_soon_hours=_env_int("DUE_SOON_HOURS", 24),
    load_log_suffix=os.getenv("LOAD_LOG_SUFFIX", "").strip() or ".load.log",
    backup_prefix=os.getenv("BACKUP_PREFIX", "").strip() or "tasks-list-backup",
)
