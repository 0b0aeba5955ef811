from __future__ import annotations

import logging
import os
import stat
import tempfile
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from task_tracker.config import SETTINGS
from task_tracker.domain.entities import Task
from task_tracker.domain.errors import EncodingError, RecordError, StorageError

from .codec import CSV_HEADERS, HEADER_LINE, decode_row, encode_row, first_column

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".csv"


@dataclass
class LoadResult:
    tasks: list[Task] = field(default_factory=list)
    skipped: int = 0
    log_path: Path | None = None
    problems: list[str] = field(default_factory=list)

    def __iter__(self) -> Iterator:
        # Allows ``tasks, skipped = repo.load(path)``.
        yield self.tasks
        yield self.skipped


def log_path_for(source: str | os.PathLike, suffix: str = SETTINGS.load_log_suffix) -> Path:
    path = Path(source)
    return path.with_name(path.stem + suffix)


def backup_path(
    reference: str | os.PathLike,
    now: datetime | None = None,
    prefix: str = SETTINGS.backup_prefix,
) -> Path:
    path = Path(reference)
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    ext = path.suffix or DEFAULT_EXTENSION
    return path.parent / f"{prefix}.{stamp}{ext}"


def _file_mode(target: Path) -> int:
    """Permission bits for a rewritten file: the old file's, or the umask default."""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


class CsvTaskRepository:
    def __init__(
        self,
        log_suffix: str = SETTINGS.load_log_suffix,
        backup_prefix: str = SETTINGS.backup_prefix,
        encoding: str = "utf-8",
    ) -> None:
        self._log_suffix = log_suffix
        self._backup_prefix = backup_prefix
        self._encoding = encoding

    def save(self, tasks: Iterable[Task], path: str | os.PathLike) -> Path:
        """Rewrite ``path`` with the header and one row per task.

        Rows go to a temporary sibling first and replace the target only
        once fully written.
        """
        target = Path(path)
        tasks = list(tasks)
        tmp_name = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
            )
            with os.fdopen(fd, "w", encoding=self._encoding, newline="") as handle:
                handle.write(HEADER_LINE + "\n")
                for task in tasks:
                    handle.write(encode_row(task) + "\n")
            # mkstemp creates the file as 0600.
            os.chmod(tmp_name, _file_mode(target))
            os.replace(tmp_name, target)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            logger.error("Failed to save tasks to %s: %s", target, exc)
            raise StorageError(f"Failed to save file '{target}': {exc}", target) from exc

        logger.info("Saved %d task(s) to %s", len(tasks), target)
        return target

    def load(self, path: str | os.PathLike) -> LoadResult:
        source = Path(path)
        result = LoadResult()

        try:
            with source.open("r", encoding=self._encoding, errors="surrogateescape") as handle:
                header_checked = False
                for line_no, raw_line in enumerate(handle, start=1):
                    line = raw_line.rstrip("\r\n")
                    if not line.strip():
                        continue

                    if not header_checked:
                        header_checked = True
                        if first_column(line.lstrip("\ufeff")).lower() == CSV_HEADERS[0].lower():
                            continue
                        logger.debug("%s has no header row; line %d read as data", source, line_no)

                    try:
                        result.tasks.append(self._decode(line))
                    except RecordError as exc:
                        result.skipped += 1
                        result.problems.append(f"Line {line_no}: {exc.reason}.")
                        logger.debug("Skipping %s line %d: %s", source, line_no, exc.reason)
        except OSError as exc:
            logger.error("Failed to load tasks from %s: %s", source, exc)
            raise StorageError(f"Failed to read file '{source}': {exc}", source) from exc

        if result.problems:
            result.log_path = self._append_log(source, result.problems)

        logger.info(
            "Loaded %d task(s) from %s, skipped %d",
            len(result.tasks),
            source,
            result.skipped,
        )
        return result

    def _decode(self, line: str) -> Task:
        # Undecodable bytes were let through as surrogates; reject them per row.
        try:
            line.encode(self._encoding)
        except UnicodeEncodeError:
            raise EncodingError(f"text is not valid {self._encoding}") from None
        return decode_row(line)

    def backup_path(self, reference: str | os.PathLike, now: datetime | None = None) -> Path:
        return backup_path(reference, now, prefix=self._backup_prefix)

    def create_backup(
        self,
        tasks: Iterable[Task],
        reference: str | os.PathLike,
        now: datetime | None = None,
    ) -> Path:
        target = self.backup_path(reference, now)
        self.save(tasks, target)
        logger.info("Backup written to %s", target)
        return target

    def _append_log(self, source: Path, problems: list[str]) -> Path | None:
        log_path = log_path_for(source, self._log_suffix)
        try:
            with log_path.open("a", encoding=self._encoding) as handle:
                for problem in problems:
                    handle.write(problem + "\n")
        except OSError as exc:
            logger.warning("Could not write load log %s: %s", log_path, exc)
            return None
        return log_path
