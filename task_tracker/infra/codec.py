"""Row codec for the task file.

One task per line, eight quoted columns. The codec knows nothing about
files; the repository feeds it one physical line at a time.
"""
from __future__ import annotations

import csv
import io
from datetime import date, datetime
from typing import Optional

from task_tracker.domain.entities import DATE_FORMAT, TIMESTAMP_FORMAT, Task
from task_tracker.domain.enums import Priority, TaskStatus
from task_tracker.domain.errors import (
    FieldCountError,
    FormatError,
    InvalidCompletedAtError,
    InvalidCreatedAtError,
    InvalidDueDateError,
    InvalidPriorityError,
    InvalidStatusError,
    MissingFieldError,
)

CSV_HEADERS = [
    "Title",
    "Category",
    "Priority",
    "Status",
    "Description",
    "DueDate",
    "CreatedAt",
    "CompletedAt",
]
HEADER_LINE = ",".join(CSV_HEADERS)

_FALLBACK_DATE_FORMATS = ("%d/%m/%Y", "%m/%d/%Y", "%d.%m.%Y", "%Y/%m/%d")
_FALLBACK_TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%d/%m/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%d.%m.%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%m/%d/%Y %H:%M",
)


def encode_row(task: Task) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="")
    writer.writerow([
        task.title,
        task.category,
        task.priority.label,
        task.status.value,
        task.description or "",
        task.due_date.strftime(DATE_FORMAT) if task.due_date else "",
        task.created_at.strftime(TIMESTAMP_FORMAT),
        task.completed_at.strftime(TIMESTAMP_FORMAT) if task.completed_at else "",
    ])
    return buffer.getvalue()


def split_row(line: str) -> list[str]:
    """Split one line into raw field strings.

    Raises FormatError when a quoted field is left open. Text between a
    closing quote and the next delimiter is kept as part of the field.
    """
    # Doubled quotes come in pairs, so an odd count leaves a field open.
    if line.count('"') % 2:
        raise FormatError("malformed CSV - unmatched quote")
    reader = csv.reader([line])
    try:
        return next(reader, [])
    except csv.Error as exc:
        raise FormatError(f"malformed CSV - {exc}") from exc


def first_column(line: str) -> str:
    try:
        fields = split_row(line)
    except FormatError:
        return ""
    return fields[0].strip() if fields else ""


def parse_date(raw: str) -> Optional[date]:
    text = raw.strip()
    if not text:
        return None
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unrecognised date {raw!r}")


def parse_timestamp(raw: str) -> Optional[datetime]:
    text = raw.strip()
    if not text:
        return None
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        pass
    else:
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed
    for fmt in _FALLBACK_TIMESTAMP_FORMATS + _FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"unrecognised timestamp {raw!r}")


def decode_row(line: str) -> Task:
    fields = split_row(line)
    if len(fields) < len(CSV_HEADERS):
        raise FieldCountError(len(fields), len(CSV_HEADERS))

    title = fields[0]
    category = fields[1]
    priority_text = fields[2].strip()
    status_text = fields[3].strip()
    description = fields[4] if fields[4].strip() else None
    due_text = fields[5].strip()
    created_text = fields[6].strip()
    completed_text = fields[7].strip()

    if not title.strip() or not category.strip():
        raise MissingFieldError("empty title or category")

    try:
        priority = Priority.parse(priority_text)
    except ValueError:
        raise InvalidPriorityError(f"invalid priority '{priority_text}'") from None

    try:
        status = TaskStatus.parse(status_text)
    except ValueError:
        raise InvalidStatusError(f"invalid status '{status_text}'") from None

    try:
        due_date = parse_date(due_text)
    except ValueError:
        raise InvalidDueDateError(f"invalid due date '{due_text}'") from None

    try:
        created_at = parse_timestamp(created_text)
    except ValueError:
        created_at = None
    if created_at is None:
        raise InvalidCreatedAtError(f"invalid CreatedAt '{created_text}'")

    try:
        completed_at = parse_timestamp(completed_text)
    except ValueError:
        raise InvalidCompletedAtError(f"invalid CompletedAt '{completed_text}'") from None

    return Task.restore(
        title=title,
        category=category,
        priority=priority,
        status=status,
        description=description,
        due_date=due_date,
        created_at=created_at,
        completed_at=completed_at,
    )
