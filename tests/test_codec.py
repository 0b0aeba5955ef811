from __future__ import annotations

from datetime import date, datetime

import pytest

from task_tracker.domain.entities import Task
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
    RecordError,
)
from task_tracker.infra.codec import HEADER_LINE, decode_row, encode_row, parse_date, split_row

SAMPLE = '"Buy milk","Errands","Low","NotStarted","","2025-01-10","2025-01-01 09:00:00",""'


def test_header_line() -> None:
    assert HEADER_LINE == "Title,Category,Priority,Status,Description,DueDate,CreatedAt,CompletedAt"


def test_encode_matches_file_format() -> None:
    task = Task.restore(
        "Buy milk", "Errands", Priority.LOW, TaskStatus.NOT_STARTED, None,
        date(2025, 1, 10), datetime(2025, 1, 1, 9, 0, 0), None,
    )

    assert encode_row(task) == SAMPLE


def test_encode_doubles_embedded_quotes() -> None:
    task = Task.restore(
        'Say "hi"', "Social", Priority.HIGH, TaskStatus.COMPLETED, "one, two",
        None, datetime(2025, 1, 1, 9, 0, 0), datetime(2025, 1, 2, 18, 30, 5),
    )

    assert encode_row(task) == (
        '"Say ""hi""","Social","High","Completed","one, two","",'
        '"2025-01-01 09:00:00","2025-01-02 18:30:05"'
    )


def test_decode_sample_row() -> None:
    task = decode_row(SAMPLE)

    assert task.title == "Buy milk"
    assert task.category == "Errands"
    assert task.priority is Priority.LOW
    assert task.status is TaskStatus.NOT_STARTED
    assert task.description is None
    assert task.due_date == date(2025, 1, 10)
    assert task.created_at == datetime(2025, 1, 1, 9, 0, 0)
    assert task.completed_at is None


def test_decode_reverses_encode(clock) -> None:
    task = Task(
        'The "big" one, finally', "Work", Priority.MEDIUM, TaskStatus.IN_PROGRESS,
        description='notes with "quotes", commas', due_date=date(2025, 3, 4),
    )
    task.mark_completed()

    assert decode_row(encode_row(task)) == task


def test_split_row_handles_commas_and_doubled_quotes() -> None:
    assert split_row('"a,b","say ""x""",plain') == ["a,b", 'say "x"', "plain"]


def test_unterminated_quote_is_format_error() -> None:
    with pytest.raises(FormatError):
        split_row('"abc,def')


def test_text_after_closing_quote_stays_in_field() -> None:
    assert split_row('"abc" ,"d"') == ["abc ", "d"]


def test_stray_quote_in_unquoted_field_is_format_error() -> None:
    with pytest.raises(FormatError):
        split_row('ab"c,d')


def test_short_row_is_field_count_error() -> None:
    with pytest.raises(FieldCountError) as info:
        decode_row('"Buy milk","Errands","Low","NotStarted",""')

    assert info.value.count == 5
    assert not isinstance(info.value, FormatError)


def test_extra_columns_are_ignored() -> None:
    task = decode_row(SAMPLE + ',"extra"')

    assert task.title == "Buy milk"


def test_priority_and_status_are_case_insensitive() -> None:
    task = decode_row('"T","C","high","completed","","","2025-01-01 09:00:00","2025-01-02 10:00:00"')

    assert task.priority is Priority.HIGH
    assert task.status is TaskStatus.COMPLETED
    assert task.completed_at == datetime(2025, 1, 2, 10, 0, 0)


@pytest.mark.parametrize(
    ("line", "error"),
    [
        ('"  ","C","Low","NotStarted","","","2025-01-01 09:00:00",""', MissingFieldError),
        ('"T","","Low","NotStarted","","","2025-01-01 09:00:00",""', MissingFieldError),
        ('"T","C","Urgent","NotStarted","","","2025-01-01 09:00:00",""', InvalidPriorityError),
        ('"T","C","Low","Done","","","2025-01-01 09:00:00",""', InvalidStatusError),
        ('"T","C","Low","NotStarted","","someday","2025-01-01 09:00:00",""', InvalidDueDateError),
        ('"T","C","Low","NotStarted","","","",""', InvalidCreatedAtError),
        ('"T","C","Low","NotStarted","","","yesterday",""', InvalidCreatedAtError),
        ('"T","C","Low","Completed","","","2025-01-01 09:00:00","later"', InvalidCompletedAtError),
    ],
)
def test_field_errors_are_distinct(line: str, error: type[RecordError]) -> None:
    with pytest.raises(error) as info:
        decode_row(line)

    assert info.value.reason


def test_title_check_runs_before_priority_check() -> None:
    with pytest.raises(MissingFieldError):
        decode_row('"","C","Urgent","Done","","","",""')


def test_fallback_date_formats() -> None:
    assert parse_date("2025-01-10") == date(2025, 1, 10)
    assert parse_date("2025-01-10T08:00:00") == date(2025, 1, 10)
    assert parse_date("25/12/2025") == date(2025, 12, 25)
    assert parse_date("  ") is None


def test_fallback_timestamp_format() -> None:
    task = decode_row('"T","C","Low","NotStarted","","","2025-01-01T09:15:00",""')

    assert task.created_at == datetime(2025, 1, 1, 9, 15, 0)
