from __future__ import annotations


class TaskTrackerError(Exception):
    """Base class for every error raised by task_tracker."""


class ValidationError(TaskTrackerError, ValueError):
    """A task field was given a value it can never hold."""


class TaskNotFoundError(TaskTrackerError, LookupError):
    pass


class StorageError(TaskTrackerError):
    """The backing file could not be opened, read or written."""

    def __init__(self, message: str, path: object = None) -> None:
        super().__init__(message)
        self.path = path


class RecordError(TaskTrackerError, ValueError):
    """A single stored row could not be turned back into a task.

    ``reason`` is the text written to the load log, without line number
    or trailing period.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class FormatError(RecordError):
    pass


class FieldCountError(RecordError):
    def __init__(self, count: int, expected: int) -> None:
        super().__init__(f"not enough columns ({count}, expected {expected})")
        self.count = count
        self.expected = expected


class MissingFieldError(RecordError):
    pass


class InvalidPriorityError(RecordError):
    pass


class InvalidStatusError(RecordError):
    pass


class InvalidDueDateError(RecordError):
    pass


class InvalidCreatedAtError(RecordError):
    pass


class InvalidCompletedAtError(RecordError):
    pass


class EncodingError(RecordError):
    pass
