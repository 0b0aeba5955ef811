from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from task_tracker.domain import entities


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture()
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    fake = FakeClock(datetime(2025, 1, 1, 9, 0, 0))
    monkeypatch.setattr(entities, "_now", fake)
    return fake
