from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from joblog.config import get_settings
from joblog.core.job_store import JobStoreService
from joblog.core.runtime import reset_job_store


class TickingClock:
    """Returns a strictly increasing UTC timestamp on every call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(minutes=1)) -> None:
        self.current = start or datetime(2026, 1, 5, 9, 0, tzinfo=UTC)
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'data' / 'joblog.db'}"


@pytest.fixture(autouse=True)
def isolated_settings(database_url: str, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("DATABASE_URL", database_url)
    monkeypatch.setenv("APP_ENV", "test")
    get_settings.cache_clear()
    reset_job_store()
    yield
    reset_job_store()
    get_settings.cache_clear()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def store(database_url: str, clock: TickingClock) -> Iterator[JobStoreService]:
    service = JobStoreService(database_url=database_url, clock=clock)
    yield service
    service.close()
