"""
Asynchronous gateway to the local jobs database.

JobStoreService owns the database connection and every read or write of job
applications. The connection is opened lazily by the first operation and then
reused. Blocking sqlite work runs in a worker thread, one session (and so one
transaction) per operation.

Connection states::

    UNINITIALIZED -> OPENING -> READY
                     OPENING -> FAILED -> OPENING (next call retries)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from joblog.config import get_settings
from joblog.core.timeline import compute_stats, has_latest_action, matches_company, sort_newest_first
from joblog.db.migrations import SchemaDowngradeError, migrate_schema
from joblog.db.repositories import JobRepository, to_application
from joblog.db.session import build_engine, build_session_factory, ensure_database_directory
from joblog.errors import (
    DeleteFailureError,
    JobStoreError,
    ReadFailureError,
    StoreUnavailableError,
    WriteFailureError,
)
from joblog.types import JobApplication, JobStats, NewJob

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreState(str, Enum):
    UNINITIALIZED = "uninitialized"
    OPENING = "opening"
    READY = "ready"
    FAILED = "failed"


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class _JobLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class JobStoreService:
    def __init__(
        self,
        database_url: str | None = None,
        schema_version: int | None = None,
        database_name: str | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        settings = get_settings()
        self.database_url = database_url or settings.database_url
        self.schema_version = schema_version or settings.schema_version
        self.database_name = database_name or settings.database_name
        self._clock = clock

        self._state = StoreState.UNINITIALIZED
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None
        self._opening: asyncio.Task[sessionmaker[Session]] | None = None
        # Keyed by event loop too: an asyncio.Lock must not be shared between loops.
        self._job_locks: dict[tuple[asyncio.AbstractEventLoop, int], _JobLock] = {}

    @property
    def state(self) -> StoreState:
        return self._state

    async def open(self) -> None:
        """Open (and migrate) the database if that has not happened yet."""
        await self._ensure_open()

    def close(self) -> None:
        """Dispose the engine; the next operation opens the database again."""
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None
        self._opening = None
        self._state = StoreState.UNINITIALIZED

    async def _ensure_open(self) -> sessionmaker[Session]:
        if self._state is StoreState.READY and self._session_factory is not None:
            return self._session_factory

        # A finished task or one left behind by another event loop cannot be awaited here.
        opening = self._opening
        if opening is not None and (opening.done() or opening.get_loop() is not asyncio.get_running_loop()):
            self._opening = None

        # Concurrent first callers all wait on the same open attempt.
        if self._opening is None:
            self._state = StoreState.OPENING
            self._opening = asyncio.create_task(self._open())
        return await asyncio.shield(self._opening)

    async def _open(self) -> sessionmaker[Session]:
        try:
            engine, created = await asyncio.to_thread(self._open_sync)
        except BaseException:
            # Also reached on cancellation; either way the next call starts a new attempt.
            if self._opening is asyncio.current_task():
                self._state = StoreState.FAILED
                self._opening = None
            raise

        self._engine = engine
        self._session_factory = build_session_factory(engine)
        self._state = StoreState.READY
        self._opening = None
        logger.info(
            "Opened %s at %s (schema version %s%s)",
            self.database_name,
            self.database_url,
            self.schema_version,
            ", recreated" if created else "",
        )
        return self._session_factory

    def _open_sync(self) -> tuple[Engine, bool]:
        engine: Engine | None = None
        try:
            ensure_database_directory(self.database_url)
            engine = build_engine(self.database_url)
            with engine.begin() as connection:
                created = migrate_schema(connection, self.schema_version)
        except (SQLAlchemyError, SchemaDowngradeError, OSError) as exc:
            if engine is not None:
                engine.dispose()
            logger.error("Failed to open database %s: %s", self.database_name, exc)
            raise StoreUnavailableError("Failed to open database", operation="open") from exc
        return engine, created

    async def _run(
        self,
        operation: str,
        work: Callable[[JobRepository], T],
        error_cls: type[JobStoreError],
        message: str,
    ) -> T:
        session_factory = await self._ensure_open()

        def _call() -> T:
            with session_factory() as session:
                try:
                    return work(JobRepository(session))
                except SQLAlchemyError as exc:
                    session.rollback()
                    logger.warning("%s failed: %s", operation, exc)
                    raise error_cls(message, operation=operation) from exc

        return await asyncio.to_thread(_call)

    async def _all_jobs(self, operation: str, message: str) -> list[JobApplication]:
        return await self._run(
            operation,
            lambda repo: [to_application(record) for record in repo.list_jobs()],
            ReadFailureError,
            message,
        )

    async def add_job(self, job: NewJob | Mapping[str, Any]) -> JobApplication:
        if not isinstance(job, NewJob):
            job = NewJob.model_validate(job)
        now = self._clock()
        created = await self._run(
            "add_job",
            lambda repo: to_application(repo.create_job(job.company, now)),
            WriteFailureError,
            "Failed to add job entry",
        )
        logger.debug("Added job %s for %s", created.id, created.company)
        return created

    @asynccontextmanager
    async def _job_lock(self, job_id: int) -> AsyncIterator[None]:
        key = (asyncio.get_running_loop(), job_id)
        entry = self._job_locks.get(key)
        if entry is None:
            entry = self._job_locks[key] = _JobLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._job_locks[key]

    async def add_action(self, job_id: int, action_type: str, notes: str = "") -> JobApplication:
        # Serializes read-modify-write appends to the same job within this process.
        async with self._job_lock(job_id):
            now = self._clock()
            updated = await self._run(
                "add_action",
                lambda repo: to_application(repo.append_action(job_id, action_type, notes, now)),
                WriteFailureError,
                "Failed to add action to job entry",
            )
        logger.debug("Added action %s to job %s", action_type, job_id)
        return updated

    async def get_all_jobs(self) -> list[JobApplication]:
        jobs = await self._all_jobs("get_all_jobs", "Failed to retrieve job entries")
        return sort_newest_first(jobs)

    async def get_job_by_id(self, job_id: int) -> JobApplication | None:
        def _get(repo: JobRepository) -> JobApplication | None:
            record = repo.get_job(job_id)
            return to_application(record) if record is not None else None

        return await self._run("get_job_by_id", _get, ReadFailureError, "Failed to retrieve job entry")

    async def delete_job(self, job_id: int) -> bool:
        await self._run(
            "delete_job",
            lambda repo: repo.delete_job(job_id),
            DeleteFailureError,
            "Failed to delete job entry",
        )
        logger.debug("Deleted job %s", job_id)
        return True

    async def search_by_company(self, substring: str) -> list[JobApplication]:
        jobs = await self._all_jobs("search_by_company", "Failed to search jobs by company")
        return [job for job in jobs if matches_company(job, substring)]

    async def get_jobs_by_latest_action(self, action_type: str) -> list[JobApplication]:
        jobs = await self._all_jobs("get_jobs_by_latest_action", "Failed to retrieve jobs by latest action")
        return [job for job in jobs if has_latest_action(job, action_type)]

    async def get_stats(self) -> JobStats:
        jobs = await self._all_jobs("get_stats", "Failed to calculate statistics")
        return compute_stats(jobs)

