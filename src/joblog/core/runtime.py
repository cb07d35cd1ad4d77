from __future__ import annotations

from joblog.core.job_store import JobStoreService

_JOB_STORE: JobStoreService | None = None


def get_job_store() -> JobStoreService:
    global _JOB_STORE
    if _JOB_STORE is None:
        _JOB_STORE = JobStoreService()
    return _JOB_STORE


def reset_job_store() -> None:
    global _JOB_STORE
    if _JOB_STORE is not None:
        _JOB_STORE.close()
    _JOB_STORE = None
