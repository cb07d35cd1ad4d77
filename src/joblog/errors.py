"""
Error taxonomy for the job store.

Every failure raised by :class:`joblog.core.job_store.JobStoreService` derives
from :class:`JobStoreError`, so callers can handle the whole family at once or
react to a single kind (for example a missing job versus a broken database).
"""

from __future__ import annotations


class JobStoreError(Exception):
    """Base class for job store failures."""

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation

    def __str__(self) -> str:
        if self.operation:
            return f"{self.message} (operation={self.operation})"
        return self.message


class StoreUnavailableError(JobStoreError):
    """The underlying database could not be opened or migrated."""


class JobNotFoundError(JobStoreError, LookupError):
    """An action was appended to a job id that does not exist."""

    def __init__(self, job_id: int, *, operation: str | None = None) -> None:
        super().__init__("Job entry not found", operation=operation)
        self.job_id = job_id

    def __str__(self) -> str:
        return f"{super().__str__()}: job_id={self.job_id}"


class WriteFailureError(JobStoreError):
    """The store rejected an insert or update."""


class ReadFailureError(JobStoreError):
    """The store rejected a read."""


class DeleteFailureError(JobStoreError):
    """The store rejected a delete."""
