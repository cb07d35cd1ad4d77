"""
Schema versioning for the jobs database.

The on-disk version lives in sqlite's ``PRAGMA user_version``. There is exactly
one migration: when the stored version is older than the version the code
expects, the ``jobs`` table is dropped and created again. Every stored job is
lost when that happens.
"""

from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Connection

from joblog.db.models import JobRecord

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2
JOBS_TABLE = JobRecord.__table__


class SchemaDowngradeError(RuntimeError):
    def __init__(self, on_disk: int, target: int) -> None:
        super().__init__(f"database schema version {on_disk} is newer than supported version {target}")
        self.on_disk = on_disk
        self.target = target


def read_schema_version(connection: Connection) -> int:
    return int(connection.exec_driver_sql("PRAGMA user_version").scalar() or 0)


def write_schema_version(connection: Connection, version: int) -> None:
    # PRAGMA does not accept bound parameters.
    connection.exec_driver_sql(f"PRAGMA user_version = {int(version)}")


def recreate_jobs_collection(connection: Connection) -> None:
    """Drop the jobs table if present and create it with the current columns and indexes."""
    JOBS_TABLE.drop(connection, checkfirst=True)
    JOBS_TABLE.create(connection)


def migrate_schema(connection: Connection, target_version: int = SCHEMA_VERSION) -> bool:
    """
    Bring the database to ``target_version``.

    Returns True when the jobs table was (re)created, False when the stored
    version already matched. Raises SchemaDowngradeError when the database was
    written by a newer schema.
    """
    on_disk = read_schema_version(connection)
    if on_disk > target_version:
        raise SchemaDowngradeError(on_disk, target_version)
    if on_disk == target_version:
        return False

    if inspect(connection).has_table(JOBS_TABLE.name):
        logger.warning(
            "Schema upgrade %s -> %s recreates table %s; existing job entries are discarded",
            on_disk,
            target_version,
            JOBS_TABLE.name,
        )
    else:
        logger.info("Creating table %s at schema version %s", JOBS_TABLE.name, target_version)

    recreate_jobs_collection(connection)
    write_schema_version(connection, target_version)
    return True
