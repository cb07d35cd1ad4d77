from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from joblog.core.timeline import next_action_id
from joblog.db.models import JobRecord
from joblog.errors import JobNotFoundError
from joblog.types import APPLIED, Action, JobApplication


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


def build_action(action_id: int, action_type: str, when: datetime, notes: str = "") -> dict[str, Any]:
    return {"id": action_id, "type": action_type, "date": format_timestamp(when), "notes": notes}


def to_application(record: JobRecord) -> JobApplication:
    return JobApplication(
        id=record.id,
        company=record.company,
        date_created=record.date_created,
        date_modified=record.date_modified,
        actions=[Action.model_validate(item) for item in record.actions],
    )


class JobRepository:
    def __init__(self, session: Session):
        self.session = session

    def create_job(self, company: str, now: datetime) -> JobRecord:
        stamp = format_timestamp(now)
        record = JobRecord(
            company=company,
            date_created=stamp,
            date_modified=stamp,
            actions=[build_action(1, APPLIED, now)],
        )
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def get_job(self, job_id: int) -> JobRecord | None:
        return self.session.get(JobRecord, job_id)

    def append_action(self, job_id: int, action_type: str, notes: str, now: datetime) -> JobRecord:
        record = self.session.get(JobRecord, job_id)
        if record is None:
            raise JobNotFoundError(job_id, operation="add_action")

        actions = list(record.actions)
        actions.append(build_action(next_action_id(actions), action_type, now, notes))
        # Reassign so the JSON column is flagged dirty and the whole row is written back.
        record.actions = actions
        record.date_modified = format_timestamp(now)

        self.session.commit()
        self.session.refresh(record)
        return record

    def list_jobs(self) -> list[JobRecord]:
        statement = select(JobRecord).order_by(JobRecord.id)
        return list(self.session.scalars(statement).all())

    def delete_job(self, job_id: int) -> None:
        self.session.execute(delete(JobRecord).where(JobRecord.id == job_id))
        self.session.commit()
