from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

APPLIED = "Applied"
ACTION_TYPES: tuple[str, ...] = ("Applied", "Follow Up", "Interview", "Offer", "Accepted", "Rejected")
# "Applied" is only ever written by the store when a job is created.
USER_ACTION_TYPES: tuple[str, ...] = tuple(t for t in ACTION_TYPES if t != APPLIED)

COMPANY_SUGGESTIONS: tuple[str, ...] = (
    "Google",
    "Apple",
    "Microsoft",
    "Amazon",
    "Meta",
    "Netflix",
    "Tesla",
    "Uber",
    "Airbnb",
    "Stripe",
    "Shopify",
    "Spotify",
)


class _RecordModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Action(_RecordModel):
    id: int
    type: str
    date: datetime
    notes: str = ""


class JobApplication(_RecordModel):
    id: int
    company: str
    date_created: datetime
    date_modified: datetime
    actions: list[Action] = Field(default_factory=list)


class NewJob(BaseModel):
    company: str

    @field_validator("company")
    @classmethod
    def validate_company(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("company must be a non-empty string")
        return value


class JobStats(_RecordModel):
    total_jobs: int = 0
    applied_jobs: int = 0
    follow_up_jobs: int = 0
    interview_jobs: int = 0
    offer_jobs: int = 0
    accepted_jobs: int = 0
    rejected_jobs: int = 0
