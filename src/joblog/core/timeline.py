"""Pure helpers over job timelines: status classification, filtering and ordering."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from joblog.types import Action, JobApplication, JobStats

_STAT_BUCKETS: dict[str, str] = {
    "Applied": "applied_jobs",
    "Follow Up": "follow_up_jobs",
    "Interview": "interview_jobs",
    "Offer": "offer_jobs",
    "Accepted": "accepted_jobs",
    "Rejected": "rejected_jobs",
}


def next_action_id(actions: Sequence[Any]) -> int:
    # Dense per-job sequence number, not a durable identifier.
    return len(actions) + 1


def latest_action(job: JobApplication) -> Action | None:
    return job.actions[-1] if job.actions else None


def has_latest_action(job: JobApplication, action_type: str) -> bool:
    latest = latest_action(job)
    return latest is not None and latest.type == action_type


def matches_company(job: JobApplication, substring: str) -> bool:
    return substring.lower() in job.company.lower()


def sort_newest_first(jobs: Iterable[JobApplication]) -> list[JobApplication]:
    # sorted() stays stable with reverse=True, so equal timestamps keep storage order.
    return sorted(jobs, key=lambda job: job.date_created, reverse=True)


def compute_stats(jobs: Sequence[JobApplication]) -> JobStats:
    counts = dict.fromkeys(_STAT_BUCKETS.values(), 0)
    for job in jobs:
        latest = latest_action(job)
        if latest is None:
            continue
        bucket = _STAT_BUCKETS.get(latest.type)
        if bucket:
            counts[bucket] += 1
    return JobStats(total_jobs=len(jobs), **counts)
