from __future__ import annotations

import asyncio
import json
from collections.abc import Coroutine
from typing import Any, TypeVar

import typer
from pydantic import ValidationError

from joblog.core.runtime import get_job_store
from joblog.errors import JobStoreError
from joblog.logging_config import configure_logging
from joblog.types import COMPANY_SUGGESTIONS, USER_ACTION_TYPES, JobApplication, NewJob

T = TypeVar("T")

app = typer.Typer(help="JobLog CLI")


def _run(coro: Coroutine[Any, Any, T]) -> T:
    try:
        return asyncio.run(coro)
    except JobStoreError as exc:
        typer.echo(json.dumps({"ok": False, "error": str(exc)}, indent=2))
        raise typer.Exit(code=1) from exc


def _dump_job(job: JobApplication) -> dict[str, Any]:
    return job.model_dump(mode="json", by_alias=True)


def _echo_jobs(jobs: list[JobApplication]) -> None:
    typer.echo(json.dumps([_dump_job(job) for job in jobs], indent=2))


@app.command("init")
def init_cmd() -> None:
    """Open the database, creating or migrating the jobs table."""
    configure_logging()
    store = get_job_store()
    _run(store.open())
    typer.echo(
        json.dumps(
            {"ok": True, "database": store.database_name, "schema_version": store.schema_version},
            indent=2,
        )
    )


@app.command("add")
def add_cmd(company: str = typer.Option(..., "--company")) -> None:
    """Track a new application; it starts with an Applied action."""
    configure_logging()
    try:
        new_job = NewJob(company=company)
    except ValidationError as exc:
        raise typer.BadParameter("company must not be empty", param_hint="--company") from exc
    job = _run(get_job_store().add_job(new_job))
    typer.echo(json.dumps(_dump_job(job), indent=2))


@app.command("action")
def action_cmd(
    job_id: int = typer.Argument(...),
    action_type: str = typer.Option(..., "--type"),
    notes: str = typer.Option("", "--notes"),
) -> None:
    """Append a status action to a job's timeline."""
    configure_logging()
    if action_type not in USER_ACTION_TYPES:
        raise typer.BadParameter(f"must be one of {list(USER_ACTION_TYPES)}", param_hint="--type")
    job = _run(get_job_store().add_action(job_id, action_type, notes))
    typer.echo(json.dumps(_dump_job(job), indent=2))


@app.command("list")
def list_cmd(
    status: str | None = typer.Option(None, "--status", help="Only jobs whose latest action has this type"),
    search: str | None = typer.Option(None, "--search", help="Case-insensitive company substring"),
) -> None:
    configure_logging()
    store = get_job_store()
    if status is not None and search is not None:
        raise typer.BadParameter("use either --status or --search")
    if status is not None:
        jobs = _run(store.get_jobs_by_latest_action(status))
    elif search is not None:
        jobs = _run(store.search_by_company(search))
    else:
        jobs = _run(store.get_all_jobs())
    _echo_jobs(jobs)


@app.command("show")
def show_cmd(job_id: int = typer.Argument(...)) -> None:
    configure_logging()
    job = _run(get_job_store().get_job_by_id(job_id))
    if job is None:
        typer.echo(json.dumps({"ok": False, "error": f"job {job_id} not found"}, indent=2))
        raise typer.Exit(code=1)
    typer.echo(json.dumps(_dump_job(job), indent=2))


@app.command("delete")
def delete_cmd(job_id: int = typer.Argument(...)) -> None:
    configure_logging()
    deleted = _run(get_job_store().delete_job(job_id))
    typer.echo(json.dumps({"ok": deleted, "id": job_id}, indent=2))


@app.command("stats")
def stats_cmd() -> None:
    """Count jobs by the type of their latest action."""
    configure_logging()
    stats = _run(get_job_store().get_stats())
    typer.echo(json.dumps(stats.model_dump(by_alias=True), indent=2))


@app.command("companies")
def companies_cmd() -> None:
    typer.echo(json.dumps(list(COMPANY_SUGGESTIONS), indent=2))
