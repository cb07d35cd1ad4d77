from __future__ import annotations

import json

from typer.testing import CliRunner

from joblog.cli.app import app

runner = CliRunner()


def _invoke(*args: str):
    return runner.invoke(app, list(args))


def test_init_reports_schema_version() -> None:
    result = _invoke("init")
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload == {"ok": True, "database": "JobLogDB", "schema_version": 2}


def test_add_then_list_uses_record_field_names() -> None:
    added = _invoke("add", "--company", "Google")
    assert added.exit_code == 0
    job = json.loads(added.stdout)
    assert job["company"] == "Google"
    assert job["actions"][0]["type"] == "Applied"

    listed = _invoke("list")
    assert listed.exit_code == 0
    jobs = json.loads(listed.stdout)
    assert [item["id"] for item in jobs] == [job["id"]]
    assert "dateCreated" in jobs[0]
    assert "dateModified" in jobs[0]


def test_action_and_stats() -> None:
    job = json.loads(_invoke("add", "--company", "Apple").stdout)

    result = _invoke("action", str(job["id"]), "--type", "Offer", "--notes", "base + equity")
    assert result.exit_code == 0
    updated = json.loads(result.stdout)
    assert updated["actions"][-1] == {
        "id": 2,
        "type": "Offer",
        "date": updated["dateModified"],
        "notes": "base + equity",
    }

    stats = json.loads(_invoke("stats").stdout)
    assert stats["totalJobs"] == 1
    assert stats["offerJobs"] == 1
    assert stats["appliedJobs"] == 0


def test_action_type_applied_is_not_user_selectable() -> None:
    job = json.loads(_invoke("add", "--company", "Meta").stdout)
    result = _invoke("action", str(job["id"]), "--type", "Applied")
    assert result.exit_code == 2


def test_action_on_missing_job_exits_with_error() -> None:
    result = _invoke("action", "9999", "--type", "Interview")
    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["ok"] is False
    assert "not found" in payload["error"]


def test_blank_company_is_rejected() -> None:
    result = _invoke("add", "--company", "  ")
    assert result.exit_code == 2


def test_list_filters() -> None:
    google = json.loads(_invoke("add", "--company", "Google").stdout)
    _invoke("add", "--company", "Amazon")
    _invoke("action", str(google["id"]), "--type", "Interview")

    searched = json.loads(_invoke("list", "--search", "goo").stdout)
    assert [item["company"] for item in searched] == ["Google"]

    interviewing = json.loads(_invoke("list", "--status", "Interview").stdout)
    assert [item["company"] for item in interviewing] == ["Google"]

    applied = json.loads(_invoke("list", "--status", "Applied").stdout)
    assert [item["company"] for item in applied] == ["Amazon"]


def test_show_and_delete() -> None:
    job = json.loads(_invoke("add", "--company", "Stripe").stdout)

    shown = _invoke("show", str(job["id"]))
    assert shown.exit_code == 0
    assert json.loads(shown.stdout) == job

    deleted = _invoke("delete", str(job["id"]))
    assert json.loads(deleted.stdout) == {"ok": True, "id": job["id"]}

    again = _invoke("delete", str(job["id"]))
    assert again.exit_code == 0

    missing = _invoke("show", str(job["id"]))
    assert missing.exit_code == 1


def test_companies_lists_suggestions() -> None:
    result = _invoke("companies")
    assert result.exit_code == 0
    assert "Google" in json.loads(result.stdout)


def test_empty_search_matches_every_job_in_storage_order() -> None:
    _invoke("add", "--company", "Meta")
    _invoke("add", "--company", "Netflix")

    result = _invoke("list", "--search", "")

    assert result.exit_code == 0
    assert [item["company"] for item in json.loads(result.stdout)] == ["Meta", "Netflix"]
