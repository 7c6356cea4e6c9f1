"""
Tests for the command line interface.
"""

import json
import pytest

from agromatch.app import main
from agromatch.logger import reset_logger


@pytest.fixture
def cli(tmp_path, monkeypatch, capsys, welder_candidate, welding_job, forestry_job, farm_company):
    """Run the CLI against a database in tmp_path and return stdout."""
    monkeypatch.chdir(tmp_path)
    for name in ("AGROMATCH_DB", "AGROMATCH_WEIGHTS", "AGROMATCH_LEAD_WEIGHTS", "AGROMATCH_CACHE_TTL"):
        monkeypatch.delenv(name, raising=False)
    reset_logger()

    inputs = {
        "candidates.json": welder_candidate,
        "jobs.json": [welding_job, forestry_job],
        "companies.json": farm_company,
    }
    for filename, data in inputs.items():
        (tmp_path / filename).write_text(json.dumps(data), encoding="utf-8")

    db = str(tmp_path / "cli.db")

    def run(*argv):
        main(["--db", db, *argv])
        return capsys.readouterr().out

    yield run
    reset_logger()


@pytest.fixture
def loaded(cli):
    cli("add-candidate", "--input", "candidates.json")
    cli("add-job", "--input", "jobs.json")
    cli("add-company", "--input", "companies.json")
    return cli


def test_version(capsys):
    main(["--version"])
    assert capsys.readouterr().out.strip() == "0.1.0"


def test_init_db(cli, tmp_path):
    out = cli("init-db")
    assert "Database ready" in out
    assert (tmp_path / "cli.db").exists()


def test_add_reports_statuses(cli):
    out = cli("add-job", "--input", "jobs.json")
    assert "[new] job-1" in out
    assert "Done. new=2 updated=0 no-change=0 validation_error=0" in out

    out = cli("add-job", "--input", "jobs.json")
    assert "no-change=2" in out


def test_add_rejects_invalid_records(cli, tmp_path):
    (tmp_path / "bad.json").write_text(json.dumps([{"id": "job-9"}]), encoding="utf-8")
    out = cli("add-job", "--input", "bad.json")
    assert "[validation_error] job-9" in out


def test_validate(cli, tmp_path):
    assert "Valid" in cli("validate", "--kind", "company", "--input", "companies.json")
    (tmp_path / "bad.json").write_text(json.dumps({"id": "c", "experience_level": "guru"}), encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        cli("validate", "--kind", "candidate", "--input", "bad.json")
    assert exc.value.code == 2


def test_list_jobs(loaded):
    out = loaded("list-jobs")
    assert "Found 2 jobs" in out
    assert "Title: Forest worker" in out


def test_match(loaded):
    body = json.loads(loaded("match", "--candidate", "cand-1", "--job", "job-1"))
    assert body["score"] == 100.0
    assert body["jobId"] == "job-1"
    assert body["red_flags"] == []


def test_match_repeat_persist_and_cache(loaded, monkeypatch):
    monkeypatch.setenv("AGROMATCH_CACHE_TTL", "3600")
    first = json.loads(loaded("match", "--candidate", "cand-1", "--job", "job-2", "--persist"))
    cached = json.loads(loaded("match", "--candidate", "cand-1", "--job", "job-2", "--cache"))
    assert cached["score"] == first["score"] == 37.8
    assert cached["computedAt"] == first["computedAt"]
    assert "Does not speak required language: danish" in cached["red_flags"]


def test_match_unknown_candidate(loaded, capsys):
    with pytest.raises(SystemExit) as exc:
        loaded("match", "--candidate", "nobody", "--job", "job-1")
    assert exc.value.code == 1
    body = json.loads(capsys.readouterr().out)
    assert body == {"error": "NotFound", "message": "Candidate not found: nobody"}


def test_rank_and_history(loaded):
    body = json.loads(loaded("rank", "--candidate", "cand-1", "--persist"))
    assert [r["jobId"] for r in body["results"]] == ["job-1", "job-2"]

    out = loaded("history", "--candidate", "cand-1", "--job", "job-2")
    assert "job-2" in out
    assert "37.8" in out


def test_lead_score(loaded):
    body = json.loads(loaded("lead-score", "--company", "comp-1"))
    assert body[0]["companyId"] == "comp-1"
    assert body[0]["score"] == 90.0


def test_admin_command(loaded):
    body = json.loads(loaded("admin", "--command", '{"kind": "check_health"}'))
    assert body == {"ok": True, "result": {"overall": "healthy", "database": "ok"}}


def test_admin_rejects_unknown_kind(loaded, capsys):
    with pytest.raises(SystemExit) as exc:
        loaded("admin", "--command", '{"kind": "restart_everything"}')
    assert exc.value.code == 1
    body = json.loads(capsys.readouterr().out)
    assert body["status"] == 400


def test_bad_weights_exit_with_configuration_error(loaded, monkeypatch, capsys):
    monkeypatch.setenv("AGROMATCH_WEIGHTS", "skill=0.9,experience=0.9")
    with pytest.raises(SystemExit) as exc:
        loaded("match", "--candidate", "cand-1", "--job", "job-1")
    assert exc.value.code == 2
    assert json.loads(capsys.readouterr().out)["error"] == "ConfigurationError"
