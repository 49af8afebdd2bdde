from __future__ import annotations

import csv
import json
import sqlite3
import sys
from typing import List

import pytest

from models.search_result import SearchItem


def _run_cli_with_args(args_list: List[str]) -> None:
    """Run cli.py main() with provided argv in-process (no subprocess)."""
    argv_backup = sys.argv[:]
    try:
        sys.argv = ["cli.py"] + args_list
        # Import fresh to ensure clean parser each time
        if "cli" in sys.modules:
            del sys.modules["cli"]
        import cli  # type: ignore
        try:
            cli.main()  # type: ignore[attr-defined]
        except SystemExit as e:
            code = int(getattr(e, "code", 0) or 0)
            if code not in (0, None):
                raise
    finally:
        sys.argv = argv_backup


class _StubSource:
    source_name = "google_cse"
    calls: List[str] = []

    def __init__(self, settings=None):
        self.settings = settings

    def search(self, query: str) -> List[SearchItem]:
        _StubSource.calls.append(query)
        return [
            SearchItem(
                title="John Smith - Head of Agentic AI - Microsoft | LinkedIn",
                link="https://www.linkedin.com/in/john-smith",
                snippet="Head of Agentic AI at Microsoft, Seattle. Building autonomous systems.",
            ),
            SearchItem(
                title="Bob Wilson - AI Engineer | LinkedIn",
                link="https://www.linkedin.com/in/bob-wilson",
                snippet="Working at Google on agents...",
            ),
        ]


@pytest.fixture
def cli_env(settings_env, tmp_path, monkeypatch):
    data = tmp_path / "data"
    data.mkdir()
    (data / "target-companies.json").write_text(json.dumps({
        "companies": [{"name": "Microsoft"}, {"name": "Google"}],
    }), encoding="utf-8")
    (data / "search-keywords.json").write_text(json.dumps({
        "topics": ["Agentic AI", "AI Agents", "Multi-Agent", "AI Automation"],
        "roles": ["Head of"],
        "exclusions": ["-recruiter"],
    }), encoding="utf-8")

    import sources.registry as reg
    _StubSource.calls = []
    monkeypatch.setattr(reg, "_REGISTRY", {"google_cse": _StubSource})
    return settings_env


def test_cli_search_then_rerun_is_incremental(cli_env, tmp_path):
    _run_cli_with_args(["search", "--max-queries", "3"])
    assert len(_StubSource.calls) == 3

    leads = json.loads((tmp_path / "output" / "leads.json").read_text(encoding="utf-8"))
    assert [lead["name"] for lead in leads] == ["John Smith"]
    executed = json.loads((tmp_path / "data" / "executed-queries.json").read_text(encoding="utf-8"))
    assert executed == _StubSource.calls

    _run_cli_with_args(["search"])
    assert len(_StubSource.calls) == 4


def test_cli_search_no_strict_and_roles(cli_env, tmp_path):
    _run_cli_with_args(["search", "--no-strict", "--with-roles", "--max-queries", "1"])
    assert '("Head of")' in _StubSource.calls[0]
    assert _StubSource.calls[0].endswith("-recruiter")
    leads = json.loads((tmp_path / "output" / "leads.json").read_text(encoding="utf-8"))
    assert [lead["company"] for lead in leads] == ["Microsoft", "Google"]


def test_cli_dry_run_prints_queries(cli_env, tmp_path, capsys):
    _run_cli_with_args(["search", "--dry-run", "--max-queries", "2"])
    out = capsys.readouterr().out
    assert 'site:linkedin.com/in ("Agentic AI" OR "AI Agents") "Microsoft" -recruiter' in out
    assert _StubSource.calls == []
    assert not (tmp_path / "data" / "executed-queries.json").exists()


def test_cli_missing_config_exits_nonzero(settings_env):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli_with_args(["search"])
    assert excinfo.value.code == 1


def test_cli_export_revalidate_and_reset(cli_env, tmp_path, capsys):
    _run_cli_with_args(["search", "--no-strict"])

    out_csv = tmp_path / "export.csv"
    _run_cli_with_args(["export-csv", "--output", str(out_csv)])
    with out_csv.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["name"] for r in rows] == ["John Smith", "Bob Wilson"]
    assert "Leads by company:" in capsys.readouterr().out

    _run_cli_with_args(["revalidate"])
    leads = json.loads((tmp_path / "output" / "leads.json").read_text(encoding="utf-8"))
    assert [lead["name"] for lead in leads] == ["John Smith"]
    rejected = json.loads((tmp_path / "output" / "leads-rejected.json").read_text(encoding="utf-8"))
    assert [lead["name"] for lead in rejected] == ["Bob Wilson"]

    _run_cli_with_args(["reset-ledger"])
    assert "Cleared 4 executed queries" in capsys.readouterr().out
    assert not (tmp_path / "data" / "executed-queries.json").exists()


def test_cli_sqlite_backend(cli_env, tmp_path):
    db_path = tmp_path / "cli.db"
    _run_cli_with_args(["--db", str(db_path), "bootstrap"])
    _run_cli_with_args(["--store", "sqlite", "--db", str(db_path), "search", "--max-queries", "2"])

    conn = sqlite3.connect(str(db_path))
    try:
        cur = conn.cursor()
        cur.execute("SELECT name, company, confidence FROM leads")
        assert cur.fetchall() == [("John Smith", "Microsoft", "high")]
        cur.execute("SELECT COUNT(*) FROM executed_queries")
        assert cur.fetchone()[0] == 2
    finally:
        conn.close()
