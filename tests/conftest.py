from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'pipelines.steps.parse_results'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Set test environment knobs
    os.environ.setdefault("RUN_ENV", "test")


@pytest.fixture
def settings_env(tmp_path, monkeypatch):
    """Point every persisted path at tmp_path and return fresh Settings."""
    monkeypatch.setenv("RUN_ENV", "test")
    monkeypatch.setenv("TARGETS_PATH", str(tmp_path / "data" / "target-companies.json"))
    monkeypatch.setenv("KEYWORDS_PATH", str(tmp_path / "data" / "search-keywords.json"))
    monkeypatch.setenv("LEADS_PATH", str(tmp_path / "output" / "leads.json"))
    monkeypatch.setenv("REJECTED_LEADS_PATH", str(tmp_path / "output" / "leads-rejected.json"))
    monkeypatch.setenv("EXECUTED_QUERIES_PATH", str(tmp_path / "data" / "executed-queries.json"))
    monkeypatch.setenv("CSV_PATH", str(tmp_path / "output" / "leads.csv"))
    monkeypatch.setenv("DB_PATH", str(tmp_path / "leads.db"))
    monkeypatch.setenv("STORE_BACKEND", "json")
    monkeypatch.setenv("QUERY_DELAY_SECONDS", "0")
    monkeypatch.setenv("MAX_QUERIES_PER_RUN", "20")
    monkeypatch.setenv("STRICT_TOPIC_MATCH", "true")
    monkeypatch.setenv("TOPIC_BATCHES", "2")
    monkeypatch.setenv("GOOGLE_API_KEY", "dummy-key")
    monkeypatch.setenv("GOOGLE_CSE_ID", "dummy-cx")
    from config.settings import get_settings
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()
