from __future__ import annotations

import dataclasses
from typing import Any, Dict, List

import pytest
import requests

import google_searcher
from google_searcher import GoogleSearcher
from sources.base import QuotaExceeded, TransportError


class _FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = ""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        return self._payload


def _install(monkeypatch, responses: List[Any]) -> List[Dict[str, Any]]:
    calls: List[Dict[str, Any]] = []

    def fake_get(url, params=None, timeout=None, **kwargs):
        calls.append(dict(params or {}))
        result = responses[min(len(calls), len(responses)) - 1]
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(google_searcher.requests, "get", fake_get)
    return calls


def _searcher(settings, **kwargs):
    sleeps: List[float] = []
    searcher = GoogleSearcher(settings, sleep=sleeps.append, **kwargs)
    return searcher, sleeps


CSE_ITEM = {
    "title": "John Smith - Head of Agentic AI - Microsoft | LinkedIn",
    "link": "https://www.linkedin.com/in/john-smith",
    "snippet": "Head of Agentic AI at Microsoft.",
    "htmlSnippet": "Head of <b>Agentic AI</b> at Microsoft.",
    "pagemap": {
        "cse_thumbnail": [{"src": "https://thumb/js.jpg"}],
        "cse_image": [{"src": "https://img/js.jpg"}],
    },
}


def test_search_maps_items(settings_env, monkeypatch):
    calls = _install(monkeypatch, [_FakeResponse(payload={"items": [CSE_ITEM], "searchInformation": {"totalResults": "1"}})])
    searcher, _ = _searcher(settings_env)
    items = searcher.search("site:linkedin.com/in \"Microsoft\"")
    assert len(items) == 1
    assert items[0].rich_snippet == "Head of <b>Agentic AI</b> at Microsoft."
    assert items[0].image_url == "https://thumb/js.jpg"
    assert calls[0]["q"] == "site:linkedin.com/in \"Microsoft\""
    assert calls[0]["key"] == "dummy-key" and calls[0]["cx"] == "dummy-cx"
    assert searcher.get_api_usage()["api_calls_made"] == 1


def test_image_falls_back_to_cse_image(settings_env, monkeypatch):
    item = dict(CSE_ITEM, pagemap={"cse_image": [{"src": "https://img/js.jpg"}]})
    _install(monkeypatch, [_FakeResponse(payload={"items": [item]})])
    searcher, _ = _searcher(settings_env)
    assert searcher.search("q")[0].image_url == "https://img/js.jpg"


def test_pagination_follows_total_results(settings_env, monkeypatch):
    page = {"items": [CSE_ITEM], "searchInformation": {"totalResults": "15"}}
    calls = _install(monkeypatch, [_FakeResponse(payload=page), _FakeResponse(payload=page)])
    searcher, _ = _searcher(settings_env, max_pages=3)
    items = searcher.search("q")
    assert len(items) == 2
    assert [c["start"] for c in calls] == [1, 11]


def test_rate_limit_is_quota_and_not_retried(settings_env, monkeypatch):
    calls = _install(monkeypatch, [_FakeResponse(status_code=429, text="Too Many Requests")])
    searcher, sleeps = _searcher(settings_env)
    with pytest.raises(QuotaExceeded):
        searcher.search("q")
    assert len(calls) == 1
    assert sleeps == []


def test_daily_limit_403_is_quota(settings_env, monkeypatch):
    body = '{"error": {"code": 403, "errors": [{"reason": "dailyLimitExceeded"}]}}'
    _install(monkeypatch, [_FakeResponse(status_code=403, text=body)])
    searcher, _ = _searcher(settings_env)
    with pytest.raises(QuotaExceeded):
        searcher.search("q")


def test_error_body_inside_200_is_classified(settings_env, monkeypatch):
    payload = {"error": {"code": 403, "message": "Quota exceeded for quota metric 'Queries'"}}
    _install(monkeypatch, [_FakeResponse(payload=payload)])
    searcher, _ = _searcher(settings_env)
    with pytest.raises(QuotaExceeded):
        searcher.search("q")


def test_server_errors_retry_with_backoff_then_transport_error(settings_env, monkeypatch):
    calls = _install(monkeypatch, [_FakeResponse(status_code=503, text="backend unavailable")])
    searcher, sleeps = _searcher(settings_env)
    with pytest.raises(TransportError):
        searcher.search("q")
    assert len(calls) == settings_env.max_retries
    assert sleeps == [1, 2]


def test_network_error_recovers_on_retry(settings_env, monkeypatch):
    calls = _install(monkeypatch, [
        requests.exceptions.ConnectionError("reset"),
        _FakeResponse(payload={"items": [CSE_ITEM]}),
    ])
    searcher, sleeps = _searcher(settings_env)
    assert len(searcher.search("q")) == 1
    assert len(calls) == 2
    assert sleeps == [1]


def test_missing_credentials_rejected(settings_env):
    with pytest.raises(ValueError):
        GoogleSearcher(dataclasses.replace(settings_env, google_api_key=None))
