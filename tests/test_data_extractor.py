from __future__ import annotations

import pytest

from data_extractor import (
    LeadExtractor,
    clean_text,
    default_title_matchers,
    match_title,
)
from models.search_result import SearchItem

TOPICS = ["Agentic AI", "AI Agents", "Autonomous Agents", "Multi-Agent"]
PROFILE = "https://www.linkedin.com/in/john-smith-123/"


def _item(title, link=PROFILE, snippet="", **kwargs):
    return SearchItem(title=title, link=link, snippet=snippet, **kwargs)


def test_primary_pattern_scenario():
    extractor = LeadExtractor()
    lead = extractor.parse_one(
        _item(
            "John Smith - Head of Agentic AI - Microsoft | LinkedIn",
            snippet="Head of Agentic AI at Microsoft. Building autonomous systems.",
        ),
        query_used="q1",
        topics=TOPICS,
    )
    assert lead is not None
    assert lead.name == "John Smith"
    assert lead.role == "Head of Agentic AI"
    assert lead.company == "Microsoft"
    assert lead.confidence == "high"
    assert lead.matched_topics == ["Agentic AI"]
    assert lead.query_used == "q1"
    assert lead.canonical_url == "https://linkedin.com/in/john-smith-123"


def test_truncated_title_is_low_confidence():
    lead = LeadExtractor().parse_one(
        _item("Jane Doe - Senior Director of Agentic AI Platf... | LinkedIn", snippet="Experience: Salesforce"),
        query_used="q",
        topics=TOPICS,
    )
    assert lead is not None
    assert lead.name == "Jane Doe"
    assert lead.role == "Senior Director of Agentic AI Platf"
    assert lead.confidence == "low"
    assert lead.company == "Salesforce"


def test_fallback_pattern_uses_snippet_company():
    lead = LeadExtractor().parse_one(
        _item("Bob Wilson - AI Engineer | LinkedIn", snippet="Working at Google on agents..."),
        query_used="q",
        topics=TOPICS,
    )
    assert lead is not None
    assert lead.name == "Bob Wilson"
    assert lead.role == "AI Engineer"
    assert lead.company == "Google"
    assert lead.confidence == "medium"


def test_jobs_page_is_skipped():
    extractor = LeadExtractor()
    item = _item("LinkedIn: 500+ AI Jobs", link="https://www.linkedin.com/jobs/ai-jobs")
    assert extractor.parse_one(item, "q", TOPICS) is None
    assert extractor.get_extraction_stats()["not_profile"] == 1


@pytest.mark.parametrize("link", [
    "https://www.linkedin.com/company/microsoft",
    "https://example.com/in/john",
    "",
])
def test_non_profile_links_never_parse(link):
    extractor = LeadExtractor()
    item = _item("John Smith - Head of Agentic AI - Microsoft | LinkedIn", link=link, snippet="Agentic AI")
    assert extractor.parse_one(item, "q", TOPICS) is None


def test_primary_with_truncation_marker_is_low():
    lead = LeadExtractor().parse_one(_item("Alex Kim - VP Engineering - Acme Cor… | LinkedIn"), "q")
    assert lead.confidence == "low"
    assert lead.company == "Acme Cor"


def test_fallback_ignores_inner_truncation_marker():
    lead = LeadExtractor().parse_one(_item("Sam Lee - AI... Engineer | LinkedIn"), "q")
    assert lead.confidence == "medium"
    assert lead.role == "AI Engineer"


def test_unrecognized_title_is_counted():
    extractor = LeadExtractor()
    assert extractor.parse_one(_item("John Smith | LinkedIn"), "q") is None
    assert extractor.parse_one(_item("Some profile page"), "q") is None
    stats = extractor.get_extraction_stats()
    assert stats["unparseable_title"] == 2
    assert extractor.skipped == 2


def test_hyphenated_name_stays_intact():
    match = match_title("Mary-Jane Watson - CTO - Acme | LinkedIn", default_title_matchers())
    assert match.name == "Mary-Jane Watson"
    assert match.role == "CTO"
    assert match.company == "Acme"
    assert match.tier == "primary"


def test_company_segment_drops_stray_pipe_text():
    match = match_title("Ana Ruiz - CTO - Acme | Berlin | LinkedIn", default_title_matchers())
    assert match.company == "Acme"


def test_unknown_company_and_empty_location_are_valid_outcomes():
    lead = LeadExtractor().parse_one(_item("Kim Lee - Founder | LinkedIn", snippet="building things"), "q")
    assert lead.company == "Unknown"
    assert lead.location == ""
    assert lead.matched_topics == []


def test_snippet_html_entities_and_media_pass_through():
    lead = LeadExtractor().parse_one(
        _item(
            "Lea M&uuml;ller - Lead AI Agents - SAP | LinkedIn",
            snippet="Berlin, Germany · 500+ connections",
            image_url="https://media.example/x.jpg",
        ),
        "q",
        TOPICS,
    )
    assert lead.name == "Lea Müller"
    assert lead.location == "Berlin, Germany"
    assert lead.image_url == "https://media.example/x.jpg"
    assert lead.rich_snippet == "Berlin, Germany · 500+ connections"
    assert lead.matched_topics == ["AI Agents"]


def test_parse_all_keeps_order_and_skips():
    items = [
        _item("A One - CTO - X | LinkedIn", link="https://linkedin.com/in/a"),
        _item("Jobs", link="https://linkedin.com/jobs/1"),
        _item("B Two - CEO - Y | LinkedIn", link="https://linkedin.com/in/b"),
    ]
    extractor = LeadExtractor()
    leads = extractor.parse_all(items, "q")
    assert [lead.name for lead in leads] == ["A One", "B Two"]
    assert extractor.get_extraction_stats() == {"parsed": 2, "not_profile": 1, "unparseable_title": 0}


def test_clean_text():
    assert clean_text("  Head   of\nAI...  ") == "Head of AI"
    assert clean_text("R&amp;D…") == "R&D"
    assert clean_text(None) == ""
