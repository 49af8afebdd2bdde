from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable, List, Pattern, Sequence, Tuple

from models.lead import Lead


@lru_cache(maxsize=512)
def _topic_pattern(topic: str) -> Pattern[str]:
    # Whole word/phrase: no word character directly before or after, and any
    # whitespace run between the words of a multi-word keyword.
    words = [re.escape(w) for w in topic.split()]
    body = r"\s+".join(words)
    return re.compile(rf"(?<!\w){body}(?!\w)", re.IGNORECASE)


def find_matched_topics(text: str, topics: Sequence[str]) -> List[str]:
    """Return the topics found in text, in the order they were supplied.

    Matching is case-insensitive and word-boundary delimited, so "Agent" does
    not match inside "reagents".
    """
    if not text:
        return []
    matched: List[str] = []
    for topic in topics:
        if not topic or not topic.strip() or topic in matched:
            continue
        if _topic_pattern(topic).search(text):
            matched.append(topic)
    return matched


def filter_by_topic(leads: Iterable[Lead], strict: bool = True) -> Tuple[List[Lead], List[Lead]]:
    """Split leads into (kept, topic_mismatches). Non-strict keeps everything."""
    kept: List[Lead] = []
    dropped: List[Lead] = []
    for lead in leads:
        if strict and not lead.matched_topics:
            dropped.append(lead)
        else:
            kept.append(lead)
    return kept, dropped


@dataclass
class RevalidationResult:
    kept: List[Lead] = field(default_factory=list)
    removed: List[Lead] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.kept) + len(self.removed)


def revalidate_leads(leads: Iterable[Lead], topics: Sequence[str]) -> RevalidationResult:
    """Recompute matched topics from role + snippet against the current keywords.

    Leads with no match move to ``removed``; the rest keep their order with
    ``matched_topics`` overwritten.
    """
    result = RevalidationResult()
    for lead in leads:
        matched = find_matched_topics(f"{lead.role} {lead.snippet}", topics)
        updated = lead.model_copy(update={"matched_topics": matched})
        if matched:
            result.kept.append(updated)
        else:
            result.removed.append(updated)
    return result
