"""
X-Ray query construction for LinkedIn profile searches.

Queries are plain strings and double as ledger keys, so identical inputs must
always produce byte-identical output.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Set

from models.search_config import SearchKeywords, TargetCompany

DEFAULT_SITE_SCOPE = "site:linkedin.com/in"


def quote_phrase(text: str) -> str:
    """Wrap text in exact-phrase quotes. Embedded double quotes are rejected."""
    if '"' in text:
        raise ValueError(f"Embedded double quote not allowed in query phrase: {text!r}")
    return f'"{text}"'


def _or_group(terms: Sequence[str]) -> str:
    return "(" + " OR ".join(quote_phrase(t) for t in terms) + ")"


def build_query(
    target: Optional[str] = None,
    topics: Optional[Sequence[str]] = None,
    roles: Optional[Sequence[str]] = None,
    exclusions: Optional[Sequence[str]] = None,
    site_scope: str = DEFAULT_SITE_SCOPE,
) -> str:
    """Build a boolean search query restricted to profile pages.

    Clause order: scope, topics, roles, target, exclusions. Exclusions are
    appended verbatim.
    """
    parts: List[str] = [site_scope]
    if topics:
        parts.append(_or_group(topics))
    if roles:
        parts.append(_or_group(roles))
    if target:
        parts.append(quote_phrase(target))
    if exclusions:
        parts.extend(exclusions)
    return " ".join(parts)


def split_batches(keywords: Sequence[str], batches: int = 2) -> List[List[str]]:
    """Partition keywords into contiguous, disjoint, non-empty batches.

    Earlier batches take the extra keyword when the split is uneven, so two
    batches over seven keywords yields 4 + 3.
    """
    items = list(keywords)
    if not items:
        return []
    batches = max(1, min(batches, len(items)))
    size = math.ceil(len(items) / batches)
    return [items[i:i + size] for i in range(0, len(items), size)]


@dataclass(frozen=True)
class PlannedQuery:
    query: str
    target: str


def plan_queries(
    targets: Iterable[TargetCompany],
    keywords: SearchKeywords,
    batches: int = 2,
    include_roles: bool = False,
    site_scope: str = DEFAULT_SITE_SCOPE,
) -> List[PlannedQuery]:
    """Cross product of targets x topic batches, in generation order."""
    topic_batches = split_batches(keywords.topics, batches)
    roles = keywords.roles if include_roles else None
    planned: List[PlannedQuery] = []
    for company in targets:
        for batch in topic_batches or [[]]:
            query = build_query(
                target=company.name,
                topics=batch,
                roles=roles,
                exclusions=keywords.exclusions,
                site_scope=site_scope,
            )
            planned.append(PlannedQuery(query=query, target=company.name))
    return planned


def select_pending(planned: Sequence[PlannedQuery], executed: Set[str], budget: int) -> List[PlannedQuery]:
    """Drop already executed (or repeated) queries and cap at the per-run budget.

    Order is preserved; anything past the cap stays eligible for later runs.
    """
    pending: List[PlannedQuery] = []
    seen: Set[str] = set()
    for item in planned:
        if item.query in executed or item.query in seen:
            continue
        seen.add(item.query)
        pending.append(item)
    return pending[:max(0, budget)]
