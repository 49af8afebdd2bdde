from __future__ import annotations

from typing import Sequence

from data_extractor import LeadExtractor
from pipelines.runner import RunContext


class ParseResults:
    """Raw search items -> parsed leads. Unparseable items are counted, not raised."""

    def __init__(self, extractor: LeadExtractor, topics: Sequence[str]) -> None:
        self.extractor = extractor
        self.topics = list(topics)

    def run(self, ctx: RunContext) -> RunContext:
        items = ctx.items or []
        ctx.leads = self.extractor.parse_all(items, ctx.query or "", self.topics)
        ctx.meta["results"] = len(items)
        ctx.meta["parsed"] = len(ctx.leads)
        ctx.meta["parse_skipped"] = len(items) - len(ctx.leads)
        return ctx
