from __future__ import annotations

import logging

from pipelines.runner import RunContext
from services.topic_filter import filter_by_topic

logger = logging.getLogger(__name__)


class FilterTopics:
    def __init__(self, strict: bool = True) -> None:
        self.strict = strict

    def run(self, ctx: RunContext) -> RunContext:
        kept, dropped = filter_by_topic(ctx.leads or [], strict=self.strict)
        if dropped:
            preview = ", ".join(f"{lead.name} @ {lead.company}" for lead in dropped)
            logger.debug(f"Filtered out (no topic match): {preview}", extra={"step": "filter_topics"})
        ctx.leads = kept
        ctx.meta["topic_filtered"] = len(dropped)
        return ctx
