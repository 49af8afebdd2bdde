from __future__ import annotations

import logging
from typing import Set

from pipelines.runner import RunContext

logger = logging.getLogger(__name__)


class DedupeLeads:
    """Drop leads whose URL is already known; first sighting wins.

    ``seen_urls`` is shared with the caller and updated in place so later
    queries in the same run see earlier captures.
    """

    def __init__(self, seen_urls: Set[str]) -> None:
        self.seen_urls = seen_urls

    def run(self, ctx: RunContext) -> RunContext:
        fresh = []
        duplicates = 0
        for lead in ctx.leads or []:
            if lead.canonical_url in self.seen_urls:
                duplicates += 1
                logger.debug(f"Duplicate profile found: {lead.canonical_url}", extra={"step": "dedupe"})
                continue
            self.seen_urls.add(lead.canonical_url)
            fresh.append(lead)
        ctx.leads = fresh
        ctx.meta["duplicates"] = duplicates
        ctx.meta["new_leads"] = len(fresh)
        return ctx
