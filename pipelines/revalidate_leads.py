from __future__ import annotations

import logging

from models.search_config import SearchKeywords
from ports.repos import LeadStorePort
from services.topic_filter import RevalidationResult, revalidate_leads

logger = logging.getLogger(__name__)


def run_revalidation(lead_store: LeadStorePort, keywords: SearchKeywords) -> RevalidationResult:
    """Re-check every stored lead against the current topic keywords.

    Leads that still match stay (with refreshed matched topics); the rest are
    appended to the rejected collection for manual review, never deleted.
    """
    leads = lead_store.load_leads()
    result = revalidate_leads(leads, keywords.topics)
    lead_store.append_rejected(result.removed)
    lead_store.save_leads(result.kept)
    for lead in result.removed:
        logger.debug(f"Moved to rejected: {lead.name} ({lead.canonical_url})", extra={"step": "revalidate"})
    logger.info(
        f"Re-validated {result.total} leads: {len(result.kept)} kept, {len(result.removed)} removed",
        extra={"step": "revalidate", "status": "ok"},
    )
    return result
