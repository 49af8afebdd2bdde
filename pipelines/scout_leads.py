"""
Run protocol for one lead-discovery pass.

Plans target x topic-batch queries, skips everything the ledger already holds,
then issues the remaining queries one at a time within the per-run budget.
Leads and the ledger are written once at the end, however the loop stops.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from config.settings import Settings
from data_extractor import LeadExtractor
from models.lead import Lead
from models.search_config import SearchKeywords, TargetCompany
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import DedupeLeads, FilterTopics, ParseResults
from ports.repos import LeadStorePort, QueryLedgerPort
from ports.source import SearchProviderPort
from query_builder import PlannedQuery, plan_queries, select_pending
from sources.base import SearchProviderError, TransportError, ensure_classified

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    queries_planned: int = 0
    queries_pending: int = 0
    queries_executed: int = 0
    provider_results: int = 0
    parsed: int = 0
    parse_skipped: int = 0
    topic_filtered: int = 0
    duplicates: int = 0
    new_leads: int = 0
    total_leads: int = 0
    halted_reason: Optional[str] = None
    failed_queries: List[str] = field(default_factory=list)
    pending_queries: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def halted(self) -> bool:
        return self.halted_reason is not None


def run_scout(
    settings: Settings,
    provider: Optional[SearchProviderPort],
    lead_store: LeadStorePort,
    ledger: QueryLedgerPort,
    targets: Sequence[TargetCompany],
    keywords: SearchKeywords,
    strict: Optional[bool] = None,
    max_queries: Optional[int] = None,
    delay: Optional[float] = None,
    include_roles: bool = False,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> RunReport:
    strict = settings.strict_topic_match if strict is None else strict
    budget = settings.max_queries_per_run if max_queries is None else max_queries
    provider_name = getattr(provider, "source_name", settings.search_provider)
    if delay is None:
        delay = settings.delay_for(provider_name)

    executed_order = ledger.load_executed_ordered()
    executed = set(executed_order)
    existing = lead_store.load_leads()
    seen_urls = lead_store.load_seen_urls()

    planned = plan_queries(
        targets,
        keywords,
        batches=settings.topic_batches,
        include_roles=include_roles,
        site_scope=settings.site_scope,
    )
    pending = select_pending(planned, executed, budget)

    report = RunReport(
        queries_planned=len(planned),
        queries_pending=len(pending),
        total_leads=len(existing),
        pending_queries=[p.query for p in pending],
        dry_run=dry_run,
    )
    logger.info(
        f"Planned {len(planned)} queries, {len(pending)} pending within budget {budget}",
        extra={"step": "plan", "provider": provider_name},
    )

    if dry_run or not pending:
        if not pending:
            logger.info("No pending queries; ledger and leads left untouched", extra={"step": "plan", "status": "noop"})
        return report
    if provider is None:
        raise ValueError("A search provider is required unless dry_run is set")

    extractor = LeadExtractor(brand=settings.title_brand, profile_marker=settings.profile_url_marker)
    pipeline = Pipeline([
        ParseResults(extractor, keywords.topics),
        FilterTopics(strict=strict),
        DedupeLeads(seen_urls),
    ])

    new_leads: List[Lead] = []
    attempted: List[str] = []
    try:
        for index, planned_query in enumerate(pending):
            if index > 0 and delay > 0:
                sleep(delay)
            attempted.append(planned_query.query)
            report.queries_executed += 1
            if not _run_one(provider, pipeline, planned_query, report, new_leads):
                break
    finally:
        if attempted:
            try:
                lead_store.save_leads(existing + new_leads)
            finally:
                ledger.save_executed(executed_order + attempted)
        report.new_leads = len(new_leads)
        report.total_leads = len(existing) + len(new_leads)
        logger.info(
            f"Run finished: {report.queries_executed} queries, {report.new_leads} new leads, "
            f"{report.total_leads} total",
            extra={"step": "persist", "status": "halted" if report.halted else "ok"},
        )
    return report


def _run_one(
    provider: SearchProviderPort,
    pipeline: Pipeline,
    planned_query: PlannedQuery,
    report: RunReport,
    new_leads: List[Lead],
) -> bool:
    """Execute one query. Returns False when the run must stop."""
    query = planned_query.query
    log_extra = {"step": "search", "query": query}
    try:
        items = provider.search(query)
    except Exception as e:
        if not isinstance(e, SearchProviderError):
            # Anything unexpected from a provider only costs this one query
            logger.exception(f"Unexpected provider failure: {e}", extra={**log_extra, "error": type(e).__name__})
            e = TransportError(str(e))
        error = ensure_classified(e)
        report.failed_queries.append(query)
        if error.halts_run:
            report.halted_reason = f"{type(error).__name__}: {error}"
            logger.error(f"Stopping run: {error}", extra={**log_extra, "status": "halted", "error": type(error).__name__})
            return False
        logger.warning(f"Query failed, continuing: {error}", extra={**log_extra, "status": "failed", "error": type(error).__name__})
        return True

    items = list(items or [])
    try:
        ctx = pipeline.run(RunContext(query=query, items=items))
    except Exception as e:
        # A result batch that cannot be processed is skipped like any unparseable item
        report.provider_results += len(items)
        report.parse_skipped += len(items)
        logger.exception(f"Could not process results: {e}", extra={**log_extra, "status": "skipped", "error": type(e).__name__})
        return True
    report.provider_results += ctx.meta.get("results", 0)
    report.parsed += ctx.meta.get("parsed", 0)
    report.parse_skipped += ctx.meta.get("parse_skipped", 0)
    report.topic_filtered += ctx.meta.get("topic_filtered", 0)
    report.duplicates += ctx.meta.get("duplicates", 0)
    new_leads.extend(ctx.leads)
    logger.info(
        f"{planned_query.target}: {len(ctx.leads)} new leads from {ctx.meta.get('results', 0)} results",
        extra={**log_extra, "status": "ok"},
    )
    return True
