from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from pipelines.scout_leads import RunReport
from services.topic_filter import RevalidationResult


def print_summary(report: RunReport, api_usage: Optional[dict] = None, output_path: Optional[Path] = None) -> None:
    """Print summary of a search run."""
    print("\n" + "="*60)
    print("LINKEDIN LEAD SCOUT - SUMMARY")
    print("="*60)
    print(f"Queries Planned: {report.queries_planned}")
    print(f"Queries Pending (within budget): {report.queries_pending}")
    if report.dry_run:
        print("Dry run - no queries issued:")
        for query in report.pending_queries:
            print(f"  {query}")
        print("="*60)
        return
    print(f"Queries Executed: {report.queries_executed}")
    if report.failed_queries:
        print(f"Failed Queries: {len(report.failed_queries)}")
    print()
    print("Extraction Statistics:")
    print(f"  Provider Results: {report.provider_results}")
    print(f"  Parsed Leads: {report.parsed}")
    print(f"  Skipped (not a profile / unknown title): {report.parse_skipped}")
    print(f"  Filtered (no topic match): {report.topic_filtered}")
    print(f"  Duplicates: {report.duplicates}")
    print(f"  New Leads: {report.new_leads}")
    print(f"  Total Leads: {report.total_leads}")
    if report.halted_reason:
        print()
        print(f"Run stopped early: {report.halted_reason}")
    if api_usage:
        print()
        print(f"API Usage: {api_usage.get('estimated_daily_limit_used', 'N/A')}")
    if output_path:
        print(f"Output File: {output_path}")
    print("="*60)


def print_revalidation_summary(result: RevalidationResult, topics: List[str]) -> None:
    print("\n" + "="*60)
    print("LEAD RE-VALIDATION")
    print("="*60)
    print(f"Topics to match: {', '.join(topics)}")
    print(f"Leads checked: {result.total}")
    print(f"Leads with topic match: {len(result.kept)}")
    print(f"Moved to rejected: {len(result.removed)}")
    print("="*60)


def print_export_summary(count: int, output_path: Path, by_company: List[Tuple[str, int]], more: int) -> None:
    print(f"Exported {count} leads to {output_path}")
    if not by_company:
        return
    print()
    print("Leads by company:")
    for company, n in by_company:
        print(f"  {company}: {n}")
    if more:
        print(f"  ... and {more} more companies")
