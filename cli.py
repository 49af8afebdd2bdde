import argparse
import logging
import os
import sys
import uuid as _uuid
from pathlib import Path

from config.settings import get_settings
from db import schema
from db.connection import get_connection
from pipelines.revalidate_leads import run_revalidation
from pipelines.scout_leads import run_scout
from services.config_loader import ConfigError, load_keywords, load_search_config
from services.csv_export import export_leads_csv, leads_by_company
from services.reporting import print_export_summary, print_revalidation_summary, print_summary
from sources.registry import available_sources, get_source
from storage.factory import open_stores
from storage.json_store import StorageError
from utils.logging_setup import init_logging

logger = logging.getLogger(__name__)


def _stores(args):
    return open_stores(get_settings(), backend=args.store, db_path=args.db)


def cmd_bootstrap(args):
    conn = get_connection(args.db)
    schema.bootstrap(conn)
    print("Schema ready")


def cmd_search(args):
    settings = get_settings()
    companies, keywords = load_search_config(settings.targets_path, settings.keywords_path)
    lead_store, ledger = _stores(args)

    provider_name = args.provider or settings.search_provider
    provider = None
    if not args.dry_run:
        provider = get_source(provider_name, settings=settings)

    logger.info(
        f"Loaded {len(companies.companies)} target companies and {len(keywords.topics)} topics",
        extra={"step": "config", "provider": provider_name},
    )
    report = run_scout(
        settings,
        provider,
        lead_store,
        ledger,
        companies.companies,
        keywords,
        strict=False if args.no_strict else None,
        max_queries=args.max_queries,
        delay=args.delay,
        include_roles=args.with_roles,
        dry_run=args.dry_run,
    )
    usage = provider.get_api_usage() if hasattr(provider, "get_api_usage") else None
    output = Path(settings.leads_path) if args.store == "json" else Path(args.db)
    print_summary(report, usage, None if args.dry_run else output)


def cmd_revalidate(args):
    settings = get_settings()
    keywords = load_keywords(settings.keywords_path)
    lead_store, _ = _stores(args)
    result = run_revalidation(lead_store, keywords)
    print_revalidation_summary(result, keywords.topics)


def cmd_export_csv(args):
    settings = get_settings()
    lead_store, _ = _stores(args)
    leads = lead_store.load_leads()
    if not leads:
        print("No leads to export.")
        return
    output = Path(args.output or settings.csv_path)
    count = export_leads_csv(leads, output)
    top, more = leads_by_company(leads)
    print_export_summary(count, output, top, more)


def cmd_reset_ledger(args):
    _, ledger = _stores(args)
    cleared = ledger.clear_executed()
    print(f"Cleared {cleared} executed queries")


def main():
    settings = get_settings()
    init_logging(settings.log_level)
    if not os.getenv("RUN_ID"):
        os.environ["RUN_ID"] = _uuid.uuid4().hex

    parser = argparse.ArgumentParser(description="LinkedIn lead scout CLI")
    parser.add_argument("--store", choices=["json", "sqlite"], default=settings.store_backend,
                        help="Persistence backend for leads and the query ledger")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_search = sub.add_parser("search", help="Run pending X-Ray queries and collect new leads")
    p_search.add_argument("--provider", choices=sorted(available_sources()), default=None,
                          help=f"Search provider (default: {settings.search_provider})")
    p_search.add_argument("--max-queries", type=int, default=None,
                          help=f"Query budget for this run (default: {settings.max_queries_per_run})")
    p_search.add_argument("--delay", type=float, default=None, help="Seconds to wait between queries")
    p_search.add_argument("--no-strict", action="store_true", help="Keep leads without a topic match")
    p_search.add_argument("--with-roles", action="store_true", help="Add the role keyword clause to queries")
    p_search.add_argument("--dry-run", action="store_true", help="Print pending queries without searching")
    p_search.set_defaults(func=cmd_search)

    p_reval = sub.add_parser("revalidate", help="Re-check stored leads against current topic keywords")
    p_reval.set_defaults(func=cmd_revalidate)

    p_csv = sub.add_parser("export-csv", help="Export stored leads to CSV")
    p_csv.add_argument("--output", "-o", default=None, help=f"CSV path (default: {settings.csv_path})")
    p_csv.set_defaults(func=cmd_export_csv)

    p_reset = sub.add_parser("reset-ledger", help="Forget executed queries so they run again")
    p_reset.set_defaults(func=cmd_reset_ledger)

    p_boot = sub.add_parser("bootstrap", help="Create SQLite tables and indexes")
    p_boot.set_defaults(func=cmd_bootstrap)

    args = parser.parse_args()
    try:
        args.func(args)
    except (ConfigError, StorageError, ValueError) as e:
        logger.error(str(e), extra={"step": args.cmd, "status": "error", "error": type(e).__name__})
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
