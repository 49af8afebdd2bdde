from __future__ import annotations

from typing import Optional, Tuple

from config.settings import Settings
from db import schema
from db.connection import get_connection
from db.repos.leads_repo import LeadsRepo
from db.repos.queries_repo import QueriesRepo
from ports.repos import LeadStorePort, QueryLedgerPort
from storage.json_store import JsonLeadStore, JsonQueryLedger


def open_stores(
    settings: Settings,
    backend: Optional[str] = None,
    db_path: Optional[str] = None,
) -> Tuple[LeadStorePort, QueryLedgerPort]:
    """Build the lead store and query ledger for the configured backend."""
    backend = (backend or settings.store_backend).lower()
    if backend == "json":
        return (
            JsonLeadStore(settings.leads_path, settings.rejected_leads_path),
            JsonQueryLedger(settings.executed_queries_path),
        )
    if backend == "sqlite":
        conn = get_connection(db_path or settings.db_path)
        schema.bootstrap(conn)
        return LeadsRepo(conn), QueriesRepo(conn)
    raise ValueError(f"Unknown store backend: {backend}")
