from __future__ import annotations

import sqlite3


LEAD_COLUMNS = (
    "  canonical_url TEXT NOT NULL,\n"
    "  name TEXT NOT NULL,\n"
    "  role TEXT NOT NULL,\n"
    "  company TEXT NOT NULL,\n"
    "  location TEXT NOT NULL DEFAULT '',\n"
    "  snippet TEXT NOT NULL DEFAULT '',\n"
    "  rich_snippet TEXT NOT NULL DEFAULT '',\n"
    "  image_url TEXT,\n"
    "  confidence TEXT NOT NULL CHECK (confidence IN ('high', 'medium', 'low')),\n"
    "  matched_topics_json TEXT NOT NULL DEFAULT '[]',\n"
    "  query_used TEXT NOT NULL DEFAULT '',\n"
    "  discovered_at TEXT NOT NULL\n"
)


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create lead and ledger tables plus indexes (idempotent)."""
    cur = conn.cursor()

    # Primary lead collection; insertion order is kept via the rowid alias
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS leads (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            f"{LEAD_COLUMNS},\n"
            "  UNIQUE (canonical_url)\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_leads_company ON leads(company);")

    # Leads removed by re-validation, kept for review (no uniqueness: history)
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS rejected_leads (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            f"{LEAD_COLUMNS},\n"
            "  rejected_at TEXT NOT NULL DEFAULT (datetime('now'))\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_rejected_leads_url ON rejected_leads(canonical_url);")

    # Executed-query ledger keyed by the exact query string
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS executed_queries (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  query_text TEXT NOT NULL UNIQUE,\n"
            "  query_hash TEXT NOT NULL,\n"
            "  executed_at TEXT NOT NULL DEFAULT (datetime('now'))\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_executed_queries_hash ON executed_queries(query_hash);")

    conn.commit()
