from __future__ import annotations

import json
import sqlite3
from typing import Iterable, List, Set, Tuple

from models.lead import Lead


_SELECT_COLUMNS = (
    "canonical_url, name, role, company, location, snippet, rich_snippet, image_url, "
    "confidence, matched_topics_json, query_used, discovered_at"
)


def _lead_to_row(lead: Lead) -> Tuple:
    return (
        lead.canonical_url,
        lead.name,
        lead.role,
        lead.company,
        lead.location,
        lead.snippet,
        lead.rich_snippet,
        lead.image_url,
        lead.confidence,
        # Preserve non-ASCII characters in stored JSON text
        json.dumps(lead.matched_topics, ensure_ascii=False),
        lead.query_used,
        lead.discovered_at,
    )


def _row_to_lead(row: Tuple) -> Lead:
    (url, name, role, company, location, snippet, rich_snippet, image_url,
     confidence, topics_json, query_used, discovered_at) = row
    return Lead(
        canonical_url=url,
        name=name,
        role=role,
        company=company,
        location=location or "",
        snippet=snippet or "",
        rich_snippet=rich_snippet or "",
        image_url=image_url,
        confidence=confidence,
        matched_topics=json.loads(topics_json or "[]"),
        query_used=query_used or "",
        discovered_at=discovered_at,
    )


class LeadsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def load_leads(self) -> List[Lead]:
        cur = self.conn.cursor()
        cur.execute(f"SELECT {_SELECT_COLUMNS} FROM leads ORDER BY id")
        return [_row_to_lead(r) for r in cur.fetchall()]

    def save_leads(self, leads: Iterable[Lead]) -> None:
        """Make the table hold exactly these leads.

        Existing rows keep their position and have their fields refreshed;
        unknown URLs are appended in the given order; rows absent from the
        input are deleted.
        """
        rows = [_lead_to_row(lead) for lead in leads]
        keep = [row[0] for row in rows]
        cur = self.conn.cursor()
        try:
            cur.execute("CREATE TEMP TABLE IF NOT EXISTS _keep_urls (url TEXT PRIMARY KEY)")
            cur.execute("DELETE FROM _keep_urls")
            cur.executemany("INSERT OR IGNORE INTO _keep_urls (url) VALUES (?)", [(u,) for u in keep])
            cur.execute("DELETE FROM leads WHERE canonical_url NOT IN (SELECT url FROM _keep_urls)")
            cur.executemany(
                (
                    f"INSERT INTO leads ({_SELECT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
                    "ON CONFLICT(canonical_url) DO UPDATE SET "
                    " name = excluded.name, role = excluded.role, company = excluded.company, "
                    " location = excluded.location, snippet = excluded.snippet, "
                    " rich_snippet = excluded.rich_snippet, image_url = excluded.image_url, "
                    " confidence = excluded.confidence, matched_topics_json = excluded.matched_topics_json, "
                    " query_used = excluded.query_used, discovered_at = excluded.discovered_at"
                ),
                rows,
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise

    def load_rejected(self) -> List[Lead]:
        cur = self.conn.cursor()
        cur.execute(f"SELECT {_SELECT_COLUMNS} FROM rejected_leads ORDER BY id")
        return [_row_to_lead(r) for r in cur.fetchall()]

    def append_rejected(self, leads: Iterable[Lead]) -> None:
        rows = [_lead_to_row(lead) for lead in leads]
        if not rows:
            return
        self.conn.executemany(
            f"INSERT INTO rejected_leads ({_SELECT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            rows,
        )
        self.conn.commit()

    def load_seen_urls(self) -> Set[str]:
        cur = self.conn.cursor()
        cur.execute("SELECT canonical_url FROM leads UNION SELECT canonical_url FROM rejected_leads")
        return {row[0] for row in cur.fetchall()}
