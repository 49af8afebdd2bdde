from __future__ import annotations

import hashlib
import sqlite3
from typing import Iterable, List, Set


def query_hash(query_text: str) -> str:
    """Compact content hash of the exact query string (no normalization)."""
    return hashlib.sha256(query_text.encode("utf-8")).hexdigest()


class QueriesRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def load_executed(self) -> Set[str]:
        cur = self.conn.cursor()
        cur.execute("SELECT query_text FROM executed_queries")
        return {row[0] for row in cur.fetchall()}

    def load_executed_ordered(self) -> List[str]:
        cur = self.conn.cursor()
        cur.execute("SELECT query_text FROM executed_queries ORDER BY id")
        return [row[0] for row in cur.fetchall()]

    def save_executed(self, queries: Iterable[str]) -> None:
        """Record queries as spent; already recorded ones are left untouched."""
        rows = [(q, query_hash(q)) for q in dict.fromkeys(queries)]
        self.conn.executemany(
            "INSERT OR IGNORE INTO executed_queries (query_text, query_hash) VALUES (?, ?)",
            rows,
        )
        self.conn.commit()

    def clear_executed(self) -> int:
        cur = self.conn.cursor()
        cur.execute("DELETE FROM executed_queries")
        self.conn.commit()
        return int(cur.rowcount or 0)
