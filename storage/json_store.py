"""
JSON file persistence for the lead collection and the executed-query ledger.

Both files are read fully at run start and rewritten at run end.
"""
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, List, Set

from models.lead import Lead


class StorageError(RuntimeError):
    """Persisted state exists but cannot be read."""


def _ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise StorageError(f"Could not read {path}: {e}") from e


def write_json(path: Path, payload: Any) -> None:
    """Write via a temp file in the same directory, then atomically replace."""
    _ensure_parent_dir(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def _load_lead_list(path: Path) -> List[Lead]:
    data = read_json(path, [])
    if not isinstance(data, list):
        raise StorageError(f"{path} must contain a JSON array of leads")
    try:
        return [Lead.from_record(rec) for rec in data]
    except ValueError as e:
        raise StorageError(f"Invalid lead record in {path}: {e}") from e


class JsonLeadStore:
    def __init__(self, leads_path: str | Path, rejected_path: str | Path):
        self.leads_path = Path(leads_path)
        self.rejected_path = Path(rejected_path)

    def load_leads(self) -> List[Lead]:
        return _load_lead_list(self.leads_path)

    def save_leads(self, leads: Iterable[Lead]) -> None:
        write_json(self.leads_path, [lead.to_record() for lead in leads])

    def load_rejected(self) -> List[Lead]:
        return _load_lead_list(self.rejected_path)

    def append_rejected(self, leads: Iterable[Lead]) -> None:
        new = list(leads)
        if not new:
            return
        existing = self.load_rejected()
        write_json(self.rejected_path, [lead.to_record() for lead in existing + new])

    def load_seen_urls(self) -> Set[str]:
        """URLs already captured, including leads parked for review."""
        return {lead.canonical_url for lead in self.load_leads() + self.load_rejected()}


class JsonQueryLedger:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load_executed(self) -> Set[str]:
        return set(self.load_executed_ordered())

    def load_executed_ordered(self) -> List[str]:
        data = read_json(self.path, [])
        if not isinstance(data, list):
            raise StorageError(f"{self.path} must contain a JSON array of query strings")
        return [str(q) for q in data]

    def save_executed(self, queries: Iterable[str]) -> None:
        write_json(self.path, list(dict.fromkeys(queries)))

    def clear_executed(self) -> int:
        count = len(self.load_executed())
        if self.path.exists():
            self.path.unlink()
        return count
