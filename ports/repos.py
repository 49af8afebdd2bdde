from __future__ import annotations

from typing import Iterable, List, Protocol, Set

from models.lead import Lead


class LeadStorePort(Protocol):
    def load_leads(self) -> List[Lead]:
        ...

    def save_leads(self, leads: Iterable[Lead]) -> None:
        ...

    def load_rejected(self) -> List[Lead]:
        ...

    def append_rejected(self, leads: Iterable[Lead]) -> None:
        ...

    def load_seen_urls(self) -> Set[str]:
        ...


class QueryLedgerPort(Protocol):
    def load_executed(self) -> Set[str]:
        ...

    def load_executed_ordered(self) -> List[str]:
        ...

    def save_executed(self, queries: Iterable[str]) -> None:
        ...

    def clear_executed(self) -> int:
        ...
