from __future__ import annotations

from typing import List, Protocol

from models.search_result import SearchItem


class SearchProviderPort(Protocol):
    """External search collaborator: one query in, raw result items out.

    Raises sources.base.SearchProviderError (or a subclass) on failure.
    """

    source_name: str

    def search(self, query: str) -> List[SearchItem]:
        ...
