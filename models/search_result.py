from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


def _first_src(pagemap: Dict[str, Any], key: str) -> Optional[str]:
    entries = pagemap.get(key) or []
    if entries and isinstance(entries[0], dict):
        src = entries[0].get("src")
        if src:
            return str(src)
    return None


class SearchItem(BaseModel):
    """One raw search result as returned by a search provider."""

    title: str = ""
    link: str = ""
    snippet: str = ""
    rich_snippet: str | None = Field(default=None, alias="richSnippet")
    image_url: str | None = Field(default=None, alias="imageUrl")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @classmethod
    def from_cse_item(cls, item: Dict[str, Any]) -> "SearchItem":
        """Map a Custom Search JSON API item; thumbnail preferred over full image."""
        pagemap = item.get("pagemap") or {}
        image_url = _first_src(pagemap, "cse_thumbnail") or _first_src(pagemap, "cse_image")
        return cls(
            title=item.get("title") or "",
            link=item.get("link") or "",
            snippet=item.get("snippet") or "",
            rich_snippet=item.get("htmlSnippet"),
            image_url=image_url,
        )
