from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from services.domain_utils import normalize_profile_url


Confidence = Literal["high", "medium", "low"]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Lead(BaseModel):
    """Persisted lead record. Aliases are the on-disk field names."""

    name: str
    role: str
    company: str = "Unknown"
    location: str = ""
    canonical_url: str = Field(
        alias="canonicalUrl",
        validation_alias=AliasChoices("canonicalUrl", "canonical_url", "linkedinUrl"),
    )
    snippet: str = ""
    rich_snippet: str = Field(
        default="",
        alias="richSnippet",
        validation_alias=AliasChoices("richSnippet", "rich_snippet", "htmlSnippet"),
    )
    image_url: str | None = Field(default=None, alias="imageUrl")
    confidence: Confidence
    matched_topics: List[str] = Field(default_factory=list, alias="matchedTopics")
    query_used: str = Field(default="", alias="queryUsed")
    discovered_at: str = Field(default_factory=utc_now_iso, alias="discoveredAt")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("canonical_url")
    @classmethod
    def canonicalize_url(cls, v: str) -> str:
        # Older files stored raw www/country-subdomain links
        return normalize_profile_url(v) or v.strip()

    @property
    def has_topic_match(self) -> bool:
        return bool(self.matched_topics)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Lead":
        return cls.model_validate(record)
