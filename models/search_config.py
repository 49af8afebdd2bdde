from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class TargetCompany(BaseModel):
    name: str
    priority: int = 0
    notes: str | None = None

    model_config = ConfigDict(extra="ignore")


class CompaniesConfig(BaseModel):
    """Target list file shape."""

    description: str | None = None
    last_updated: str | None = Field(default=None, alias="lastUpdated")
    companies: List[TargetCompany]

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SearchKeywords(BaseModel):
    """Keyword configuration file shape: topics drive both querying and filtering."""

    description: str | None = None
    topics: List[str]
    roles: List[str] = Field(default_factory=list)
    exclusions: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")
