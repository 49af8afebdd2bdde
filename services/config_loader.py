from __future__ import annotations

import json
from pathlib import Path
from typing import Tuple

from pydantic import ValidationError

from models.search_config import CompaniesConfig, SearchKeywords


class ConfigError(RuntimeError):
    """Target or keyword configuration is missing or malformed."""


def _read(path: str | Path, label: str) -> object:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"{label} file not found: {p}")
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read {label} file {p}: {e}") from e


def _reject_quotes(values, label: str) -> None:
    for value in values:
        if '"' in value:
            raise ConfigError(f"{label} may not contain double quotes: {value!r}")


def load_targets(path: str | Path) -> CompaniesConfig:
    data = _read(path, "Companies")
    # A bare list of companies is accepted as shorthand
    if isinstance(data, list):
        data = {"companies": data}
    try:
        config = CompaniesConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid companies file {path}: {e}") from e
    _reject_quotes([c.name for c in config.companies], "Company name")
    return config


def load_keywords(path: str | Path) -> SearchKeywords:
    data = _read(path, "Keywords")
    try:
        keywords = SearchKeywords.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid keywords file {path}: {e}") from e
    keywords.topics = [t.strip() for t in keywords.topics if t and t.strip()]
    keywords.roles = [r.strip() for r in keywords.roles if r and r.strip()]
    if not keywords.topics:
        raise ConfigError(f"Keywords file {path} must list at least one topic")
    _reject_quotes(keywords.topics, "Topic keyword")
    _reject_quotes(keywords.roles, "Role keyword")
    return keywords


def load_search_config(targets_path: str | Path, keywords_path: str | Path) -> Tuple[CompaniesConfig, SearchKeywords]:
    return load_targets(targets_path), load_keywords(keywords_path)
