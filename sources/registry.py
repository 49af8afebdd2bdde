from __future__ import annotations

from typing import Any, Callable, Dict


_REGISTRY: Dict[str, Callable[..., Any]] = {}


def register(name: str, factory: Callable[..., Any]) -> None:
    _REGISTRY[name] = factory


def get_source(name: str, **kwargs: Any):
    if not _REGISTRY:
        _register_builtin()
    if name not in _REGISTRY:
        raise KeyError(f"Unknown search provider: {name}")
    return _REGISTRY[name](**kwargs)


def available_sources() -> Dict[str, Any]:
    if not _REGISTRY:
        _register_builtin()
    return dict(_REGISTRY)


def _register_builtin() -> None:
    # Imported lazily so tests can swap the registry without touching HTTP clients
    from google_scraper import GoogleScraper
    from google_searcher import GoogleSearcher

    register(GoogleSearcher.source_name, GoogleSearcher)
    register(GoogleScraper.source_name, GoogleScraper)
