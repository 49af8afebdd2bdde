from __future__ import annotations

from typing import List, Optional, Protocol, Type

from models.search_result import SearchItem


class SearchProviderError(RuntimeError):
    """A search request failed. Subclasses tell the run whether to keep going."""

    halts_run: bool = False

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransportError(SearchProviderError):
    """Network/HTTP failure for one query; the run moves on to the next one."""


class QuotaExceeded(SearchProviderError):
    """Daily/rate quota exhausted; no further queries this run."""

    halts_run = True


class AccessBlocked(SearchProviderError):
    """Anti-automation challenge or access denial; no further queries this run."""

    halts_run = True


_QUOTA_MARKERS = (
    "quota",
    "ratelimitexceeded",
    "rate limit",
    "dailylimitexceeded",
    "userratelimitexceeded",
    "too many requests",
    "429",
)

_BLOCKED_MARKERS = (
    "unusual traffic",
    "captcha",
    "/sorry/",
    "automated queries",
    "access denied",
)


def classify_provider_error(status_code: Optional[int] = None, message: Optional[str] = None) -> Type[SearchProviderError]:
    """Best-effort mapping of a provider status/message to an error class.

    Errs on the side of halting: any quota or blocking hint wins over a
    generic transport classification.
    """
    text = (message or "").lower()
    if status_code == 429 or any(marker in text for marker in _QUOTA_MARKERS):
        return QuotaExceeded
    if any(marker in text for marker in _BLOCKED_MARKERS):
        return AccessBlocked
    return TransportError


def ensure_classified(error: Exception) -> SearchProviderError:
    """Return a classified error, re-inspecting generic ones by their message."""
    if isinstance(error, (QuotaExceeded, AccessBlocked)):
        return error
    status_code = getattr(error, "status_code", None)
    error_cls = classify_provider_error(status_code, str(error))
    if isinstance(error, error_cls):
        return error
    return error_cls(str(error), status_code=status_code)


class SearchProvider(Protocol):
    source_name: str

    def search(self, query: str) -> List[SearchItem]:
        ...
