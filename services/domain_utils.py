from __future__ import annotations

import unicodedata
from typing import Optional
from urllib.parse import unquote, urlparse

DEFAULT_PROFILE_MARKER = "linkedin.com/in/"


def is_profile_url(link: Optional[str], marker: str = DEFAULT_PROFILE_MARKER) -> bool:
    """True when the link points at an individual profile page."""
    if not link:
        return False
    return marker.lower() in link.lower()


def normalize_profile_url(url: Optional[str]) -> Optional[str]:
    """Canonical form of a LinkedIn profile URL: https://linkedin.com/in/{slug}.

    Drops query string, fragment, www/country subdomains and trailing locale
    segments; the slug is percent-decoded, NFKC-normalized and lowercased.
    Returns None for anything that is not a profile URL.
    """
    if not url:
        return None
    u = urlparse(url.strip())
    host = (u.netloc or "").lower()
    if not host:
        return None
    if host != "linkedin.com" and not host.endswith(".linkedin.com"):
        return None
    path = (u.path or "").rstrip("/")
    parts = [p for p in path.split("/") if p]
    if len(parts) < 2 or parts[0] != "in":
        return None
    slug = unicodedata.normalize("NFKC", unquote(parts[1])).strip().lower()
    # Invisible characters occasionally present in scraped links
    slug = slug.replace("\u200b", "").replace("\u200c", "").replace("\u200d", "")
    if not slug:
        return None
    return f"https://linkedin.com/in/{slug}"
