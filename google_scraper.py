"""
HTML results-page search provider.

Fetches a Google results page and pulls LinkedIn profile results out of the
markup. Paced more slowly than the API provider by default.
"""
import logging
import re
import time
from typing import Callable, List, Optional
from urllib.parse import parse_qs, urlparse

import requests
from bs4 import BeautifulSoup

from config.settings import Settings, get_settings
from models.search_result import SearchItem
from sources.base import AccessBlocked, SearchProviderError, TransportError, classify_provider_error

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

SNIPPET_SELECTORS = "div[data-sncf], div.VwiC3b, span.aCOpRe, div[style*='-webkit-line-clamp']"


def _clean_text(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip()


def _unwrap_link(href: str) -> str:
    """Resolve Google's /url?q=... redirect wrappers to the target URL."""
    parsed = urlparse(href)
    if parsed.path == "/url" and (not parsed.netloc or "google." in parsed.netloc):
        params = parse_qs(parsed.query)
        target = params.get("q") or params.get("url")
        if target:
            return target[0]
    return href


def looks_blocked(html_text: str, final_url: str = "") -> bool:
    low = html_text.lower()
    return "/sorry/" in final_url or "unusual traffic" in low or "captcha" in low


def parse_results_page(html_text: str, profile_marker: str = "linkedin.com/in/") -> List[SearchItem]:
    """Extract profile results from a results page, one item per distinct link."""
    soup = BeautifulSoup(html_text, "html.parser")
    items: List[SearchItem] = []
    seen = set()
    for anchor in soup.find_all("a", href=True):
        link = _unwrap_link(anchor["href"])
        if profile_marker not in link.lower() or link in seen:
            continue
        seen.add(link)

        container = anchor.find_parent("div", class_="g") or anchor.find_parent("div", attrs={"data-hveid": True})
        if container is None:
            container = anchor.parent

        h3 = anchor.find("h3") or (container.find("h3") if container else None)
        title = _clean_text(h3.get_text(" ")) if h3 else _clean_text(anchor.get_text(" ") or anchor.get("aria-label") or "")

        snippet = ""
        snippet_el = container.select_one(SNIPPET_SELECTORS) if container else None
        if snippet_el is not None:
            snippet = _clean_text(snippet_el.get_text(" "))
        elif container is not None:
            # Longest nearby text block that is not a URL
            for el in container.find_all(["span", "div"]):
                text = _clean_text(el.get_text(" "))
                if len(snippet) < len(text) < 500 and "http" not in text and text != title:
                    snippet = text

        if title or snippet:
            items.append(SearchItem(title=title or link, link=link, snippet=snippet, rich_snippet=snippet))
    return items


class GoogleScraper:
    """Results-page provider: one page per query, linear backoff on transport errors."""

    source_name = "google_scraper"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        max_retries: int = 2,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or get_settings()
        self.max_retries = max(1, max_retries)
        self.pages_fetched = 0
        self._sleep = sleep

    def fetch_page(self, query: str) -> str:
        params = {"q": query, "num": 20, "hl": "en"}
        try:
            response = requests.get(
                self.settings.google_web_search_url,
                params=params,
                headers=DEFAULT_HEADERS,
                timeout=self.settings.request_timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Scraping failed: {e}")
        self.pages_fetched += 1

        final_url = getattr(response, "url", "") or ""
        if response.status_code == 429 or looks_blocked(response.text, final_url):
            raise AccessBlocked("Google CAPTCHA detected - try again later", status_code=response.status_code)
        if response.status_code != 200:
            error_cls = classify_provider_error(response.status_code, response.text[:500])
            raise error_cls(f"Results page error ({response.status_code})", status_code=response.status_code)
        return response.text

    def search(self, query: str) -> List[SearchItem]:
        last_error: Optional[SearchProviderError] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                html_text = self.fetch_page(query)
            except SearchProviderError as e:
                if e.halts_run:
                    raise
                last_error = e
                logger.warning(f"Scrape attempt {attempt} failed: {e}",
                               extra={"step": "search", "status": "retry", "provider": self.source_name})
                if attempt < self.max_retries:
                    self._sleep(attempt * 5)
                continue
            items = parse_results_page(html_text, self.settings.profile_url_marker)
            logger.info(f"Extracted {len(items)} LinkedIn results",
                        extra={"step": "search", "status": "ok", "provider": self.source_name})
            return items
        raise last_error or TransportError("Scraping failed after retries")
