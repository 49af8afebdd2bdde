"""
Google Custom Search API integration for LinkedIn profile searches.
"""
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from config.settings import Settings, get_settings
from models.search_result import SearchItem
from sources.base import QuotaExceeded, SearchProviderError, TransportError, classify_provider_error

logger = logging.getLogger(__name__)


class GoogleSearcher:
    """Runs X-Ray queries against the Google Custom Search JSON API."""

    source_name = "google_cse"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        max_pages: int = 1,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or get_settings()
        self.api_key = self.settings.google_api_key
        self.cse_id = self.settings.google_cse_id
        self.max_pages = max(1, max_pages)
        self.api_calls_made = 0
        self._sleep = sleep

        if not self.api_key or not self.cse_id:
            raise ValueError("Google API key and Custom Search Engine ID must be set in .env file")

    def _raise_for_error(self, status_code: int, message: str) -> None:
        error_cls = classify_provider_error(status_code, message)
        raise error_cls(f"Google API error ({status_code}): {message}", status_code=status_code)

    def search_single_page(self, query: str, start_index: int = 1) -> Dict[str, Any]:
        """Execute a single Custom Search request, retrying transport failures only."""
        params = {
            'key': self.api_key,
            'cx': self.cse_id,
            'q': query,
            'start': start_index,
            'num': self.settings.results_per_page,
        }

        last_error: Optional[SearchProviderError] = None
        for attempt in range(self.settings.max_retries):
            try:
                logger.info(f"Making API call {self.api_calls_made + 1}, start index: {start_index}",
                            extra={"step": "search", "provider": self.source_name})
                response = requests.get(
                    self.settings.google_search_url,
                    params=params,
                    timeout=self.settings.request_timeout_seconds,
                )
                self.api_calls_made += 1
            except requests.exceptions.RequestException as e:
                logger.error(f"Request error on attempt {attempt + 1}: {e}",
                             extra={"step": "search", "status": "retry", "error": type(e).__name__})
                last_error = TransportError(f"Request failed: {e}")
            else:
                if response.status_code == 200:
                    data = response.json()
                    # API-level errors can arrive inside a 200 body
                    error = data.get('error') if isinstance(data, dict) else None
                    if error:
                        self._raise_for_error(int(error.get('code') or 200), str(error.get('message') or error))
                    return data
                if response.status_code == 429:
                    logger.warning("API rate limit exceeded", extra={"step": "search", "status": "quota"})
                    raise QuotaExceeded(f"Google API error (429): {response.text}", status_code=429)
                if response.status_code < 500:
                    self._raise_for_error(response.status_code, response.text)
                logger.error(f"API request failed with status {response.status_code}: {response.text}",
                             extra={"step": "search", "status": "retry"})
                last_error = classify_provider_error(response.status_code, response.text)(
                    f"Google API error ({response.status_code}): {response.text}",
                    status_code=response.status_code,
                )
                if last_error.halts_run:
                    raise last_error

            if attempt < self.settings.max_retries - 1:
                self._sleep(2 ** attempt)  # Exponential backoff

        raise last_error or TransportError("Google API request failed")

    def search(self, query: str) -> List[SearchItem]:
        """Fetch up to max_pages of results for one query."""
        items: List[SearchItem] = []
        start_index = 1
        for page in range(self.max_pages):
            if page > 0:
                self._sleep(self.settings.delay_for(self.source_name))
            data = self.search_single_page(query, start_index)
            raw_items = data.get('items') or []
            items.extend(SearchItem.from_cse_item(item) for item in raw_items)
            if not raw_items:
                break

            total_results = int((data.get('searchInformation') or {}).get('totalResults') or 0)
            if start_index + self.settings.results_per_page > total_results:
                break
            start_index += self.settings.results_per_page

        logger.info(f"Search returned {len(items)} items, API calls made: {self.api_calls_made}",
                    extra={"step": "search", "status": "ok", "provider": self.source_name})
        return items

    def get_api_usage(self) -> Dict:
        """Return API usage statistics (free tier is 100 queries/day)."""
        return {
            'api_calls_made': self.api_calls_made,
            'estimated_daily_limit_used': f"{(self.api_calls_made / 100) * 100:.1f}%",
        }
