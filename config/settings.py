from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Pacing defaults per search provider. Browser-style page fetches are paced
# more conservatively than the JSON API.
DEFAULT_QUERY_DELAYS: dict[str, float] = {
    "google_cse": 2.5,
    "google_scraper": 10.0,
}


@dataclass(frozen=True)
class Settings:
    google_api_key: str | None
    google_cse_id: str | None
    google_search_url: str
    google_web_search_url: str

    search_provider: str  # google_cse | google_scraper
    query_delay_seconds: float | None
    max_queries_per_run: int
    max_retries: int
    request_timeout_seconds: int
    results_per_page: int

    # Extraction
    strict_topic_match: bool
    topic_batches: int

    # Config + persisted state
    targets_path: str
    keywords_path: str
    leads_path: str
    rejected_leads_path: str
    executed_queries_path: str
    csv_path: str
    store_backend: str  # json | sqlite
    db_path: str

    log_level: str
    run_env: str

    # X-Ray scope and title structure of the target site
    site_scope: str = "site:linkedin.com/in"
    profile_url_marker: str = "linkedin.com/in/"
    title_brand: str = "LinkedIn"

    def delay_for(self, provider: str | None = None) -> float:
        """Pacing interval between queries for the given provider."""
        if self.query_delay_seconds is not None:
            return self.query_delay_seconds
        return DEFAULT_QUERY_DELAYS.get(provider or self.search_provider, 2.5)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    delay_raw = os.getenv("QUERY_DELAY_SECONDS")
    store_backend = os.getenv("STORE_BACKEND", "json").lower()
    if store_backend not in ("json", "sqlite"):
        raise RuntimeError(f"STORE_BACKEND must be 'json' or 'sqlite', got {store_backend!r}")
    topic_batches = int(os.getenv("TOPIC_BATCHES", "2"))
    if topic_batches < 2:
        raise RuntimeError("TOPIC_BATCHES must be at least 2")
    return Settings(
        google_api_key=os.getenv("GOOGLE_API_KEY"),
        google_cse_id=os.getenv("GOOGLE_CSE_ID"),
        google_search_url=os.getenv("GOOGLE_SEARCH_URL", "https://www.googleapis.com/customsearch/v1"),
        google_web_search_url=os.getenv("GOOGLE_WEB_SEARCH_URL", "https://www.google.com/search"),
        search_provider=os.getenv("SEARCH_PROVIDER", "google_cse"),
        query_delay_seconds=float(delay_raw) if delay_raw else None,
        max_queries_per_run=int(os.getenv("MAX_QUERIES_PER_RUN", "20")),
        max_retries=int(os.getenv("MAX_RETRIES", "3")),
        request_timeout_seconds=int(os.getenv("REQUEST_TIMEOUT", "30")),
        results_per_page=int(os.getenv("RESULTS_PER_PAGE", "10")),
        strict_topic_match=_as_bool(os.getenv("STRICT_TOPIC_MATCH"), default=True),
        topic_batches=topic_batches,
        targets_path=os.getenv("TARGETS_PATH", "data/target-companies.json"),
        keywords_path=os.getenv("KEYWORDS_PATH", "data/search-keywords.json"),
        leads_path=os.getenv("LEADS_PATH", "output/leads.json"),
        rejected_leads_path=os.getenv("REJECTED_LEADS_PATH", "output/leads-rejected.json"),
        executed_queries_path=os.getenv("EXECUTED_QUERIES_PATH", "data/executed-queries.json"),
        csv_path=os.getenv("CSV_PATH", "output/leads.csv"),
        store_backend=store_backend,
        db_path=os.getenv("DB_PATH", "leads.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        run_env=os.getenv("RUN_ENV", "local"),
    )
