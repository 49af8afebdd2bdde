"""
Turns raw search results into structured LinkedIn leads.

Title parsing is an ordered chain of matchers (first hit wins); company and
location come from ordered snippet strategies that fall through to a default.
"""
import html
import logging
import re
from typing import Callable, Dict, List, NamedTuple, Optional, Pattern, Sequence

from models.lead import Confidence, Lead, utc_now_iso
from models.search_result import SearchItem
from services.domain_utils import DEFAULT_PROFILE_MARKER, is_profile_url, normalize_profile_url
from services.topic_filter import find_matched_topics

logger = logging.getLogger(__name__)

UNKNOWN_COMPANY = "Unknown"
TRUNCATION_MARKERS = ("...", "…")

# Title segment separator: a dash with whitespace on both sides, so hyphenated
# names ("Mary-Jane") stay intact.
_SEP = r"\s+[-–—]\s+"


def clean_text(text: Optional[str]) -> str:
    """Decode entities, collapse whitespace, drop ellipsis runs, trim."""
    if not text:
        return ""
    cleaned = html.unescape(text)
    cleaned = re.sub(r"\s+", " ", cleaned)
    cleaned = re.sub(r"\.{2,}|…", "", cleaned)
    return cleaned.strip()


def is_truncated(title: str) -> bool:
    return any(marker in title for marker in TRUNCATION_MARKERS)


# --- Title matchers -------------------------------------------------------

class TitleMatch(NamedTuple):
    name: str
    role: str
    company: Optional[str]
    tier: str  # primary | truncated | fallback


TitleMatcher = Callable[[str], Optional[TitleMatch]]


def _brand_suffix(brand: str) -> str:
    return rf"\s*\|\s*{re.escape(brand)}\s*$"


def make_primary_matcher(brand: str = "LinkedIn") -> TitleMatcher:
    """'Name - Role - Company | Brand'."""
    pattern = re.compile(rf"^(.+?){_SEP}(.+?){_SEP}(.+?){_brand_suffix(brand)}", re.IGNORECASE)

    def match(title: str) -> Optional[TitleMatch]:
        m = pattern.match(title)
        if not m:
            return None
        name, role, company = m.groups()
        # Anything after a stray pipe in the company segment is not company text
        company = re.sub(r"\s*\|.*$", "", company)
        return TitleMatch(name, role, company, "primary")

    return match


def make_truncated_matcher(brand: str = "LinkedIn") -> TitleMatcher:
    """'Name - Role... | Brand': the title was cut before a company segment could appear."""
    pattern = re.compile(
        rf"^(.+?){_SEP}(.+?(?:\.{{3,}}|…)){_brand_suffix(brand)}", re.IGNORECASE
    )

    def match(title: str) -> Optional[TitleMatch]:
        m = pattern.match(title)
        if not m:
            return None
        name, role = m.groups()
        return TitleMatch(name, role, None, "truncated")

    return match


def make_fallback_matcher(brand: str = "LinkedIn") -> TitleMatcher:
    """'Name - Role | Brand' with no company segment."""
    pattern = re.compile(rf"^(.+?){_SEP}(.+?){_brand_suffix(brand)}", re.IGNORECASE)

    def match(title: str) -> Optional[TitleMatch]:
        m = pattern.match(title)
        if not m:
            return None
        name, role = m.groups()
        return TitleMatch(name, role, None, "fallback")

    return match


def default_title_matchers(brand: str = "LinkedIn") -> List[TitleMatcher]:
    return [
        make_primary_matcher(brand),
        make_truncated_matcher(brand),
        make_fallback_matcher(brand),
    ]


def match_title(title: str, matchers: Sequence[TitleMatcher]) -> Optional[TitleMatch]:
    for matcher in matchers:
        result = matcher(title)
        if result is not None:
            return result
    return None


def confidence_for(match: TitleMatch, title: str) -> Confidence:
    if match.tier == "primary":
        return "low" if is_truncated(title) else "high"
    if match.tier == "truncated":
        return "low"
    return "medium"


# --- Snippet strategies ---------------------------------------------------

SnippetStrategy = Callable[[str], Optional[str]]

# A company name: capitalized tokens, optionally joined by "&", "and", "of",
# "for" or "de". Dots are only allowed inside a token ("Amazon.com", "S.A").
_UPPER = "A-ZÀ-ÖØ-Þ0-9"
_TOKEN = rf"[{_UPPER}](?:[\w&'’+-]|\.(?=\w))*"
_COMPANY = rf"{_TOKEN}(?:\s+(?:(?:&|and|of|for|de)\s+)?{_TOKEN})*"


def _regex_strategy(pattern: Pattern[str], min_len: int = 2, max_len: int = 100) -> SnippetStrategy:
    def strategy(text: str) -> Optional[str]:
        m = pattern.search(text)
        if not m:
            return None
        value = clean_text(m.group(1)).strip(" ,;:")
        if min_len <= len(value) <= max_len:
            return value
        return None

    return strategy


COMPANY_STRATEGIES: List[SnippetStrategy] = [
    # "... at Company"
    _regex_strategy(re.compile(rf"(?:^|\s)at\s+({_COMPANY})")),
    # "... @ Company" / "@Company"
    _regex_strategy(re.compile(rf"(?:^|\s)@\s*({_COMPANY})")),
    # "works at Company" / "Working at Company"
    _regex_strategy(re.compile(rf"(?i:works|working)\s+(?i:at|for)\s+({_COMPANY})")),
    # "Experience: Company · Education: ..."
    _regex_strategy(re.compile(r"(?:Experience|Berufserfahrung):\s*([^·•|\n]+)")),
]

COUNTRIES = (
    "Germany", "USA", "UK", "United States", "United Kingdom", "France", "Netherlands",
    "Switzerland", "Austria", "Spain", "Italy", "Canada", "Australia", "India",
    "Singapore", "Ireland", "Sweden", "Denmark", "Norway", "Finland", "Belgium",
    "Poland", "Czech Republic", "Israel",
)

LOCATION_STRATEGIES: List[SnippetStrategy] = [
    # Leading "Berlin, Germany · 500+ connections"
    _regex_strategy(re.compile(r"^([A-Z][A-Za-z\s,]+(?:Area|Region|County)?)\s*[·•|]")),
    # "Location: Munich, Bavaria · ..."
    _regex_strategy(
        re.compile(r"Location[:\s·]+([A-Z][A-Za-z\s,]+?)(?:\s*[·•|]|\s*$)", re.IGNORECASE)
    ),
    # "... Zurich, Switzerland ..."
    _regex_strategy(
        re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*,\s*(?:" + "|".join(COUNTRIES) + r"))\b")
    ),
    # "Greater Boston Area", "Rhine-Neckar Metropolitan Area"
    _regex_strategy(
        re.compile(r"\b((?:Greater\s+)?[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s+(?:Area|Metropolitan Area|Region))\b")
    ),
]


def first_match(strategies: Sequence[SnippetStrategy], text: Optional[str], default: str) -> str:
    if not text:
        return default
    for strategy in strategies:
        value = strategy(text)
        if value:
            return value
    return default


def extract_company_from_snippet(snippet: Optional[str]) -> str:
    return first_match(COMPANY_STRATEGIES, snippet, UNKNOWN_COMPANY)


def extract_location(snippet: Optional[str]) -> str:
    return first_match(LOCATION_STRATEGIES, snippet, "")


# --- Extractor ------------------------------------------------------------

class LeadExtractor:
    """Parses search items into leads and keeps per-run outcome counters."""

    def __init__(self, brand: str = "LinkedIn", profile_marker: str = DEFAULT_PROFILE_MARKER):
        self.profile_marker = profile_marker
        self.title_matchers = default_title_matchers(brand)
        self.extraction_stats: Dict[str, int] = {
            "parsed": 0,
            "not_profile": 0,
            "unparseable_title": 0,
        }

    def parse_one(self, item: SearchItem, query_used: str, topics: Sequence[str] = ()) -> Optional[Lead]:
        """Return a Lead for a profile result with a recognizable title, else None."""
        if not is_profile_url(item.link, self.profile_marker):
            self.extraction_stats["not_profile"] += 1
            logger.debug(f"Skipping non-profile link: {item.link}", extra={"step": "parse", "status": "skip"})
            return None

        title = (item.title or "").strip()
        match = match_title(title, self.title_matchers)
        if match is None:
            self.extraction_stats["unparseable_title"] += 1
            logger.debug(f"Unrecognized title format: {title!r}", extra={"step": "parse", "status": "skip"})
            return None

        snippet = item.snippet or ""
        company = clean_text(match.company) if match.company else extract_company_from_snippet(snippet)
        self.extraction_stats["parsed"] += 1
        return Lead(
            name=clean_text(match.name),
            role=clean_text(match.role),
            company=company or UNKNOWN_COMPANY,
            location=extract_location(snippet),
            canonical_url=normalize_profile_url(item.link) or item.link.strip(),
            snippet=snippet,
            rich_snippet=item.rich_snippet or snippet,
            image_url=item.image_url,
            confidence=confidence_for(match, title),
            matched_topics=find_matched_topics(f"{title} {snippet}", topics),
            query_used=query_used,
            discovered_at=utc_now_iso(),
        )

    def parse_all(self, items: Sequence[SearchItem], query_used: str, topics: Sequence[str] = ()) -> List[Lead]:
        leads: List[Lead] = []
        for item in items:
            lead = self.parse_one(item, query_used, topics)
            if lead is not None:
                leads.append(lead)
        return leads

    @property
    def skipped(self) -> int:
        return self.extraction_stats["not_profile"] + self.extraction_stats["unparseable_title"]

    def get_extraction_stats(self) -> Dict[str, int]:
        return dict(self.extraction_stats)
