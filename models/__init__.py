from .lead import Lead
from .search_result import SearchItem
from .search_config import CompaniesConfig, SearchKeywords, TargetCompany

__all__ = [
    "Lead",
    "SearchItem",
    "CompaniesConfig",
    "SearchKeywords",
    "TargetCompany",
]
