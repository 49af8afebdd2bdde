from .repos import LeadStorePort, QueryLedgerPort
from .source import SearchProviderPort

__all__ = [
    "LeadStorePort",
    "QueryLedgerPort",
    "SearchProviderPort",
]
