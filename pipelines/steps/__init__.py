# Namespace for pipeline steps
from .parse_results import ParseResults  # noqa: F401
from .filter_topics import FilterTopics  # noqa: F401
from .dedupe_leads import DedupeLeads  # noqa: F401
