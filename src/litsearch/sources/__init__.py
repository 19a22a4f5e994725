"""Source-specific adapters for the bibliographic APIs we aggregate.

Each source has its own package with an ``adapter`` (paging, pacing, error
policy) and a ``mapper`` (response shape -> record fields).
"""

from .arxiv import ArxivAdapter
from .base import SearchContext, SourceAdapter
from .pubmed import PubMedAdapter
from .scopus import ScopusAdapter
from .zenodo import ZenodoAdapter

# config key -> adapter class
ADAPTERS = {
    "pubmed": PubMedAdapter,
    "arxiv": ArxivAdapter,
    "zenodo": ZenodoAdapter,
    "scopus": ScopusAdapter,
}

__all__ = [
    "ADAPTERS",
    "ArxivAdapter",
    "PubMedAdapter",
    "ScopusAdapter",
    "SearchContext",
    "SourceAdapter",
    "ZenodoAdapter",
]
