"""Shared constants: user agents, timeouts, portal names and source pacing."""

DEFAULT_UA = "litsearch/0.1 (+https://github.com/litsearch/litsearch)"
PDF_UA = "litsearch-pdf/0.1"
DEFAULT_TIMEOUT_SEC = 30
MAX_RETRIES = 3

# Portal descriptions; "Unknown" is the sentinel for unidentified sources
PORTAL_PUBMED = "PubMed"
PORTAL_ARXIV = "ArXiv"
PORTAL_ZENODO = "Zenodo"
PORTAL_SCOPUS = "Scopus"
PORTAL_UNKNOWN = "Unknown"
DEFAULT_PORTALS = [PORTAL_PUBMED, PORTAL_ARXIV, PORTAL_ZENODO, PORTAL_SCOPUS, PORTAL_UNKNOWN]

# Delay between page/detail requests, in seconds
PUBMED_DELAY_SEC = 0.15
ARXIV_DELAY_SEC = 0.5
ZENODO_DELAY_SEC = 1.0
SCOPUS_DELAY_SEC = 0.12

# Orchestrator retry policy
SEARCH_MAX_ATTEMPTS = 3
SEARCH_INITIAL_BACKOFF_SEC = 1.0

# max_results is clamped to this range before it becomes the adapter batch size
MIN_BATCH_SIZE = 10
MAX_BATCH_SIZE = 10000
