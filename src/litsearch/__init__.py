"""litsearch: multi-source bibliographic search with merge, enrichment and identity-resolving storage."""

__version__ = "0.1.0"
