"""Aggregation pipeline: orchestration plus the run/forget entry points."""

from .orchestrator import RetryingOrchestrator
from .run import SearchOutcome, clamp_batch_size, forget_search, format_publications, run_search
from ..store.searches import export_search, list_searches

__all__ = [
    "RetryingOrchestrator",
    "SearchOutcome",
    "clamp_batch_size",
    "export_search",
    "forget_search",
    "format_publications",
    "list_searches",
    "run_search",
]
