"""Search run entry points: run a search end to end, or forget one.

`run_search` is the whole aggregation pipeline:

    sources (concurrent, retried) -> merge by DOI -> clean
    -> journal categories -> identity-resolving upsert

Every stage logs to the run log returned to the caller; an unexpected error
ends the run with whatever was accumulated so far.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..constants import MAX_BATCH_SIZE, MIN_BATCH_SIZE
from ..enrich import attach_categories, build_journal_index
from ..records import PublicationRecord
from ..store import searches
from ..store.db import seed_portals
from ..store.deduplication import clean
from ..store.upsert import UpsertReport, upsert_publications
from ..utils.runlog import RunLog
from .orchestrator import RetryingOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class SearchOutcome:
    search_id: Optional[int]
    publications: List[PublicationRecord] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)
    report: UpsertReport = field(default_factory=UpsertReport)


def clamp_batch_size(max_results: int) -> int:
    return max(MIN_BATCH_SIZE, min(MAX_BATCH_SIZE, int(max_results)))


def format_publications(records: Iterable[PublicationRecord]) -> List[dict]:
    """JSON-ready shape of a run result."""
    return [r.to_dict() for r in records]


def run_search(
    session_factory: Callable[[], Session],
    adapters: Sequence,
    query: str,
    start_year: Optional[int],
    max_results: int,
    category_paths: Sequence = (),
    cancel: Optional[threading.Event] = None,
    download_pdf: bool = False,
    orchestrator: Optional[RetryingOrchestrator] = None,
) -> SearchOutcome:
    """Run one search across all `adapters` and persist the cleaned result.

    Args:
        session_factory: Callable returning a new SQLAlchemy session
        adapters: Source adapters to query concurrently
        query: Free-text query passed to every source
        start_year: Earliest publication year, or None
        max_results: Per-source result cap, clamped to [10, 10000]
        category_paths: Category files or folders used for enrichment
        cancel: Event that stops paging and further retries when set

    Returns:
        SearchOutcome with the search id, persisted records, run log and
        per-record upsert report
    """
    runlog = RunLog()
    outcome = SearchOutcome(search_id=None)
    batch_size = clamp_batch_size(max_results)
    session = session_factory()
    try:
        seed_portals(session)
        outcome.search_id = searches.create_search(session, query, start_year)
        runlog.info(f"Search {outcome.search_id} created for query: \"{query}\" (start year: {start_year})")

        orchestrator = orchestrator or RetryingOrchestrator(adapters)
        raw = orchestrator.run(query, start_year, download_pdf, batch_size, cancel, runlog)
        outcome.publications = raw
        runlog.info(f"Publications retrieved from all sources: {len(raw)}")

        cleaned = clean(raw)
        outcome.publications = cleaned
        runlog.info(f"Publications after merge and cleaning: {len(cleaned)}")

        if category_paths:
            try:
                index = build_journal_index(category_paths)
                attach_categories(cleaned, index)
                runlog.info(f"Journal index built with {len(index)} ISSNs")
            except Exception as e:
                logger.error(f"Category enrichment failed: {e}")
                runlog.error(f"Error during category enrichment: {e}")

        outcome.report = upsert_publications(session, cleaned, outcome.search_id)
        outcome.publications = [r for r in cleaned if r.id is not None]
        runlog.info(
            f"Publications stored: {len(outcome.report.succeeded)} "
            f"(failed: {len(outcome.report.failed)})"
        )
    except Exception as e:
        logger.exception("Search run failed")
        runlog.error(f"Unexpected error during search: {e}")
    finally:
        session.close()
    outcome.logs = runlog.lines
    return outcome


def forget_search(session_factory: Callable[[], Session], search_id: int) -> searches.ForgetOutcome:
    session = session_factory()
    try:
        return searches.forget_search(session, search_id)
    finally:
        session.close()
