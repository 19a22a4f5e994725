"""Common base for source adapters.

Every adapter turns a query into a list of normalized `PublicationRecord`
objects. The base class owns the parts that are identical across sources:
portal resolution, the per-call author cache, pacing between requests,
cooperative cancellation and the "log and return what we have" policy for
fatal errors. Subclasses implement `_collect`, which pages through the
source and appends to `ctx.results`.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import requests

from ..fetch.pdf import PdfFetcher, PdfInfo
from ..records import PortalRef, PublicationRecord
from ..utils.http import session_with_retries
from ..utils.normalize import AuthorCache, normalize_issn

logger = logging.getLogger(__name__)


@dataclass
class SearchContext:
    query: str
    start_year: Optional[int]
    download_pdf: bool
    batch_size: int
    portal: PortalRef
    cancel: Optional[threading.Event] = None
    authors: AuthorCache = field(default_factory=AuthorCache)
    results: List[PublicationRecord] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.is_set()

    @property
    def full(self) -> bool:
        return len(self.results) >= self.batch_size

    def too_old(self, year: Optional[int]) -> bool:
        """True when the record's year is known and precedes the start year."""
        return bool(self.start_year) and year is not None and year < self.start_year


class SourceAdapter(ABC):
    """One external bibliographic source."""

    source_name: str = ""
    delay_sec: float = 0.0

    def __init__(
        self,
        portal_resolver,
        http: Optional[requests.Session] = None,
        pdf_fetcher: Optional[PdfFetcher] = None,
        sleep: Callable[[float], None] = time.sleep,
        timeout_sec: int = 30,
        user_agent: Optional[str] = None,
    ) -> None:
        self.portal_resolver = portal_resolver
        self.http = http or session_with_retries(
            user_agent=user_agent, timeout_sec=timeout_sec, headers=self.default_headers()
        )
        self.pdf_fetcher = pdf_fetcher or PdfFetcher()
        self._sleep = sleep

    def default_headers(self) -> Dict[str, str]:
        return {}

    def pause(self) -> None:
        if self.delay_sec > 0:
            self._sleep(self.delay_sec)

    def search(
        self,
        query: str,
        start_year: Optional[int],
        download_pdf: bool,
        batch_size: int,
        cancel: Optional[threading.Event] = None,
    ) -> List[PublicationRecord]:
        """Fetch up to `batch_size` normalized records; never raises on source errors."""
        logger.info(f'{self.source_name}: starting search with query: "{query}" and start year: {start_year}')
        ctx = SearchContext(
            query=query,
            start_year=start_year,
            download_pdf=download_pdf,
            batch_size=max(int(batch_size), 1),
            portal=self.portal_resolver.get_portal(self.source_name),
            cancel=cancel,
        )
        try:
            self._collect(ctx)
        except Exception as e:
            logger.error(f"{self.source_name}: unexpected error during search: {e}")
        if ctx.cancelled:
            logger.info(f"{self.source_name}: cancelled, returning {len(ctx.results)} partial results")
        results = ctx.results[: ctx.batch_size]
        logger.info(f"{self.source_name}: search completed. Publications found: {len(results)}")
        return results

    @abstractmethod
    def _collect(self, ctx: SearchContext) -> None:
        """Page through the source, appending records to `ctx.results`."""

    def build_record(self, ctx: SearchContext, fields: Dict[str, Any], pdf: PdfInfo) -> PublicationRecord:
        return PublicationRecord(
            doi=(fields.get("doi") or "").strip(),
            title=fields.get("title") or "",
            abstract=fields.get("abstract") or "",
            issn=normalize_issn(fields.get("issn")),
            pdf_url=pdf.pdf_url or "",
            pdf_text=pdf.text or "",
            pages=pdf.pages,
            year=fields.get("year"),
            month=fields.get("month"),
            day=fields.get("day"),
            portal=ctx.portal,
            authors=ctx.authors.collect(fields.get("authors") or []),
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.source_name}>"
