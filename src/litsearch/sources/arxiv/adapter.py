"""ArXiv adapter: paged Atom feed from the arXiv query API.

The feed is sorted by submission date (newest first) and paged with
``start``/``max_results``. arXiv asks clients to wait between calls.
"""

from __future__ import annotations

import logging

import feedparser

from ...constants import ARXIV_DELAY_SEC, PORTAL_ARXIV
from ..base import SearchContext, SourceAdapter
from .mapper import map_arxiv_entry

logger = logging.getLogger(__name__)

ARXIV_API = "http://export.arxiv.org/api/query"
MAX_PAGE_SIZE = 200


class ArxivAdapter(SourceAdapter):
    source_name = PORTAL_ARXIV
    delay_sec = ARXIV_DELAY_SEC

    def __init__(self, portal_resolver, base_url: str = ARXIV_API, **kwargs) -> None:
        self.base_url = base_url
        super().__init__(portal_resolver, **kwargs)

    def _collect(self, ctx: SearchContext) -> None:
        start = 0
        page_size = min(ctx.batch_size, MAX_PAGE_SIZE)

        while not ctx.full and not ctx.cancelled:
            try:
                resp = self.http.get(
                    self.base_url,
                    params={
                        "search_query": ctx.query,
                        "start": start,
                        "max_results": page_size,
                        "sortBy": "submittedDate",
                        "sortOrder": "descending",
                    },
                    headers={"Accept": "application/atom+xml"},
                )
                resp.raise_for_status()
                if not resp.text.strip():
                    logger.warning("ArXiv: received empty response.")
                    break
                feed = feedparser.parse(resp.text)
            except Exception as e:
                logger.error(f"ArXiv: HTTP request error at start={start}: {e}")
                break

            entries = feed.entries
            if not entries:
                logger.info("ArXiv: no entries returned.")
                break

            older = 0
            for entry in entries:
                if ctx.cancelled or ctx.full:
                    break
                try:
                    fields = map_arxiv_entry(entry)
                    if fields["year"] is None or ctx.too_old(fields["year"]):
                        older += 1
                        logger.debug(f"ArXiv: skipping article from year {fields['year']}")
                        continue
                    pdf = self.pdf_fetcher.fetch(fields["pdf_url"], ctx.download_pdf)
                    ctx.results.append(self.build_record(ctx, fields, pdf))
                except Exception as e:
                    logger.error(f"ArXiv: error processing article: {e}")

            # newest first: a page with nothing recent enough ends the walk
            if older == len(entries):
                logger.info("ArXiv: reached entries older than the start year")
                break
            if len(entries) < page_size:
                break
            start += page_size
            self.pause()
