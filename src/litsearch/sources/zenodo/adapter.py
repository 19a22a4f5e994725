"""Zenodo adapter: paged JSON search over the records API.

Only English records with a usable description and a publication date on or
after the start year are kept. Zenodo rate limits are strict for
authenticated clients, so pages are fetched one second apart.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from ...constants import PORTAL_ZENODO, ZENODO_DELAY_SEC
from ..base import SearchContext, SourceAdapter
from .mapper import ENGLISH, is_usable_abstract, map_zenodo_hit

logger = logging.getLogger(__name__)

ZENODO_BASE = "https://zenodo.org/api/records"
MAX_PAGE_SIZE = 100


class ZenodoAdapter(SourceAdapter):
    source_name = PORTAL_ZENODO
    delay_sec = ZENODO_DELAY_SEC

    def __init__(self, portal_resolver, api_key: Optional[str] = None, base_url: str = ZENODO_BASE, **kwargs) -> None:
        if not api_key:
            raise ValueError("Zenodo API key is missing (sources.zenodo.api_key or ZENODO_API_KEY)")
        self.api_key = api_key
        self.base_url = base_url
        super().__init__(portal_resolver, **kwargs)

    def default_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "Accept": "application/json"}

    def _collect(self, ctx: SearchContext) -> None:
        page = 1
        page_size = min(ctx.batch_size, MAX_PAGE_SIZE)
        discarded = {"language": 0, "date": 0, "abstract": 0}
        processed = 0

        while not ctx.full and not ctx.cancelled:
            try:
                resp = self.http.get(self.base_url, params={"q": ctx.query, "size": page_size, "page": page})
                resp.raise_for_status()
                data = resp.json()
            except Exception as e:
                logger.error(f"Zenodo: HTTP request error at page {page}: {e}")
                break

            hits = (data.get("hits") or {}).get("hits") or []
            if not hits:
                logger.info(f"Zenodo: no more records at page {page}.")
                break
            logger.info(f"Zenodo: API returned {len(hits)} results for page {page}.")

            for hit in hits:
                if ctx.cancelled or ctx.full:
                    break
                processed += 1
                try:
                    if not hit.get("metadata"):
                        continue
                    fields = map_zenodo_hit(hit)
                    if fields["language"] not in ENGLISH:
                        discarded["language"] += 1
                        continue
                    if fields["year"] is None or ctx.too_old(fields["year"]):
                        discarded["date"] += 1
                        continue
                    if not is_usable_abstract(fields["abstract"]):
                        discarded["abstract"] += 1
                        continue
                    pdf = self.pdf_fetcher.fetch(fields["pdf_url"], ctx.download_pdf)
                    ctx.results.append(self.build_record(ctx, fields, pdf))
                except Exception as e:
                    logger.error(f"Zenodo: error processing a record: {e}")

            if len(hits) < page_size:
                break
            page += 1
            self.pause()

        logger.info(f"Zenodo: valid publications collected: {len(ctx.results)} of {processed} processed")
        logger.info(
            f"Zenodo: discarded {discarded['language']} for language, {discarded['date']} for publication date, "
            f"{discarded['abstract']} for empty or invalid abstract."
        )
