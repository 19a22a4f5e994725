"""PubMed adapter: two-step E-utilities protocol.

1. ``esearch`` (JSON) pages through matching PMIDs with ``retstart`` offsets.
2. ``efetch`` (XML) returns article metadata for batches of 200 PMIDs.

Articles deposited in PMC get a landing page that is inspected for a direct
PDF link. NCBI allows ~10 req/sec with an API key; we stay well below that.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ...constants import PORTAL_PUBMED, PUBMED_DELAY_SEC
from ..base import SearchContext, SourceAdapter
from .mapper import map_pubmed_article, parse_efetch, pmc_landing_url

logger = logging.getLogger(__name__)

PUBMED_BASE = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/"
FETCH_BATCH_SIZE = 200


class PubMedAdapter(SourceAdapter):
    source_name = PORTAL_PUBMED
    delay_sec = PUBMED_DELAY_SEC

    def __init__(self, portal_resolver, api_key: Optional[str] = None, base_url: str = PUBMED_BASE, **kwargs) -> None:
        if not api_key:
            raise ValueError("Missing PubMed API key (sources.pubmed.api_key or PUBMED_API_KEY)")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/") + "/"
        super().__init__(portal_resolver, **kwargs)

    def build_term(self, query: str, start_year: Optional[int]) -> str:
        term = f"{query} AND eng[Language]"
        if start_year:
            term += f" AND {start_year}:3000[dp]"
        return term

    def _search_ids(self, ctx: SearchContext) -> List[str]:
        ids: List[str] = []
        start = 0
        params: Dict[str, object] = {
            "db": "pubmed",
            "term": self.build_term(ctx.query, ctx.start_year),
            "retmode": "json",
            "retmax": ctx.batch_size,
            "sort": "relevance",
            "api_key": self.api_key,
        }
        while len(ids) < ctx.batch_size and not ctx.cancelled:
            try:
                resp = self.http.get(self.base_url + "esearch.fcgi", params={**params, "retstart": start})
                resp.raise_for_status()
                data = resp.json()
            except Exception as e:
                logger.error(f"PubMed: esearch failed at retstart={start}: {e}")
                break

            result = data.get("esearchresult") or {}
            page = result.get("idlist") or []
            if not page:
                logger.info("PubMed: no more ids from esearch")
                break
            ids.extend(str(i) for i in page)

            total = int(result.get("count") or 0)
            start += ctx.batch_size
            if start >= total:
                break
            self.pause()
        return ids[: ctx.batch_size]

    def _collect(self, ctx: SearchContext) -> None:
        ids = self._search_ids(ctx)
        logger.info(f"PubMed: esearch returned {len(ids)} ids")

        for i in range(0, len(ids), FETCH_BATCH_SIZE):
            if ctx.cancelled or ctx.full:
                break
            batch = ids[i:i + FETCH_BATCH_SIZE]
            try:
                resp = self.http.get(
                    self.base_url + "efetch.fcgi",
                    params={"db": "pubmed", "id": ",".join(batch), "retmode": "xml", "api_key": self.api_key},
                )
                resp.raise_for_status()
                if not resp.text.strip():
                    logger.warning("PubMed: empty efetch response, skipping batch")
                    continue
                articles = parse_efetch(resp.text)
            except Exception as e:
                logger.error(f"PubMed: efetch failed for batch starting at {i}: {e}")
                break

            for article in articles:
                if ctx.cancelled or ctx.full:
                    break
                try:
                    fields = map_pubmed_article(article)
                    if ctx.too_old(fields["year"]):
                        logger.debug(f"PubMed: skipping publication from year {fields['year']} (below start year)")
                        continue
                    pdf = self.pdf_fetcher.from_landing_page(pmc_landing_url(fields["pmcid"]), ctx.download_pdf)
                    ctx.results.append(self.build_record(ctx, fields, pdf))
                except Exception as e:
                    logger.error(f"PubMed: error processing article: {e}")
                    continue
                self.pause()
