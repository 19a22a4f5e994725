"""Best-effort PDF enrichment for harvested records.

Three steps, each allowed to fail without affecting the record:
1. Resolve a landing page (PMC article page, DOI resolver) into a direct PDF
   link by looking for an ``<a href="...pdf">`` or a ``citation_pdf_url`` meta.
2. Download the PDF bytes.
3. Derive the page count (PyPDF2) and the plain text (pdfminer.six).

Any failure degrades to empty PDF fields: callers always get a `PdfInfo`.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup
from PyPDF2 import PdfReader
from pdfminer.high_level import extract_text

from ..constants import PDF_UA
from ..utils.http import session_with_retries

logger = logging.getLogger(__name__)

LANDING_TIMEOUT_SEC = 5
DOWNLOAD_TIMEOUT_SEC = 60


@dataclass
class PdfInfo:
    pdf_url: str = ""
    pages: Optional[str] = None
    text: str = ""


def find_pdf_link(html: str, base_url: str) -> Optional[str]:
    """Return the first PDF link found in a landing page, made absolute."""
    soup = BeautifulSoup(html, "html.parser")
    pdf_url = None
    for a in soup.find_all("a", href=True):
        if ".pdf" in a["href"]:
            pdf_url = a["href"]
            break
    if not pdf_url:
        meta = soup.find("meta", attrs={"name": lambda v: v and "citation_pdf_url" in v})
        content = (meta.get("content") or "") if meta else ""
        if content.endswith(".pdf"):
            pdf_url = content
    if pdf_url and not pdf_url.startswith("http"):
        pdf_url = urljoin(base_url, pdf_url)
    return pdf_url or None


def count_pdf_pages(data: bytes) -> Optional[int]:
    try:
        return len(PdfReader(io.BytesIO(data)).pages)
    except Exception as e:
        logger.warning(f"Could not count PDF pages: {e}")
        return None


def extract_pdf_text(data: bytes) -> str:
    try:
        return extract_text(io.BytesIO(data)) or ""
    except Exception as e:
        logger.warning(f"Could not extract PDF text: {e}")
        return ""


class PdfFetcher:
    """Resolve, download and read PDFs with a shared polite session."""

    def __init__(self, http: Optional[requests.Session] = None) -> None:
        self.http = http or session_with_retries(
            user_agent=PDF_UA,
            headers={"Accept": "application/pdf, text/html;q=0.9, */*;q=0.8"},
        )

    def resolve_landing_page(self, landing_url: Optional[str]) -> Optional[str]:
        if not landing_url or not landing_url.strip():
            return None
        try:
            resp = self.http.get(landing_url, timeout=LANDING_TIMEOUT_SEC)
            resp.raise_for_status()
            return find_pdf_link(resp.text, resp.url or landing_url)
        except Exception as e:
            logger.debug(f"Landing page lookup failed for {landing_url}: {e}")
            return None

    def download(self, pdf_url: str) -> Optional[bytes]:
        try:
            resp = self.http.get(pdf_url, timeout=DOWNLOAD_TIMEOUT_SEC)
            resp.raise_for_status()
            return resp.content or None
        except Exception as e:
            logger.warning(f"PDF download failed for {pdf_url}: {e}")
            return None

    def fetch(self, pdf_url: Optional[str], download: bool) -> PdfInfo:
        """Download a known PDF URL when asked; an unreadable download clears the URL."""
        if not pdf_url:
            return PdfInfo()
        if not download:
            return PdfInfo(pdf_url=pdf_url)
        data = self.download(pdf_url)
        if data is None:
            return PdfInfo()
        pages = count_pdf_pages(data)
        return PdfInfo(
            pdf_url=pdf_url,
            pages=str(pages) if pages is not None else None,
            text=extract_pdf_text(data),
        )

    def from_landing_page(self, landing_url: Optional[str], download: bool) -> PdfInfo:
        return self.fetch(self.resolve_landing_page(landing_url), download)
