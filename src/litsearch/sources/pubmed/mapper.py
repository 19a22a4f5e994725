"""Mapper: Convert PubMed efetch XML articles to record fields."""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from typing import List, Optional

from ...utils.normalize import clean_text, date_parts

logger = logging.getLogger(__name__)

_MEDLINE_DATE_RE = re.compile(r"(\d{4})(?:\s+([A-Za-z]{3}))?")


def _text(el: Optional[ET.Element]) -> str:
    if el is None:
        return ""
    return clean_text("".join(el.itertext()))


def _authors(article: ET.Element) -> List[str]:
    names = []
    for node in article.findall(".//AuthorList/Author"):
        fore = _text(node.find("ForeName"))
        last = _text(node.find("LastName"))
        full = f"{fore} {last}".strip()
        if not full:
            full = _text(node.find("CollectiveName"))
        if full:
            names.append(full)
    return names


def _pub_date(article: ET.Element):
    node = article.find(".//PubDate")
    if node is None:
        return None, None, None
    year = _text(node.find("Year"))
    if year:
        return date_parts(year, _text(node.find("Month")), _text(node.find("Day")))
    # e.g. <MedlineDate>2019 Jan-Feb</MedlineDate>
    m = _MEDLINE_DATE_RE.search(_text(node.find("MedlineDate")))
    if m:
        return date_parts(m.group(1), m.group(2))
    return None, None, None


def map_pubmed_article(article: ET.Element) -> dict:
    """Map one ``<PubmedArticle>`` element.

    Returns a dict with: doi, pmcid, title, abstract, issn, authors,
    year, month, day. Missing values are empty strings / None.
    """
    doi = _text(article.find("PubmedData/ArticleIdList/ArticleId[@IdType='doi']"))
    if not doi:
        doi = _text(article.find(".//ELocationID[@EIdType='doi']"))
    pmcid = _text(article.find("PubmedData/ArticleIdList/ArticleId[@IdType='pmc']"))

    abstract_parts = [_text(el) for el in article.findall(".//Abstract/AbstractText")]
    year, month, day = _pub_date(article)

    return {
        "doi": doi,
        "pmcid": pmcid,
        "title": _text(article.find(".//ArticleTitle")),
        "abstract": " ".join(p for p in abstract_parts if p),
        "issn": _text(article.find(".//ISSN")),
        "authors": _authors(article),
        "year": year,
        "month": month,
        "day": day,
    }


def parse_efetch(xml_text: str) -> List[ET.Element]:
    """Parse an efetch response into its ``<PubmedArticle>`` elements."""
    root = ET.fromstring(xml_text)
    return root.findall(".//PubmedArticle")


def pmc_landing_url(pmcid: Optional[str]) -> Optional[str]:
    if not pmcid:
        return None
    return f"https://www.ncbi.nlm.nih.gov/pmc/articles/{pmcid}/"
