"""Mapper: Convert arXiv Atom entries (as parsed by feedparser) to record fields."""

from __future__ import annotations

from typing import Optional

from ...utils.normalize import clean_text, parse_date_parts


def arxiv_id_from_url(raw_id: Optional[str]) -> str:
    """``http://arxiv.org/abs/2101.01234v2`` -> ``2101.01234v2``."""
    if not raw_id:
        return ""
    if "/abs/" in raw_id:
        return raw_id.split("/abs/")[-1].strip()
    return raw_id.strip()


def pdf_link(entry) -> str:
    for link in entry.get("links", []) or []:
        if link.get("title") == "pdf":
            return link.get("href") or ""
    return ""


def map_arxiv_entry(entry) -> dict:
    """Map one feed entry.

    The record's DOI slot carries the arXiv identifier taken from the entry
    id URL, so the same preprint merges across runs.
    """
    year, month, day = parse_date_parts(entry.get("published"))
    return {
        "doi": arxiv_id_from_url(entry.get("id")),
        "title": clean_text(entry.get("title")),
        "abstract": clean_text(entry.get("summary")),
        "authors": [a.get("name", "") for a in entry.get("authors", []) or []],
        "pdf_url": pdf_link(entry),
        "issn": "",
        "year": year,
        "month": month,
        "day": day,
    }
