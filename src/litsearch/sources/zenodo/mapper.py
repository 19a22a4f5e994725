"""Mapper: Convert Zenodo record hits to record fields."""

from __future__ import annotations

from typing import Optional

from ...utils.normalize import clean_text, parse_date_parts

ENGLISH = ("eng", "en")
FULLTEXT_KEY = "fulltext.pdf"


def language_of(hit: dict) -> str:
    metadata = hit.get("metadata") or {}
    lang = metadata.get("language")
    if isinstance(lang, dict):
        lang = lang.get("id")
    return str(lang or "").strip().lower()


def fulltext_link(hit: dict) -> Optional[str]:
    """Direct link of the ``fulltext.pdf`` attachment, if the record has one."""
    for f in hit.get("files") or []:
        if f.get("key") == FULLTEXT_KEY:
            return (f.get("links") or {}).get("self")
    return None


def is_usable_abstract(text: str) -> bool:
    return bool(text.strip()) and "n/a" not in text.lower()


def map_zenodo_hit(hit: dict) -> dict:
    metadata = hit.get("metadata") or {}
    year, month, day = parse_date_parts(metadata.get("publication_date"))
    issn = metadata.get("journal_issn") or (metadata.get("journal") or {}).get("issn") or ""
    return {
        "doi": hit.get("doi") or metadata.get("doi") or "",
        "title": clean_text(metadata.get("title")),
        "abstract": clean_text(metadata.get("description")),
        "authors": [c.get("name", "") for c in metadata.get("creators") or []],
        "issn": issn,
        "language": language_of(hit),
        "pdf_url": fulltext_link(hit) or "",
        "year": year,
        "month": month,
        "day": day,
    }
