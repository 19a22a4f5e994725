"""Mapper: Convert Scopus search entries and abstract documents to record fields."""

from __future__ import annotations

from typing import List, Optional

from ...utils.normalize import clean_text, parse_date_parts

EMPTY_RESULT = "Result set was empty"


def is_empty_entry(entry: dict) -> bool:
    return entry.get("error") == EMPTY_RESULT


def scopus_id(entry: dict) -> Optional[str]:
    """``"SCOPUS_ID:85012345678"`` -> ``"85012345678"``."""
    ident = entry.get("dc:identifier") or ""
    if ":" in ident:
        ident = ident.split(":", 1)[1]
    return ident.strip() or None


def map_search_entry(entry: dict) -> dict:
    return {
        "scopus_id": scopus_id(entry),
        "doi": entry.get("prism:doi") or "",
        "title": clean_text(entry.get("dc:title")),
        "issn": entry.get("prism:issn") or entry.get("prism:eIssn") or "",
    }


def _author_names(authors) -> List[str]:
    if isinstance(authors, dict):
        authors = authors.get("author")
    if isinstance(authors, dict):
        authors = [authors]
    names = []
    for a in authors or []:
        preferred = a.get("preferred-name") or {}
        name = preferred.get("ce:indexed-name") or a.get("ce:indexed-name") or ""
        if name:
            names.append(name)
    return names


def map_abstract_document(data: dict) -> dict:
    """Pull abstract, cover date and authors from an ``abstract/scopus_id`` reply."""
    doc = data.get("abstracts-retrieval-response") or {}
    core = doc.get("coredata") or {}
    year, month, day = parse_date_parts(core.get("prism:coverDate"))
    return {
        "abstract": clean_text(core.get("dc:description")),
        "year": year,
        "month": month,
        "day": day,
        "authors": _author_names(doc.get("authors")),
    }
