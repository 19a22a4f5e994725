"""Deduplication utilities for cross-source record matching.

The joined output of all adapters is collapsed to one record per DOI
(case-insensitive). Records without a DOI are dropped at this stage; the
upserter keeps a title-based identity path for them, but nothing upstream
produces DOI-less survivors.

Field resolution is deterministic and order-dependent: the first record seen
for a DOI is canonical and every scalar keeps its first non-blank value.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Dict, List

from ..records import PublicationRecord
from ..utils.normalize import is_blank, name_key

logger = logging.getLogger(__name__)

SCALAR_FIELDS = ("title", "abstract", "pdf_url", "issn", "pages", "year", "month", "day")


def _copy(record: PublicationRecord) -> PublicationRecord:
    return dataclasses.replace(
        record, authors=list(record.authors), categories=list(record.categories)
    )


def merge_into(existing: PublicationRecord, incoming: PublicationRecord) -> None:
    """Merge `incoming` into `existing` in place (fill blanks, union lists).

    Notes:
        - Scalars: existing value wins unless blank
        - Portal: replaced only when missing or without description
        - Authors: unioned by case-insensitive name
        - Categories: unioned by exact (name, quartile) pair, so the same
          category with two quartiles keeps both entries
    """
    for name in SCALAR_FIELDS:
        if is_blank(getattr(existing, name)):
            setattr(existing, name, getattr(incoming, name))

    if existing.portal is None or is_blank(existing.portal.description):
        existing.portal = incoming.portal

    known = {name_key(a) for a in existing.authors}
    for author in incoming.authors:
        key = name_key(author)
        if key not in known:
            existing.authors.append(author)
            known.add(key)

    pairs = {(c.name, c.quartile) for c in existing.categories}
    for cat in incoming.categories:
        if (cat.name, cat.quartile) not in pairs:
            existing.categories.append(cat)
            pairs.add((cat.name, cat.quartile))


def merge_by_doi(records: List[PublicationRecord]) -> List[PublicationRecord]:
    """Collapse records to one per non-blank DOI, preserving first-seen order."""
    merged: Dict[str, PublicationRecord] = {}
    duplicates = 0
    for rec in records:
        if is_blank(rec.doi):
            continue
        key = rec.doi.strip().lower()
        existing = merged.get(key)
        if existing is None:
            merged[key] = _copy(rec)
            continue
        duplicates += 1
        logger.info(
            f"Duplicate DOI detected: {existing.doi} | Keeping portal: "
            f"{existing.portal_name or 'Unknown'}, merging from: {rec.portal_name or 'Unknown'}"
        )
        merge_into(existing, rec)

    logger.info(
        f"merge_by_doi: started with {len(records)} records, found {duplicates} duplicate(s), "
        f"final unique records: {len(merged)}"
    )
    return list(merged.values())


def has_content(record: PublicationRecord) -> bool:
    """True when the record has an abstract and at least one named author."""
    if is_blank(record.abstract):
        return False
    return any(not is_blank(a) for a in record.authors)


def clean(records: List[PublicationRecord]) -> List[PublicationRecord]:
    """Merge by DOI, then drop records missing an abstract or any author."""
    initial = len(records)
    merged = merge_by_doi(records)
    cleaned = [r for r in merged if has_content(r)]
    logger.info(
        f"clean: started with {initial}, after deduplication {len(merged)}, "
        f"removed {len(merged) - len(cleaned)} for missing abstract/authors, final count {len(cleaned)}"
    )
    return cleaned
