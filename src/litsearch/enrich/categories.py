"""Journal-category enrichment driven by an ISSN index.

Category source files are ``;``-delimited exports with a header row holding
at least an ``Issn`` column (comma-separated ISSNs) and a ``Categories``
column (``;``-separated tokens shaped like ``Oncology (Q1)``).
"""

from __future__ import annotations

import csv
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from ..records import CategoryEntry, Journal, PublicationRecord
from ..utils.normalize import is_blank, name_key, normalize_issn

logger = logging.getLogger(__name__)

_CATEGORY_RE = re.compile(r"^(.*?)\s*\((Q[1-4])\)$")
_YEAR_RE = re.compile(r"\d{4}")

PathLike = Union[str, Path]


def parse_category_token(token: str) -> Optional[CategoryEntry]:
    """``"Biology (Q1)"`` -> CategoryEntry("Biology", "Q1"); anything else -> None."""
    if not token or not token.strip():
        return None
    m = _CATEGORY_RE.match(token.strip())
    if not m:
        return None
    name = m.group(1).strip()
    if not name:
        return None
    return CategoryEntry(name=name, quartile=m.group(2).strip().upper())


def _expand_paths(paths: Iterable[PathLike]) -> List[Path]:
    files: List[Path] = []
    for p in paths:
        p = Path(p)
        if p.is_dir():
            files.extend(sorted(p.glob("*.csv")))
        elif p.exists():
            files.append(p)
        else:
            logger.warning(f"Category source not found: {p}")
    return files


def _year_from_filename(path: Path) -> int:
    m = _YEAR_RE.search(path.stem)
    return int(m.group(0)) if m else 0


def _column(row: Dict[str, str], name: str) -> str:
    for key, value in row.items():
        if key is not None and key.strip().lower() == name:
            return value or ""
    return ""


def add_row(index: Dict[str, Journal], issn_raw: str, categories_raw: str) -> None:
    """Accumulate one file row into the index (pairs de-duplicated per ISSN)."""
    if is_blank(issn_raw) or is_blank(categories_raw):
        return
    issns = []
    for raw in issn_raw.split(","):
        issn = normalize_issn(raw)
        if issn and issn not in issns:
            issns.append(issn)
    entries = [e for e in (parse_category_token(t) for t in categories_raw.split(";")) if e]

    for issn in issns:
        journal = index.get(issn.upper())
        if journal is None:
            journal = index[issn.upper()] = Journal(issn=issn)
        seen = {(name_key(c.name), c.quartile.upper()) for c in journal.categories}
        for entry in entries:
            pair = (name_key(entry.name), entry.quartile.upper())
            if pair in seen:
                continue
            journal.categories.append(entry)
            seen.add(pair)


def build_journal_index(paths: Iterable[PathLike]) -> Dict[str, Journal]:
    """Build the transient ISSN -> Journal index from category files or folders."""
    index: Dict[str, Journal] = {}
    for path in _expand_paths(paths):
        logger.info(f"Processing file: {path.name} (Year: {_year_from_filename(path)})")
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f, delimiter=";")
            for row in reader:
                add_row(index, _column(row, "issn"), _column(row, "categories"))
    logger.info(f"Journal category extraction completed. Total ISSNs: {len(index)}")
    return index


def attach_categories(records: List[PublicationRecord], index: Dict[str, Journal]) -> List[PublicationRecord]:
    """Attach journal categories to records by exact (case-insensitive) ISSN.

    Duplicate suppression compares category names only: when the index holds
    two quartiles for one name, the first one encountered is attached.
    """
    matched = 0
    for rec in records:
        if is_blank(rec.issn):
            continue
        journal = index.get(rec.issn.strip().upper())
        if journal is None or not journal.categories:
            continue
        matched += 1
        assigned = {name_key(c.name) for c in rec.categories}
        for entry in journal.categories:
            key = name_key(entry.name)
            if key in assigned:
                continue
            rec.categories.append(entry)
            assigned.add(key)
    logger.info(f"Categories attached to {matched} of {len(records)} publications")
    return records
