"""Identity-resolving upsert of a cleaned batch into durable storage.

For every incoming record the upserter decides whether it refers to a stored
publication (DOI first, normalized title for DOI-less records), then inserts
or updates the row and reconciles its author, category and search-run links
without creating duplicate join rows.

Identity caches (normalized key -> row id) are loaded once per call and are
never shared between runs. Each record is its own unit of work: ids needed by
join rows are obtained with a flush, the record is committed before the next
one starts, and a failure rolls back only that record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..constants import PORTAL_UNKNOWN
from ..records import PublicationRecord
from ..utils.normalize import date_parts, is_blank, name_key, normalize_title
from .models import (
    Author,
    Category,
    Portal,
    Publication,
    PublicationAuthor,
    PublicationCategory,
    Result,
)

logger = logging.getLogger(__name__)


@dataclass
class UpsertOutcome:
    """Tagged per-record result: ``ok`` with an id, or a failure reason."""
    ok: bool
    title: str = ""
    doi: str = ""
    publication_id: Optional[int] = None
    created: bool = False
    reason: str = ""


@dataclass
class UpsertReport:
    outcomes: List[UpsertOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[UpsertOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> List[UpsertOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def created(self) -> int:
        return sum(1 for o in self.outcomes if o.ok and o.created)

    @property
    def updated(self) -> int:
        return sum(1 for o in self.outcomes if o.ok and not o.created)


@dataclass
class IdentityCaches:
    portals: Dict[str, int] = field(default_factory=dict)
    authors: Dict[str, int] = field(default_factory=dict)
    categories: Dict[str, int] = field(default_factory=dict)
    by_doi: Dict[str, int] = field(default_factory=dict)
    by_title: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def load(cls, session: Session) -> "IdentityCaches":
        caches = cls()
        # ordered by id so the oldest row wins when storage holds case variants
        for pid, desc in session.execute(select(Portal.id, Portal.description).order_by(Portal.id)):
            caches.portals.setdefault(name_key(desc), pid)
        for aid, name in session.execute(select(Author.id, Author.name).order_by(Author.id)):
            caches.authors.setdefault(name_key(name), aid)
        for cid, name in session.execute(select(Category.id, Category.category_name).order_by(Category.id)):
            caches.categories.setdefault(name_key(name), cid)
        rows = session.execute(
            select(Publication.id, Publication.doi, Publication.title).order_by(Publication.id)
        )
        for pub_id, doi, title in rows:
            if not is_blank(doi):
                caches.by_doi.setdefault(doi.strip().lower(), pub_id)
            if not is_blank(title):
                caches.by_title.setdefault(normalize_title(title), pub_id)
        return caches


def _distinct_names(names) -> List[str]:
    out, seen = [], set()
    for raw in names:
        if is_blank(raw):
            continue
        name = raw.strip()
        key = name_key(name)
        if key in seen:
            continue
        seen.add(key)
        out.append(name)
    return out


class IdentityResolvingUpserter:
    """Reconcile cleaned records with storage and link them to a search run."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.caches = IdentityCaches.load(session)
        # cache entries created by the record in flight; merged on commit
        self._staged: List[Tuple[Dict[str, int], str, int]] = []

    def _stage(self, cache: Dict[str, int], key: str, value: int) -> None:
        self._staged.append((cache, key, value))

    def _lookup(self, cache: Dict[str, int], key: str) -> Optional[int]:
        if key in cache:
            return cache[key]
        for staged_cache, staged_key, value in self._staged:
            if staged_cache is cache and staged_key == key:
                return value
        return None

    def _resolve_existing(self, rec: PublicationRecord) -> Optional[int]:
        if not is_blank(rec.doi):
            return self._lookup(self.caches.by_doi, rec.doi.strip().lower())
        if not is_blank(rec.title):
            return self._lookup(self.caches.by_title, normalize_title(rec.title))
        return None

    def _resolve_portal_id(self, rec: PublicationRecord) -> int:
        desc = rec.portal_name
        if desc:
            pid = self._lookup(self.caches.portals, name_key(desc))
            if pid is not None:
                return pid
        pid = self._lookup(self.caches.portals, name_key(PORTAL_UNKNOWN))
        if pid is None:
            portal = Portal(description=PORTAL_UNKNOWN)
            self.session.add(portal)
            self.session.flush()
            pid = portal.id
            self._stage(self.caches.portals, name_key(PORTAL_UNKNOWN), pid)
        return pid

    def _apply_fields(self, pub: Publication, rec: PublicationRecord, portal_id: int) -> None:
        year, month, day = date_parts(rec.year, rec.month, rec.day)
        pub.doi = rec.doi
        pub.title = rec.title
        pub.abstract = rec.abstract
        pub.publication_year = year
        pub.publication_month = month
        pub.publication_day = day
        pub.issn = rec.issn
        pub.pdf_url = rec.pdf_url
        pub.pdf_text = rec.pdf_text
        pub.pages = rec.pages
        pub.portal_id = portal_id

    def _link_authors(self, pub_id: int, rec: PublicationRecord) -> None:
        linked = set()
        for name in _distinct_names(rec.authors):
            key = name_key(name)
            author_id = self._lookup(self.caches.authors, key)
            if author_id is None:
                author = Author(name=name)
                self.session.add(author)
                self.session.flush()
                author_id = author.id
                self._stage(self.caches.authors, key, author_id)
            if author_id in linked:
                continue
            if self.session.get(PublicationAuthor, (pub_id, author_id)) is None:
                self.session.add(PublicationAuthor(publication_id=pub_id, author_id=author_id))
            linked.add(author_id)

    def _link_categories(self, pub_id: int, rec: PublicationRecord) -> None:
        # first quartile seen for a category name is the one persisted
        quartiles: Dict[str, Optional[str]] = {}
        for cat in rec.categories:
            if is_blank(cat.name):
                continue
            quartiles.setdefault(name_key(cat.name), cat.quartile)

        linked = set()
        for name in _distinct_names(c.name for c in rec.categories):
            key = name_key(name)
            category_id = self._lookup(self.caches.categories, key)
            if category_id is None:
                category = Category(category_name=name)
                self.session.add(category)
                self.session.flush()
                category_id = category.id
                self._stage(self.caches.categories, key, category_id)
            if category_id in linked:
                continue
            if self.session.get(PublicationCategory, (pub_id, category_id)) is None:
                self.session.add(PublicationCategory(
                    publication_id=pub_id,
                    category_id=category_id,
                    quartile=quartiles.get(key),
                ))
            linked.add(category_id)

    def _link_search(self, pub_id: int, search_id: int) -> None:
        if self.session.get(Result, (search_id, pub_id)) is None:
            self.session.add(Result(search_id=search_id, publication_id=pub_id))

    def upsert_one(self, rec: PublicationRecord, search_id: int) -> UpsertOutcome:
        if is_blank(rec.doi) and is_blank(rec.title):
            return UpsertOutcome(ok=False, reason="record has neither DOI nor title")

        self._staged = []
        try:
            existing_id = self._resolve_existing(rec)
            portal_id = self._resolve_portal_id(rec)

            if existing_id is not None:
                pub = self.session.get(Publication, existing_id)
                if pub is None:
                    raise LookupError(f"publication {existing_id} vanished from storage")
                # category links are rebuilt from the incoming record
                self.session.execute(
                    delete(PublicationCategory).where(PublicationCategory.publication_id == existing_id)
                )
                self._apply_fields(pub, rec, portal_id)
                created = False
            else:
                pub = Publication()
                self._apply_fields(pub, rec, portal_id)
                self.session.add(pub)
                self.session.flush()
                created = True
                if not is_blank(rec.doi):
                    self._stage(self.caches.by_doi, rec.doi.strip().lower(), pub.id)
                if not is_blank(rec.title):
                    self._stage(self.caches.by_title, normalize_title(rec.title), pub.id)

            pub_id = pub.id
            self._link_authors(pub_id, rec)
            self._link_categories(pub_id, rec)
            self._link_search(pub_id, search_id)

            self.session.commit()
        except Exception as e:
            self.session.rollback()
            self._staged = []
            logger.error(f"Error inserting publication '{rec.title[:80]}': {e}")
            return UpsertOutcome(ok=False, title=rec.title, doi=rec.doi, reason=str(e))

        for cache, key, value in self._staged:
            cache.setdefault(key, value)
        self._staged = []
        rec.id = pub_id
        logger.debug(f"Publication processed: {rec.title[:80]}")
        return UpsertOutcome(ok=True, title=rec.title, doi=rec.doi, publication_id=pub_id, created=created)

    def upsert(self, records: List[PublicationRecord], search_id: int) -> UpsertReport:
        logger.info(f"Inserting {len(records)} publications for search {search_id}...")
        report = UpsertReport()
        for rec in records:
            if rec is None:
                continue
            report.outcomes.append(self.upsert_one(rec, search_id))
        logger.info(
            f"All publications processed: created={report.created} updated={report.updated} "
            f"failed={len(report.failed)}"
        )
        return report


def upsert_publications(session: Session, records: List[PublicationRecord], search_id: int) -> UpsertReport:
    return IdentityResolvingUpserter(session).upsert(records, search_id)
