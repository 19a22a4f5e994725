"""In-pipeline publication records.

Adapters produce `PublicationRecord` objects; the merger, the category
enricher and the upserter all work on them. They are plain dataclasses and
never attached to a database session: durable rows live in `store.models`
and are reconciled against these records by `store.upsert`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class PortalRef:
	"""Detached snapshot of a Portal row (safe to share across threads)."""
	id: Optional[int]
	description: str


@dataclass(frozen=True)
class CategoryEntry:
	name: str
	quartile: str


@dataclass
class Journal:
	"""ISSN plus its (category, quartile) pairs. Built for enrichment only."""
	issn: str
	categories: List[CategoryEntry] = field(default_factory=list)


@dataclass
class PublicationRecord:
	doi: str = ""
	title: str = ""
	abstract: str = ""
	issn: str = ""
	pdf_url: str = ""
	pdf_text: str = ""
	pages: Optional[str] = None
	year: Optional[int] = None
	month: Optional[int] = None
	day: Optional[int] = None
	portal: Optional[PortalRef] = None
	authors: List[str] = field(default_factory=list)
	categories: List[CategoryEntry] = field(default_factory=list)
	# set once the record has been persisted
	id: Optional[int] = None

	@property
	def portal_name(self) -> str:
		if self.portal is None or not (self.portal.description or "").strip():
			return ""
		return self.portal.description

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"doi": self.doi,
			"title": self.title,
			"abstract": self.abstract,
			"publication_year": self.year,
			"publication_month": self.month,
			"publication_day": self.day,
			"issn": self.issn,
			"pdf_url": self.pdf_url,
			"pages": self.pages,
			"portal": self.portal_name or None,
			"authors": [a for a in self.authors if a and a.strip()],
			"categories": [
				{"category_name": c.name, "quartile": c.quartile} for c in self.categories
			],
		}
