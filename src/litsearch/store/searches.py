"""Search run lifecycle: create, list, export and forget."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, selectinload

from .models import (
	Publication,
	PublicationAuthor,
	PublicationCategory,
	Result,
	Search,
)

logger = logging.getLogger(__name__)


@dataclass
class ForgetOutcome:
	search_id: int
	found: bool
	removed_results: int = 0
	removed_publications: int = 0


def create_search(session: Session, query_text: str, start_year: Optional[int]) -> int:
	search = Search(query_text=query_text, start_year=start_year, search_date=datetime.utcnow())
	session.add(search)
	session.commit()
	return search.id


def exclusive_publication_ids(session: Session, search_id: int) -> List[int]:
	"""Publications whose only Result row belongs to `search_id`."""
	single = (
		select(Result.publication_id)
		.group_by(Result.publication_id)
		.having(func.count() == 1)
	)
	stmt = select(Result.publication_id).where(
		Result.search_id == search_id,
		Result.publication_id.in_(single),
	)
	return list(session.scalars(stmt).all())


def forget_search(session: Session, search_id: int) -> ForgetOutcome:
	"""Delete a search run, its Result rows, and the publications only it found.

	Author and category rows are kept; only the join rows of removed
	publications go away.
	"""
	search = session.get(Search, search_id)
	pub_ids = exclusive_publication_ids(session, search_id)
	try:
		if pub_ids:
			session.execute(
				delete(PublicationAuthor).where(PublicationAuthor.publication_id.in_(pub_ids)),
				execution_options={"synchronize_session": False},
			)
			session.execute(
				delete(PublicationCategory).where(PublicationCategory.publication_id.in_(pub_ids)),
				execution_options={"synchronize_session": False},
			)
		removed_results = session.execute(
			delete(Result).where(Result.search_id == search_id),
			execution_options={"synchronize_session": False},
		).rowcount
		if pub_ids:
			session.execute(
				delete(Publication).where(Publication.id.in_(pub_ids)),
				execution_options={"synchronize_session": False},
			)
		if search is not None:
			session.execute(
				delete(Search).where(Search.id == search_id),
				execution_options={"synchronize_session": False},
			)
		session.commit()
	except Exception:
		session.rollback()
		raise
	session.expire_all()
	logger.info(
		f"Forgot search {search_id}: removed {removed_results} result(s) and {len(pub_ids)} exclusive publication(s)"
	)
	return ForgetOutcome(
		search_id=search_id,
		found=search is not None,
		removed_results=removed_results or 0,
		removed_publications=len(pub_ids),
	)


def list_searches(session: Session) -> List[Dict[str, Any]]:
	"""Search history, newest first."""
	rows = session.scalars(select(Search).order_by(Search.search_date.desc(), Search.id.desc())).all()
	return [
		{
			"id": s.id,
			"query_text": s.query_text,
			"start_year": s.start_year,
			"search_date": s.search_date.isoformat() if s.search_date else None,
		}
		for s in rows
	]


def publication_to_dict(pub: Publication) -> Dict[str, Any]:
	return {
		"id": pub.id,
		"doi": pub.doi,
		"title": pub.title,
		"abstract": pub.abstract,
		"publication_year": pub.publication_year,
		"publication_month": pub.publication_month,
		"publication_day": pub.publication_day,
		"issn": pub.issn,
		"pdf_url": pub.pdf_url,
		"pages": pub.pages,
		"portal": pub.portal.description if pub.portal else "Unknown",
		"authors": [link.author.name for link in pub.author_links],
		"categories": [
			{"category_name": link.category.category_name, "quartile": link.quartile}
			for link in pub.category_links
		],
	}


def export_search(session: Session, search_id: int) -> List[Dict[str, Any]]:
	"""All publications retrieved by one search run, as JSON-ready dicts."""
	stmt = (
		select(Publication)
		.join(Result, Result.publication_id == Publication.id)
		.where(Result.search_id == search_id)
		.options(
			selectinload(Publication.portal),
			selectinload(Publication.author_links).selectinload(PublicationAuthor.author),
			selectinload(Publication.category_links).selectinload(PublicationCategory.category),
		)
		.order_by(Publication.id)
	)
	out = []
	for pub in session.scalars(stmt).all():
		item = publication_to_dict(pub)
		item["search_id"] = search_id
		out.append(item)
	return out
