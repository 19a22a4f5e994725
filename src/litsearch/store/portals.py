"""Portal lookup-or-create cache used by the source adapters."""
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..records import PortalRef
from ..utils.normalize import name_key
from .models import Portal

logger = logging.getLogger(__name__)


class PortalResolver:
	"""Map a source name to its durable Portal row, creating it when missing.

	Adapters run on worker threads, so lookups are serialized and callers
	receive detached `PortalRef` snapshots rather than session-bound rows.
	Each lookup opens its own short-lived session from `session_factory`.
	"""

	def __init__(self, session_factory: Callable[[], Session]) -> None:
		self._session_factory = session_factory
		self._cache: Dict[str, PortalRef] = {}
		self._lock = threading.Lock()

	def get_portal(self, name: str) -> PortalRef:
		key = name_key(name)
		with self._lock:
			cached = self._cache.get(key)
			if cached is not None:
				return cached
			session = self._session_factory()
			try:
				portal = session.scalars(
					select(Portal).where(func.lower(Portal.description) == key).order_by(Portal.id)
				).first()
				if portal is None:
					portal = Portal(description=name.strip())
					session.add(portal)
					session.commit()
					logger.info(f"Created portal '{portal.description}' (id={portal.id})")
				ref = PortalRef(id=portal.id, description=portal.description)
			finally:
				session.close()
			self._cache[key] = ref
			return ref


class StaticPortalResolver:
	"""Resolver without storage: hands out id-less refs. Used for dry runs."""

	def __init__(self) -> None:
		self._cache: Dict[str, PortalRef] = {}

	def get_portal(self, name: str) -> PortalRef:
		key = name_key(name)
		if key not in self._cache:
			self._cache[key] = PortalRef(id=None, description=name.strip())
		return self._cache[key]
