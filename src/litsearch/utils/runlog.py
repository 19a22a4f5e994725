"""Run log: human-readable lines returned to the caller of a search run."""
from __future__ import annotations

import logging
import threading
from typing import List, Optional


class RunLog:
	"""Collects informational lines and mirrors them to a logger.

	Adapter threads append concurrently, so writes go through a lock.
	"""

	def __init__(self, logger: Optional[logging.Logger] = None) -> None:
		self._lines: List[str] = []
		self._lock = threading.Lock()
		self._logger = logger or logging.getLogger("litsearch.run")

	def info(self, message: str) -> None:
		self._logger.info(message)
		with self._lock:
			self._lines.append(message)

	def error(self, message: str) -> None:
		self._logger.error(message)
		with self._lock:
			self._lines.append(message)

	@property
	def lines(self) -> List[str]:
		with self._lock:
			return list(self._lines)

	def __len__(self) -> int:
		with self._lock:
			return len(self._lines)
