"""Concurrent fan-out over source adapters with bounded retry.

Every adapter runs as its own thread-pool task. An attempt succeeds only when
it returns a non-empty list; an empty list or an exception counts as a
failure and is retried after 1 s, 2 s, 4 s... up to `max_attempts`. A source
that never succeeds contributes nothing, and the others are unaffected.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence

from ..constants import SEARCH_INITIAL_BACKOFF_SEC, SEARCH_MAX_ATTEMPTS
from ..records import PublicationRecord
from ..utils.runlog import RunLog

logger = logging.getLogger(__name__)


class RetryingOrchestrator:
    def __init__(
        self,
        adapters: Sequence,
        max_attempts: int = SEARCH_MAX_ATTEMPTS,
        initial_backoff: float = SEARCH_INITIAL_BACKOFF_SEC,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.adapters = list(adapters)
        self.max_attempts = max(int(max_attempts), 1)
        self.initial_backoff = initial_backoff
        self._sleep = sleep

    def _attempt_source(
        self,
        adapter,
        query: str,
        start_year: Optional[int],
        download_pdf: bool,
        batch_size: int,
        cancel: Optional[threading.Event],
        runlog: RunLog,
    ) -> List[PublicationRecord]:
        name = adapter.source_name
        runlog.info(f"Retry active for {name}")
        backoff = self.initial_backoff
        for attempt in range(1, self.max_attempts + 1):
            if cancel is not None and cancel.is_set():
                runlog.info(f"Search cancelled before attempt {attempt} for {name}")
                return []
            try:
                results = adapter.search(query, start_year, download_pdf, batch_size, cancel)
                if results:
                    runlog.info(f"{name} returned {len(results)} results")
                    return list(results)
                runlog.info(f"Attempt {attempt} failed for {name}")
            except Exception as e:
                logger.error(f"{name}: attempt {attempt} raised: {e}")
                runlog.error(f"Error during attempt {attempt} for {name}: {e}")
            if attempt < self.max_attempts:
                self._sleep(backoff)
                backoff *= 2
        runlog.error(f"All attempts failed for {name}")
        return []

    def run(
        self,
        query: str,
        start_year: Optional[int],
        download_pdf: bool,
        batch_size: int,
        cancel: Optional[threading.Event] = None,
        runlog: Optional[RunLog] = None,
    ) -> List[PublicationRecord]:
        """Query every adapter concurrently and concatenate what they return."""
        runlog = runlog or RunLog()
        if not self.adapters:
            logger.warning("No source adapters configured")
            return []
        combined: List[PublicationRecord] = []
        with ThreadPoolExecutor(max_workers=len(self.adapters)) as pool:
            futures = [
                pool.submit(
                    self._attempt_source, a, query, start_year, download_pdf, batch_size, cancel, runlog
                )
                for a in self.adapters
            ]
            for fut in futures:
                combined.extend(fut.result())
        logger.info(f"Sources returned {len(combined)} records in total")
        return combined
