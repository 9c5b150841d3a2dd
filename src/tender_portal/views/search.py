"""Debounced tender search for list pages."""

import logging
import threading
from typing import Callable, Optional

from tender_portal.errors import PortalError
from tender_portal.models.record import CanonicalRecord
from tender_portal.sources.fetcher import TenderFetcher
from tender_portal.views.debounce import Debouncer

logger = logging.getLogger(__name__)


class TenderSearchController:
    """
    Runs the listing query once typing pauses for `delay` seconds.
    Only the most recently requested search may deliver results or errors;
    an older query that finishes late is dropped.
    """

    def __init__(
        self,
        fetcher: TenderFetcher,
        on_results: Callable[[list[CanonicalRecord]], None],
        on_error: Optional[Callable[[str], None]] = None,
        *,
        delay: float = 0.5,
        filters: Optional[dict] = None,
    ):
        self._fetcher = fetcher
        self._on_results = on_results
        self._on_error = on_error
        self._filters = dict(filters or {})
        self._debouncer = Debouncer(delay, self._run)
        self._lock = threading.Lock()
        self._generation = 0
        self._closed = False

    def search(self, query: str) -> None:
        """Schedule a search; replaces any search still waiting."""
        if not self._closed:
            self._debouncer.call(query, self._next_generation())

    def search_now(self, query: str) -> None:
        """Run immediately, dropping any pending debounced search."""
        self._debouncer.cancel()
        self._run(query, self._next_generation())

    def close(self) -> None:
        self._closed = True
        self._debouncer.cancel()

    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return not self._closed and generation == self._generation

    def _run(self, query: str, generation: int) -> None:
        if not self._is_current(generation):
            return
        try:
            results = self._fetcher.list_tenders(search=(query or "").strip() or None, **self._filters)
        except PortalError as e:
            logger.warning("Tender search for %r failed: %s", query, e)
            if self._on_error is not None and self._is_current(generation):
                self._on_error(e.user_message)
            return
        if not self._is_current(generation):
            logger.debug("Dropping stale results for %r", query)
            return
        self._on_results(results)
