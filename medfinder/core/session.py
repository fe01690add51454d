"""Search session state: last results, filter settings and quick-filter term."""

from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, Iterable, List, Optional, Set

from medfinder.core.filtering import filter_results, quick_filter
from medfinder.models import FilterConfig, FilteredResults, MedicalProfessional, SaveResult, SearchParams

logger = logging.getLogger(__name__)

SearchFn = Callable[[SearchParams], List[MedicalProfessional]]
SaveFn = Callable[[List[MedicalProfessional]], SaveResult]


class SessionState(str, enum.Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    SUCCESS = "success"
    FAILED = "failed"
    FILTERED = "filtered"


class SearchSession:
    """Holds one user's search results and re-derives the filtered view on demand.

    Changing the filter config or quick-filter term never triggers a new
    search. Starting a search discards the previous results; a search that
    completes after a newer one started is ignored.
    """

    def __init__(self, search_fn: SearchFn, config: Optional[FilterConfig] = None) -> None:
        self._search_fn = search_fn
        self._lock = threading.Lock()
        self._generation = 0
        self.state = SessionState.IDLE
        self.results: List[MedicalProfessional] = []
        self.error: Optional[Exception] = None
        self.config = config or FilterConfig()
        self.term = ""
        self.saved_keys: Set[str] = set()

    def search(self, params: SearchParams) -> FilteredResults:
        with self._lock:
            self._generation += 1
            generation = self._generation
            self.state = SessionState.SEARCHING
            self.results = []
            self.error = None

        try:
            results = self._search_fn(params)
        except Exception as exc:
            with self._lock:
                if generation == self._generation:
                    self.state = SessionState.FAILED
                    self.error = exc
            logger.error("Search failed for address=%r: %s", params.address, exc)
            raise

        with self._lock:
            if generation != self._generation:
                logger.info("Discarding stale results from search #%d", generation)
            else:
                self.results = list(results)
                self.state = SessionState.SUCCESS
        return self.view()

    def set_config(self, config: FilterConfig) -> FilteredResults:
        self.config = config
        self._mark_filtered()
        return self.view()

    def add_keyword(self, keyword: str) -> FilteredResults:
        return self.set_config(self.config.with_keyword(keyword))

    def remove_keyword(self, keyword: str) -> FilteredResults:
        return self.set_config(self.config.without_keyword(keyword))

    def set_term(self, term: str) -> FilteredResults:
        self.term = term or ""
        self._mark_filtered()
        return self.view()

    def _mark_filtered(self) -> None:
        if self.state in (SessionState.SUCCESS, SessionState.FILTERED):
            self.state = SessionState.FILTERED

    def view(self) -> FilteredResults:
        return quick_filter(filter_results(self.results, self.config), self.term)

    def save_selected(self, record_keys: Iterable[str], save_fn: SaveFn) -> SaveResult:
        """Persist selected records from the current view that were not saved yet."""
        wanted = set(record_keys)
        pending = [
            p for p in self.view().included if p.record_key in wanted and p.record_key not in self.saved_keys
        ]
        if not pending:
            logger.info("No new records to save")
            return SaveResult(success=True)

        result = save_fn(pending)
        if result.success:
            self.saved_keys.update(p.record_key for p in pending)
        return result
