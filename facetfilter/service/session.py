from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from facetfilter.engine.active_filters import ActiveFilterToken, active_filter_tokens, remove_active_filter
from facetfilter.engine.facet_counter import FacetCounter
from facetfilter.engine.filter_engine import FilterEngine
from facetfilter.engine.reconciler import SelectionGuard, merge_live_counts, reconcile
from facetfilter.model.date_filter import DateFilterType
from facetfilter.model.facet_counts import DIMENSIONS, FacetCounts, FacetEntry
from facetfilter.model.filter_state import DamagedFilter, FilterState
from facetfilter.model.item import CatalogSnapshot, Item, snapshot


log = logging.getLogger(__name__)

# Radio-style lists show their "no filter" row as selected
_IMPLICIT_SELECTION: Dict[str, str] = {
    "damaged": DamagedFilter.ALL.value,
    "date": DateFilterType.ALL_TIME.value,
}


@dataclass
class RecomputeResult:
    filtered: CatalogSnapshot
    counts: FacetCounts
    facet_lists: Dict[str, List[FacetEntry]] = field(default_factory=dict)


class FilterSession:
    """Owns one FilterState and recomputes results when it changes.

    Mutations either go through ``select``/``set_*`` (one recompute each) or
    through a ``batch()`` block, which recomputes once on exit.
    """

    def __init__(
        self,
        catalog: Iterable[Item],
        engine: Optional[FilterEngine] = None,
        counter: Optional[FacetCounter] = None,
        state: Optional[FilterState] = None,
    ) -> None:
        self.catalog: CatalogSnapshot = snapshot(catalog)
        self.engine = engine or FilterEngine()
        self.counter = counter or FacetCounter(self.engine)
        self.state = state or FilterState()
        self.guard = SelectionGuard()
        self.result: Optional[RecomputeResult] = None
        # Mode and catalog the current lists were built for
        self._built_cascaded = False
        self._built_catalog: Optional[CatalogSnapshot] = None
        self._batch_depth = 0
        self._listeners: List[Callable[[RecomputeResult], None]] = []

    def on_result(self, fn: Callable[[RecomputeResult], None]) -> None:
        self._listeners.append(fn)

    @contextmanager
    def batch(self) -> Iterator[FilterState]:
        self._batch_depth += 1
        try:
            yield self.state
        finally:
            self._batch_depth -= 1
        if self._batch_depth == 0:
            self.recompute()

    def _changed(self) -> Optional[RecomputeResult]:
        if self._batch_depth:
            return None
        return self.recompute()

    def _programmatic(self) -> bool:
        if self.guard.held_by_current_thread():
            log.debug("Ignoring selection change raised during a facet rebuild")
            return True
        return False

    def select(self, dimension: str, values: Iterable[str]) -> Optional[RecomputeResult]:
        """Selection-changed handler for one facet list."""
        if self._programmatic():
            return None
        self.state.set_selection(dimension, values)
        return self._changed()

    def set_search_text(self, text: str) -> Optional[RecomputeResult]:
        if self._programmatic():
            return None
        self.state.search_text = text or ""
        return self._changed()

    def set_date_filter(
        self,
        filter_type: DateFilterType,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Optional[RecomputeResult]:
        if self._programmatic():
            return None
        df = self.state.date_filter
        df.filter_type = filter_type
        df.custom_start = start if filter_type is DateFilterType.CUSTOM_RANGE else None
        df.custom_end = end if filter_type is DateFilterType.CUSTOM_RANGE else None
        return self._changed()

    def set_cascade_mode(self, enabled: bool) -> Optional[RecomputeResult]:
        if self._programmatic():
            return None
        self.state.cascade_mode = bool(enabled)
        return self._changed()

    def remove_filter(self, token: ActiveFilterToken) -> Optional[RecomputeResult]:
        if self._programmatic():
            return None
        remove_active_filter(self.state, token)
        return self._changed()

    def clear_filters(self) -> Optional[RecomputeResult]:
        if self._programmatic():
            return None
        self.state.clear()
        return self._changed()

    def replace_catalog(self, items: Iterable[Item]) -> Optional[RecomputeResult]:
        if self._programmatic():
            return None
        self.catalog = snapshot(items)
        return self._changed()

    def active_filters(self) -> List[ActiveFilterToken]:
        return active_filter_tokens(self.state, self.engine.now())

    def date_description(self) -> str:
        return self.state.date_filter.get_description(self.engine.now())

    def recompute(self) -> RecomputeResult:
        with self.guard.suppress():
            filtered = self.engine.filter(self.catalog, self.state)
            counts = self.counter.count(self.catalog, self.state, filtered)
            result = RecomputeResult(filtered=filtered, counts=counts, facet_lists=self._reconcile(counts))
            self.result = result
            log.debug("Recomputed: %d of %d items shown", len(filtered), len(self.catalog))
            # Listeners rebuild views under the guard so their selection writes are ignored
            for fn in self._listeners:
                fn(result)
        return result

    def _reconcile(self, counts: FacetCounts) -> Dict[str, List[FacetEntry]]:
        # Live merges only make sense against flat lists of the same catalog
        structural = (
            self.state.cascade_mode
            or self.result is None
            or self._built_cascaded
            or self._built_catalog is not self.catalog
        )
        previous = {} if structural else self.result.facet_lists
        lists: Dict[str, List[FacetEntry]] = {}
        for dimension in DIMENSIONS:
            rows = counts.for_dimension(dimension)
            selected = self.state.selection_for(dimension)
            if not selected and dimension in _IMPLICIT_SELECTION:
                selected = {_IMPLICIT_SELECTION[dimension]}
            if dimension not in previous:
                lists[dimension] = reconcile(rows, selected)
            else:
                lists[dimension] = merge_live_counts(previous[dimension], rows, selected)
        self._built_cascaded = self.state.cascade_mode
        self._built_catalog = self.catalog
        return lists
