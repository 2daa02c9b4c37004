from __future__ import annotations

import logging
import threading

from PySide6 import QtCore

from facetfilter.engine.facet_counter import FacetCounter
from facetfilter.engine.filter_engine import FilterEngine
from facetfilter.engine.reconciler import reconcile
from facetfilter.model.facet_counts import DIMENSIONS
from facetfilter.model.filter_state import FilterState
from facetfilter.service.session import RecomputeResult


log = logging.getLogger(__name__)


class FilterWorker(QtCore.QObject):
    """Runs recomputations off the UI thread; the newest request wins.

    Callers bump ``request()`` on the UI thread before queuing a run, so a
    run that finishes after a newer request drops its results.
    """

    resultsReady = QtCore.Signal(int, object)  # seq, RecomputeResult

    def __init__(self, engine: FilterEngine, counter: FacetCounter | None = None) -> None:
        super().__init__()
        self.engine = engine
        self.counter = counter or FacetCounter(engine)
        self._lock = threading.Lock()
        self._latest_seq = 0

    def request(self, seq: int) -> None:
        with self._lock:
            self._latest_seq = max(self._latest_seq, seq)

    def is_current(self, seq: int) -> bool:
        with self._lock:
            return seq >= self._latest_seq

    @QtCore.Slot(int, object, object)
    def run_recompute(self, seq: int, catalog: object, state_obj: object) -> None:
        state: FilterState = state_obj  # type: ignore[assignment]
        self.request(seq)
        if not self.is_current(seq):
            log.debug("Skipping superseded recompute %d", seq)
            return
        filtered = self.engine.filter(catalog, state)  # type: ignore[arg-type]
        counts = self.counter.count(catalog, state, filtered)  # type: ignore[arg-type]
        lists = {d: reconcile(counts.for_dimension(d), state.selection_for(d)) for d in DIMENSIONS}
        if not self.is_current(seq):
            log.debug("Dropping results of superseded recompute %d", seq)
            return
        self.resultsReady.emit(seq, RecomputeResult(filtered=filtered, counts=counts, facet_lists=lists))
