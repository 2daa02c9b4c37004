from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set

from facetfilter.model.facet_counts import (
    LABEL_ALIASES,
    FacetCount,
    FacetEntry,
    display_label,
    normalize_value_name,
)

__all__ = [
    "LABEL_ALIASES",
    "ReentrantRebuildError",
    "SelectionGuard",
    "display_label",
    "merge_live_counts",
    "normalize_value_name",
    "reconcile",
]


class ReentrantRebuildError(RuntimeError):
    """A facet-list rebuild tried to start inside another rebuild on the same thread."""


def _normalized(names: Iterable[str]) -> Set[str]:
    return {normalize_value_name(n) for n in names if n}


def reconcile(counts: Sequence[FacetCount], previously_selected: Iterable[str]) -> List[FacetEntry]:
    """Rebuild a facet list, re-selecting rows by value name.

    Selection depends only on the name: a previously selected value showing
    a count of zero stays selected.
    """
    selected = _normalized(previously_selected)
    return [FacetEntry(fc.value, fc.count, fc.value in selected, fc.group) for fc in counts]


def merge_live_counts(
    existing: Sequence[FacetEntry],
    counts: Sequence[FacetCount],
    previously_selected: Optional[Iterable[str]] = None,
) -> List[FacetEntry]:
    """Replace counts in place, keeping the existing row order.

    Values that are new to the list are appended in counter order and values
    that are no longer candidates are dropped. Without an explicit selection
    the rows keep the selection they already had.
    """
    if previously_selected is None:
        selected = {e.value for e in existing if e.selected}
    else:
        selected = _normalized(previously_selected)
    fresh: Dict[str, FacetCount] = {fc.value: fc for fc in counts}
    out: List[FacetEntry] = []
    for entry in existing:
        fc = fresh.pop(entry.value, None)
        if fc is None:
            continue
        out.append(FacetEntry(fc.value, fc.count, fc.value in selected, fc.group))
    for fc in counts:
        if fc.value in fresh:
            out.append(FacetEntry(fc.value, fc.count, fc.value in selected, fc.group))
    return out


class SelectionGuard:
    """Serializes facet-list rebuilds against selection-triggered recomputes.

    A mutex rather than a flag: another thread blocks until the rebuild ends,
    while the owning thread re-entering is a bug and raises.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._owner: Optional[int] = None

    @property
    def active(self) -> bool:
        return self._owner is not None

    def held_by_current_thread(self) -> bool:
        return self._owner == threading.get_ident()

    @contextmanager
    def suppress(self) -> Iterator[None]:
        if self.held_by_current_thread():
            raise ReentrantRebuildError("facet rebuild already in progress on this thread")
        with self._lock:
            self._owner = threading.get_ident()
            try:
                yield
            finally:
                self._owner = None
