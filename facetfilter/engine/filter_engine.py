from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from facetfilter.model.date_filter import Clock, SystemClock
from facetfilter.model.filter_state import LIST_FIELDS, FilterState
from facetfilter.model.item import CatalogSnapshot, Item, snapshot
from . import predicates as p
from .text_matcher import DEFAULT_SEARCH_FIELDS, TextMatcher


log = logging.getLogger(__name__)

_ListTest = Tuple[FrozenSet[str], Callable[[Item], FrozenSet[str]]]


class FilterEngine:
    """Composes every dimension into one item predicate.

    Collaborators (memberships, size classifier, clock) are injected and
    their exceptions propagate unchanged.
    """

    def __init__(
        self,
        memberships: Optional[p.Memberships] = None,
        size_classifier: Optional[p.SizeClassifier] = None,
        clock: Optional[Clock] = None,
        search_fields: Sequence[str] = DEFAULT_SEARCH_FIELDS,
    ) -> None:
        self.memberships = memberships or p.Memberships()
        self.size_classifier = size_classifier
        self.clock: Clock = clock or SystemClock()
        self.text = TextMatcher(search_fields)

    def now(self) -> datetime:
        return self.clock.now()

    def extractor(self, dimension: str) -> Callable[[Item], FrozenSet[str]]:
        if dimension == "file_size":
            return lambda item: p.file_size_values(item, self.size_classifier)
        if dimension == "playlist":
            return lambda item: p.playlist_values(item, self.memberships)
        return {
            "creator": p.creator_values,
            "category": p.category_values,
            "license_type": p.license_values,
            "subfolder": p.subfolder_values,
            "destination": p.destination_values,
        }[dimension]

    def _list_tests(self, state: FilterState) -> List[_ListTest]:
        tests: List[_ListTest] = []
        for dimension, attr in LIST_FIELDS.items():
            selected = getattr(state, attr)
            if selected:
                tests.append((frozenset(selected), self.extractor(dimension)))
        return tests

    def matches(self, item: Item, state: FilterState, now: Optional[datetime] = None) -> bool:
        return self._matches(item, state, self._list_tests(state), now or self.now())

    def _matches(self, item: Item, state: FilterState, list_tests: List[_ListTest], now: datetime) -> bool:
        # Cheapest tests first; none has side effects, so order never changes the result
        for pred in p.STATUS_PREDICATES:
            if not pred(item, state):
                return False
        if not p.package_type_matches(item, state):
            return False
        if not p.damaged_matches(item, state):
            return False
        for selected, extract in list_tests:
            if not p.matches_selection(selected, extract(item)):
                return False
        if not p.favorites_matches(item, state, self.memberships):
            return False
        if not p.auto_install_matches(item, state, self.memberships):
            return False
        if state.date_filter.is_active() and not state.date_filter.matches_filter(item.effective_date, now):
            return False
        return self.text.matches(item, state.search_text)

    def filter(self, catalog: Iterable[Item], state: FilterState) -> CatalogSnapshot:
        items = snapshot(catalog)
        now = self.now()
        list_tests = self._list_tests(state)
        out = tuple(item for item in items if self._matches(item, state, list_tests, now))
        log.debug("Filtered %d of %d items", len(out), len(items))
        return out
