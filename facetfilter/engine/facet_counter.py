"""Per-dimension (value, count) lists in flat or cascading mode.

Both modes tally over the fully filtered set, the one the results view
shows. Cascading mode additionally hides the unselected values of any
dimension that already has a selection. It does *not* recount each
dimension against the set filtered by all other dimensions; whether it
should is an open product question, so keep this behaviour until that is
settled.

Candidate values always come from the whole catalog so a value that the
filter excludes still shows up with a count of zero.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Callable, FrozenSet, Iterable, List, Optional, Sequence

from facetfilter.model.date_filter import DateFilter, DateFilterType
from facetfilter.model.facet_counts import DIMENSIONS, FacetCount, FacetCounts
from facetfilter.model.filter_state import (
    AUTO_INSTALL,
    DUPLICATE,
    FAVORITES,
    GROUP_AUTO_INSTALL,
    GROUP_DEPENDENCY,
    GROUP_DUPLICATE,
    GROUP_FAVORITES,
    GROUP_LIFECYCLE,
    GROUP_OPTIMIZATION,
    GROUP_PACKAGE_TYPE,
    GROUP_VERSION,
    LATEST,
    NO_DEPENDENCIES,
    NO_DEPENDENTS,
    OLD,
    DamagedFilter,
    FilterState,
)
from facetfilter.model.item import CatalogSnapshot, Item, snapshot
from . import predicates as p
from .filter_engine import FilterEngine


log = logging.getLogger(__name__)

DATE_PRESETS = (
    DateFilterType.ALL_TIME,
    DateFilterType.TODAY,
    DateFilterType.PAST_WEEK,
    DateFilterType.PAST_MONTH,
    DateFilterType.PAST_3_MONTHS,
    DateFilterType.PAST_YEAR,
)


def _tally(
    items: Sequence[Item],
    filtered: Sequence[Item],
    extract: Callable[[Item], Iterable[str]],
    group: str = "",
    order: Optional[Callable[[Iterable[str]], List[str]]] = None,
) -> List[FacetCount]:
    universe = set()
    for item in items:
        universe.update(extract(item))
    counts: Counter = Counter()
    for item in filtered:
        counts.update(extract(item))
    keys = order(universe) if order else sorted(universe)
    return [FacetCount(value=k, count=counts[k], group=group) for k in keys]


def _single(fn: Callable[[Item], Optional[str]]) -> Callable[[Item], FrozenSet[str]]:
    def extract(item: Item) -> FrozenSet[str]:
        value = fn(item)
        return frozenset((value,)) if value else frozenset()
    return extract


class FacetCounter:
    def __init__(self, engine: FilterEngine) -> None:
        self.engine = engine

    def count(
        self,
        catalog: Iterable[Item],
        state: FilterState,
        filtered: Optional[Sequence[Item]] = None,
    ) -> FacetCounts:
        items = snapshot(catalog)
        if filtered is None:
            filtered = self.engine.filter(items, state)
        now = self.engine.now()
        engine = self.engine
        counts = FacetCounts(
            status=self.status_counts(items, filtered),
            creator=_tally(items, filtered, p.creator_values),
            category=_tally(items, filtered, p.category_values),
            license_type=_tally(items, filtered, p.license_values),
            file_size=_tally(items, filtered, engine.extractor("file_size"), order=self._size_order(items)),
            subfolder=_tally(items, filtered, p.subfolder_values),
            destination=_tally(items, filtered, p.destination_values),
            playlist=_tally(items, filtered, engine.extractor("playlist")),
            date=self.date_counts(filtered, now),
            damaged=self.damaged_counts(items),
        )
        if state.cascade_mode:
            self._hide_unselected(counts, state)
        log.debug(
            "Counted facets over %d/%d items (%s mode)",
            len(filtered), len(items), "cascading" if state.cascade_mode else "flat",
        )
        return counts

    def status_counts(self, items: CatalogSnapshot, filtered: Sequence[Item]) -> List[FacetCount]:
        memberships = self.engine.memberships
        rows = _tally(items, filtered, _single(p.lifecycle_value), GROUP_LIFECYCLE)

        if any(item.is_duplicate for item in items):
            dupes = sum(1 for item in filtered if item.is_duplicate)
            rows.append(FacetCount(DUPLICATE, dupes, GROUP_DUPLICATE))

        rows += _tally(items, filtered, _single(p.optimization_value), GROUP_OPTIMIZATION)

        # Version rows are always shown, even at zero
        old = sum(1 for item in filtered if item.is_old_version)
        rows.append(FacetCount(LATEST, len(filtered) - old, GROUP_VERSION))
        rows.append(FacetCount(OLD, old, GROUP_VERSION))

        no_deps = sum(1 for item in filtered if item.dependency_count == 0)
        no_dependents = sum(1 for item in filtered if item.dependents_count == 0)
        rows.append(FacetCount(NO_DEPENDENCIES, no_deps, GROUP_DEPENDENCY))
        rows.append(FacetCount(NO_DEPENDENTS, no_dependents, GROUP_DEPENDENCY))

        if memberships.favorites is not None:
            favs = sum(1 for item in filtered if p.favorite_value(item, memberships) == FAVORITES)
            rows.append(FacetCount(FAVORITES, favs, GROUP_FAVORITES))
        if memberships.auto_install is not None:
            auto = sum(1 for item in filtered if p.auto_install_value(item, memberships) == AUTO_INSTALL)
            rows.append(FacetCount(AUTO_INSTALL, auto, GROUP_AUTO_INSTALL))

        rows += _tally(items, filtered, _single(p.package_type_value), GROUP_PACKAGE_TYPE)
        return rows

    def date_counts(self, filtered: Sequence[Item], now: datetime) -> List[FacetCount]:
        rows = []
        for preset in DATE_PRESETS:
            df = DateFilter(preset)
            n = sum(1 for item in filtered if df.matches_filter(item.effective_date, now))
            rows.append(FacetCount(preset.value, n))
        rows.append(FacetCount(DateFilterType.CUSTOM_RANGE.value, 0))
        return rows

    def damaged_counts(self, items: CatalogSnapshot) -> List[FacetCount]:
        # Counted over the whole catalog, like the standalone damaged selector
        damaged = sum(1 for item in items if item.is_damaged)
        valid = len(items) - damaged
        rows = [FacetCount(DamagedFilter.ALL.value, len(items))]
        if damaged:
            rows.append(FacetCount(DamagedFilter.DAMAGED_ONLY.value, damaged))
        if valid:
            rows.append(FacetCount(DamagedFilter.VALID_ONLY.value, valid))
        return rows

    def _size_order(self, items: CatalogSnapshot) -> Callable[[Iterable[str]], List[str]]:
        classifier = self.engine.size_classifier
        labels: Sequence[str] = getattr(classifier, "labels", ()) or ()

        def order(universe: Iterable[str]) -> List[str]:
            present = set(universe)
            keys = [label for label in labels if label in present]
            if present.issubset(keys):
                return keys
            # Unlisted labels keep first-seen catalog order
            for item in items:
                for label in p.file_size_values(item, classifier):
                    if label in present and label not in keys:
                        keys.append(label)
            return keys

        return order

    def _hide_unselected(self, counts: FacetCounts, state: FilterState) -> None:
        for dimension in DIMENSIONS:
            if dimension == "damaged":
                continue
            selected = state.selection_for(dimension)
            if not selected:
                continue
            rows = counts.for_dimension(dimension)
            rows[:] = [fc for fc in rows if fc.value in selected]
