"""Per-dimension predicates.

Every multi-select list goes through one rule, :func:`matches_selection`.
The status list shown to users is backed by several separate predicates
(lifecycle, duplicate, optimization, version, dependency degree) plus the
membership and package-type tests. Each is evaluated on its own and they are
never folded into one switch.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Callable, Container, FrozenSet, Mapping, Optional, Set

from facetfilter.model.filter_state import (
    AUTO_INSTALL,
    EXTERNAL,
    FAVORITES,
    LATEST,
    LOCAL,
    NON_FAVORITES,
    OLD,
    OPTIMIZED,
    UNOPTIMIZED,
    DamagedFilter,
    FilterState,
)
from facetfilter.model.item import Item


SizeClassifier = Callable[[int], Optional[str]]

_EMPTY: FrozenSet[str] = frozenset()


@dataclass
class Memberships:
    """Externally owned identity sets, used only through ``in``."""

    favorites: Optional[Container[str]] = None
    auto_install: Optional[Container[str]] = None
    playlists: Mapping[str, Container[str]] = field(default_factory=dict)


def matches_selection(selected: AbstractSet[str], values: AbstractSet[str]) -> bool:
    if not selected:
        return True
    return not selected.isdisjoint(values)


def _one(value: str) -> FrozenSet[str]:
    return frozenset((value,)) if value else _EMPTY


# Extractors: item -> facet value(s); empty strings count as absent

def creator_values(item: Item) -> FrozenSet[str]:
    return _one(item.creator)


def category_values(item: Item) -> FrozenSet[str]:
    return frozenset(c for c in item.categories if c)


def license_values(item: Item) -> FrozenSet[str]:
    return _one(item.license_type)


def subfolder_values(item: Item) -> FrozenSet[str]:
    return _one(item.subfolder)


def destination_values(item: Item) -> FrozenSet[str]:
    return _one(item.external_destination_name) if item.is_external else _EMPTY


def file_size_values(item: Item, classifier: Optional[SizeClassifier]) -> FrozenSet[str]:
    if classifier is None:
        return _EMPTY
    return _one(classifier(item.file_size_bytes) or "")


def playlist_values(item: Item, memberships: Memberships) -> FrozenSet[str]:
    return frozenset(name for name, members in memberships.playlists.items() if item.key in members)


def lifecycle_value(item: Item) -> str:
    return item.status.value


def optimization_value(item: Item) -> str:
    return OPTIMIZED if item.is_optimized else UNOPTIMIZED


def version_value(item: Item) -> str:
    return OLD if item.is_old_version else LATEST


def package_type_value(item: Item) -> str:
    return EXTERNAL if item.is_external else LOCAL


def favorite_value(item: Item, memberships: Memberships) -> Optional[str]:
    # External items never take part in the favorites facet
    if item.is_external or memberships.favorites is None:
        return None
    return FAVORITES if item.key in memberships.favorites else NON_FAVORITES


def auto_install_value(item: Item, memberships: Memberships) -> Optional[str]:
    if item.is_external or memberships.auto_install is None:
        return None
    return AUTO_INSTALL if item.key in memberships.auto_install else None


def _has(selected: Set[str], value: Optional[str]) -> bool:
    if not selected:
        return True
    return value is not None and value in selected


# The five status sub-predicates

def lifecycle_matches(item: Item, state: FilterState) -> bool:
    return _has(state.statuses, lifecycle_value(item))


def duplicate_matches(item: Item, state: FilterState) -> bool:
    return not state.filter_duplicates or item.is_duplicate


def optimization_matches(item: Item, state: FilterState) -> bool:
    return _has(state.optimization_statuses, optimization_value(item))


def version_matches(item: Item, state: FilterState) -> bool:
    return _has(state.version_statuses, version_value(item))


def dependency_matches(item: Item, state: FilterState) -> bool:
    if state.filter_no_dependents and item.dependents_count != 0:
        return False
    if state.filter_no_dependencies and item.dependency_count != 0:
        return False
    return True


STATUS_PREDICATES = (
    lifecycle_matches,
    duplicate_matches,
    optimization_matches,
    version_matches,
    dependency_matches,
)


def package_type_matches(item: Item, state: FilterState) -> bool:
    return _has(state.package_types, package_type_value(item))


def damaged_matches(item: Item, state: FilterState) -> bool:
    if state.damaged_filter is DamagedFilter.DAMAGED_ONLY:
        return item.is_damaged
    if state.damaged_filter is DamagedFilter.VALID_ONLY:
        return not item.is_damaged
    return True


def favorites_matches(item: Item, state: FilterState, memberships: Memberships) -> bool:
    if not state.favorite_statuses:
        return True
    return _has(state.favorite_statuses, favorite_value(item, memberships))


def auto_install_matches(item: Item, state: FilterState, memberships: Memberships) -> bool:
    if not state.auto_install_statuses:
        return True
    return _has(state.auto_install_statuses, auto_install_value(item, memberships))

