from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Set

from .date_filter import DateFilter, DateFilterType
from .facet_counts import DIMENSIONS, UnknownDimensionError, normalize_value_name


# Status-list names that route away from the lifecycle status set
DUPLICATE = "Duplicate"
OPTIMIZED = "Optimized"
UNOPTIMIZED = "Unoptimized"
LATEST = "Latest"
OLD = "Old"
NO_DEPENDENTS = "No Dependents"
NO_DEPENDENCIES = "No Dependencies"
FAVORITES = "Favorites"
NON_FAVORITES = "Non-Favorites"
AUTO_INSTALL = "AutoInstall"
EXTERNAL = "External"
LOCAL = "Local"

GROUP_LIFECYCLE = "lifecycle"
GROUP_DUPLICATE = "duplicate"
GROUP_OPTIMIZATION = "optimization"
GROUP_VERSION = "version"
GROUP_DEPENDENCY = "dependency"
GROUP_FAVORITES = "favorites"
GROUP_AUTO_INSTALL = "auto_install"
GROUP_PACKAGE_TYPE = "package_type"

_ROUTED_SETS: Dict[str, str] = {
    OPTIMIZED: "optimization_statuses",
    UNOPTIMIZED: "optimization_statuses",
    LATEST: "version_statuses",
    OLD: "version_statuses",
    FAVORITES: "favorite_statuses",
    NON_FAVORITES: "favorite_statuses",
    AUTO_INSTALL: "auto_install_statuses",
    EXTERNAL: "package_types",
    LOCAL: "package_types",
}

_ROUTED_FLAGS: Dict[str, str] = {
    DUPLICATE: "filter_duplicates",
    NO_DEPENDENTS: "filter_no_dependents",
    NO_DEPENDENCIES: "filter_no_dependencies",
}

# Plain multi-select dimensions and the FilterState attribute holding each
LIST_FIELDS: Dict[str, str] = {
    "creator": "creators",
    "category": "categories",
    "license_type": "license_types",
    "file_size": "file_size_buckets",
    "subfolder": "subfolders",
    "destination": "destinations",
    "playlist": "playlists",
}


class DamagedFilter(Enum):
    ALL = "All"
    DAMAGED_ONLY = "Damaged"
    VALID_ONLY = "Valid"


@dataclass
class FilterState:
    """Current selections. The only mutable object in a recomputation."""

    statuses: Set[str] = field(default_factory=set)
    creators: Set[str] = field(default_factory=set)
    categories: Set[str] = field(default_factory=set)
    license_types: Set[str] = field(default_factory=set)
    file_size_buckets: Set[str] = field(default_factory=set)
    subfolders: Set[str] = field(default_factory=set)
    destinations: Set[str] = field(default_factory=set)
    playlists: Set[str] = field(default_factory=set)

    optimization_statuses: Set[str] = field(default_factory=set)
    version_statuses: Set[str] = field(default_factory=set)
    favorite_statuses: Set[str] = field(default_factory=set)
    auto_install_statuses: Set[str] = field(default_factory=set)
    package_types: Set[str] = field(default_factory=set)

    filter_duplicates: bool = False
    filter_no_dependents: bool = False
    filter_no_dependencies: bool = False

    damaged_filter: DamagedFilter = DamagedFilter.ALL
    date_filter: DateFilter = field(default_factory=DateFilter)
    search_text: str = ""
    cascade_mode: bool = False

    def selection_for(self, dimension: str) -> Set[str]:
        if dimension == "status":
            return self._status_names()
        if dimension in LIST_FIELDS:
            return set(getattr(self, LIST_FIELDS[dimension]))
        if dimension == "date":
            return {self.date_filter.filter_type.value} if self.date_filter.is_active() else set()
        if dimension == "damaged":
            return set() if self.damaged_filter is DamagedFilter.ALL else {self.damaged_filter.value}
        raise UnknownDimensionError(dimension)

    def set_selection(self, dimension: str, values: Iterable[str]) -> None:
        names = [normalize_value_name(v) for v in values if v and str(v).strip()]
        if dimension == "status":
            self._route_status_names(names)
        elif dimension in LIST_FIELDS:
            setattr(self, LIST_FIELDS[dimension], set(names))
        elif dimension == "date":
            self.date_filter.filter_type = DateFilterType(names[0]) if names else DateFilterType.ALL_TIME
        elif dimension == "damaged":
            self.damaged_filter = DamagedFilter(names[0]) if names else DamagedFilter.ALL
        else:
            raise UnknownDimensionError(dimension)

    def has_active_selection(self, dimension: str) -> bool:
        return bool(self.selection_for(dimension))

    def is_empty(self) -> bool:
        return not any(self.selection_for(d) for d in DIMENSIONS) and not self.search_text.strip()

    def clear(self) -> None:
        cascade = self.cascade_mode
        fresh = FilterState(cascade_mode=cascade)
        self.__dict__.update(fresh.__dict__)

    def copy(self) -> "FilterState":
        dup = FilterState(
            damaged_filter=self.damaged_filter,
            date_filter=self.date_filter.copy(),
            search_text=self.search_text,
            cascade_mode=self.cascade_mode,
            filter_duplicates=self.filter_duplicates,
            filter_no_dependents=self.filter_no_dependents,
            filter_no_dependencies=self.filter_no_dependencies,
        )
        for attr in (*LIST_FIELDS.values(), "statuses", *set(_ROUTED_SETS.values())):
            setattr(dup, attr, set(getattr(self, attr)))
        return dup

    def _status_names(self) -> Set[str]:
        names = set(self.statuses)
        for attr in set(_ROUTED_SETS.values()):
            names |= getattr(self, attr)
        for name, flag in _ROUTED_FLAGS.items():
            if getattr(self, flag):
                names.add(name)
        return names

    def _route_status_names(self, names: Iterable[str]) -> None:
        self.statuses = set()
        for attr in set(_ROUTED_SETS.values()):
            setattr(self, attr, set())
        for flag in _ROUTED_FLAGS.values():
            setattr(self, flag, False)
        for name in names:
            if name in _ROUTED_FLAGS:
                setattr(self, _ROUTED_FLAGS[name], True)
            elif name in _ROUTED_SETS:
                getattr(self, _ROUTED_SETS[name]).add(name)
            else:
                self.statuses.add(name)
