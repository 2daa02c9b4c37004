from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


# Facet dimensions, in the order lists are presented
DIMENSIONS = (
    "status",
    "creator",
    "category",
    "license_type",
    "file_size",
    "subfolder",
    "destination",
    "playlist",
    "date",
    "damaged",
)

# Display label <-> value name. Lookups are case-insensitive on the label side.
LABEL_ALIASES: Dict[str, str] = {"Duplicates": "Duplicate"}
_ALIASES_CI: Dict[str, str] = {k.lower(): v for k, v in LABEL_ALIASES.items()}
_DISPLAY: Dict[str, str] = {v: k for k, v in LABEL_ALIASES.items()}


class UnknownDimensionError(KeyError):
    pass


def normalize_value_name(name: str) -> str:
    name = (name or "").strip()
    return _ALIASES_CI.get(name.lower(), name)


def display_label(value: str) -> str:
    return _DISPLAY.get(value, value)


@dataclass(frozen=True)
class FacetCount:
    value: str
    count: int
    group: str = ""  # status sub-predicate the row routes to


@dataclass
class FacetEntry:
    value: str
    count: int
    selected: bool = False
    group: str = ""

    @property
    def label(self) -> str:
        return display_label(self.value)


@dataclass
class FacetCounts:
    status: List[FacetCount] = field(default_factory=list)
    creator: List[FacetCount] = field(default_factory=list)
    category: List[FacetCount] = field(default_factory=list)
    license_type: List[FacetCount] = field(default_factory=list)
    file_size: List[FacetCount] = field(default_factory=list)
    subfolder: List[FacetCount] = field(default_factory=list)
    destination: List[FacetCount] = field(default_factory=list)
    playlist: List[FacetCount] = field(default_factory=list)
    date: List[FacetCount] = field(default_factory=list)
    damaged: List[FacetCount] = field(default_factory=list)

    def for_dimension(self, dimension: str) -> List[FacetCount]:
        if dimension not in DIMENSIONS:
            raise UnknownDimensionError(dimension)
        return getattr(self, dimension)

    def as_dict(self) -> Dict[str, Dict[str, int]]:
        """Plain ``{dimension: {value: count}}`` view, in list order."""
        return {d: {fc.value: fc.count for fc in getattr(self, d)} for d in DIMENSIONS}
