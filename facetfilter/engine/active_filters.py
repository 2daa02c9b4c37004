from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List

from facetfilter.model.facet_counts import display_label
from facetfilter.model.filter_state import DamagedFilter, FilterState


# Dimension -> chip prefix, in the order chips are listed
_KINDS = (
    ("status", "Status"),
    ("creator", "Creator"),
    ("category", "Type"),
    ("license_type", "License"),
    ("file_size", "Size"),
    ("subfolder", "Subfolder"),
    ("destination", "Destination"),
    ("playlist", "Playlist"),
)


@dataclass(frozen=True)
class ActiveFilterToken:
    kind: str  # dimension name, or "damaged" / "date" / "search"
    label: str
    value: str


def active_filter_tokens(state: FilterState, now: datetime) -> List[ActiveFilterToken]:
    tokens: List[ActiveFilterToken] = []
    for dimension, prefix in _KINDS:
        for value in sorted(state.selection_for(dimension)):
            tokens.append(ActiveFilterToken(dimension, f"{prefix}: {display_label(value)}", value))
    if state.damaged_filter is not DamagedFilter.ALL:
        value = state.damaged_filter.value
        tokens.append(ActiveFilterToken("damaged", f"Damaged: {value}", value))
    if state.date_filter.is_active():
        description = state.date_filter.get_description(now)
        tokens.append(ActiveFilterToken("date", f"Date: {description}", state.date_filter.filter_type.value))
    text = state.search_text.strip()
    if text:
        tokens.append(ActiveFilterToken("search", f"Search: {text}", text))
    return tokens


def remove_active_filter(state: FilterState, token: ActiveFilterToken) -> None:
    """Clear exactly the selection one chip stands for."""
    if token.kind == "damaged":
        state.damaged_filter = DamagedFilter.ALL
    elif token.kind == "date":
        state.date_filter.clear()
    elif token.kind == "search":
        state.search_text = ""
    else:
        remaining = state.selection_for(token.kind)
        remaining.discard(token.value)
        state.set_selection(token.kind, remaining)
