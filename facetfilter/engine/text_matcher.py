from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from facetfilter.model.item import Item


DEFAULT_SEARCH_FIELDS = ("name", "creator")


def tokenize(text: str) -> List[str]:
    # Simple tokenizer: lowercase whitespace tokens, empties dropped
    return [t for t in (text or "").lower().split() if t]


def matches(text: str, fields: Iterable[Optional[str]]) -> bool:
    """AND across tokens, OR across fields, plain substring comparison."""
    tokens = tokenize(text)
    if not tokens:
        return True
    haystacks = [f.lower() for f in fields if f]
    return all(any(tok in h for h in haystacks) for tok in tokens)


class TextMatcher:
    def __init__(self, fields: Sequence[str] = DEFAULT_SEARCH_FIELDS) -> None:
        self.fields = tuple(fields)

    def field_values(self, item: Item) -> List[Optional[str]]:
        out: List[Optional[str]] = []
        for name in self.fields:
            value = getattr(item, name, None)
            if isinstance(value, (set, frozenset, list, tuple)):
                out.extend(str(v) for v in value)
            elif value is not None:
                out.append(str(value))
        return out

    def matches(self, item: Item, text: str) -> bool:
        if not text or not text.strip():
            return True
        return matches(text, self.field_values(item))
