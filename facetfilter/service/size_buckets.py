from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence, Tuple


Bucket = Tuple[str, Optional[int]]


class SizeBucketClassifier:
    """Maps a byte count to the first bucket whose upper bound covers it.

    Thresholds are configuration: nothing is assumed about what "Small" or
    "Large" means. A bound of ``None`` is unbounded.
    """

    def __init__(self, buckets: Sequence[Bucket]) -> None:
        self.buckets: List[Bucket] = [(str(label), bound) for label, bound in buckets]

    @property
    def labels(self) -> List[str]:
        return [label for label, _ in self.buckets]

    def __call__(self, size_bytes: int) -> Optional[str]:
        for label, bound in self.buckets:
            if bound is None or size_bytes <= bound:
                return label
        return None

    @classmethod
    def from_config(cls, entries: Sequence[Mapping[str, Any]]) -> Optional["SizeBucketClassifier"]:
        if not entries:
            return None
        buckets: List[Bucket] = []
        for entry in entries:
            bound = entry.get("max_bytes")
            buckets.append((str(entry["label"]), int(bound) if bound is not None else None))
        return cls(buckets)
