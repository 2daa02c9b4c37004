from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple


class PackageStatus(Enum):
    LOADED = "Loaded"
    AVAILABLE = "Available"
    MISSING = "Missing"
    OUTDATED = "Outdated"
    UPDATING = "Updating"
    ARCHIVED = "Archived"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, raw: object) -> "PackageStatus":
        if isinstance(raw, PackageStatus):
            return raw
        text = str(raw or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return cls.UNKNOWN


@dataclass(frozen=True)
class Item:
    """One catalog entry, read-only for the duration of a recomputation."""

    key: str
    name: str = ""
    status: PackageStatus = PackageStatus.UNKNOWN
    creator: str = ""
    categories: FrozenSet[str] = field(default_factory=frozenset)
    license_type: str = ""
    file_size_bytes: int = 0
    subfolder: str = ""
    modified_date: Optional[datetime] = None
    created_date: Optional[datetime] = None
    is_duplicate: bool = False
    is_old_version: bool = False
    external_destination_name: str = ""
    is_damaged: bool = False
    dependency_count: int = 0
    dependents_count: int = 0
    is_optimized: bool = False

    @property
    def is_external(self) -> bool:
        return bool(self.external_destination_name)

    @property
    def effective_date(self) -> Optional[datetime]:
        # Modified date wins; created date is the fallback
        return self.modified_date or self.created_date

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Item":
        key = str(data.get("key") or data.get("name") or "")
        return cls(
            key=key,
            name=str(data.get("name") or key),
            status=PackageStatus.parse(data.get("status")),
            creator=str(data.get("creator") or ""),
            categories=frozenset(str(c) for c in (data.get("categories") or []) if c),
            license_type=str(data.get("license_type") or ""),
            file_size_bytes=int(data.get("file_size_bytes") or 0),
            subfolder=str(data.get("subfolder") or ""),
            modified_date=_parse_date(data.get("modified_date")),
            created_date=_parse_date(data.get("created_date")),
            is_duplicate=bool(data.get("is_duplicate", False)),
            is_old_version=bool(data.get("is_old_version", False)),
            external_destination_name=str(data.get("external_destination_name") or ""),
            is_damaged=bool(data.get("is_damaged", False)),
            dependency_count=int(data.get("dependency_count") or 0),
            dependents_count=int(data.get("dependents_count") or 0),
            is_optimized=bool(data.get("is_optimized", False)),
        )


def _parse_date(raw: object) -> Optional[datetime]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw
    return datetime.fromisoformat(str(raw))


CatalogSnapshot = Tuple[Item, ...]


def snapshot(items: Iterable[Item]) -> CatalogSnapshot:
    """Freeze any iterable of items into an immutable, ordered snapshot."""
    if isinstance(items, tuple):
        return items
    return tuple(items)
