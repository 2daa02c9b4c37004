from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

try:
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[import]

from platformdirs import user_config_dir

from facetfilter.engine.filter_engine import FilterEngine
from facetfilter.engine.predicates import Memberships
from facetfilter.engine.text_matcher import DEFAULT_SEARCH_FIELDS
from facetfilter.model.date_filter import Clock
from facetfilter.service.size_buckets import SizeBucketClassifier


log = logging.getLogger(__name__)

APP_NAME = "facetfilter"
CONFIG_ENV = "FACETFILTER_CONFIG"
DEFAULTS_PATH = Path(__file__).with_name("defaults.toml")
USER_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / "engine.toml"
_DEFAULTS_CACHE: Dict[str, Any] | None = None


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        log.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}


def _load_defaults() -> Dict[str, Any]:
    global _DEFAULTS_CACHE
    if _DEFAULTS_CACHE is not None:
        return _DEFAULTS_CACHE
    _DEFAULTS_CACHE = _read_toml(DEFAULTS_PATH) if DEFAULTS_PATH.exists() else {}
    return _DEFAULTS_CACHE


def user_config_path() -> Path:
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env).expanduser()
    return USER_CONFIG_PATH


@dataclass
class EngineSettings:
    cascade_mode: bool = False
    search_fields: List[str] = field(default_factory=lambda: list(DEFAULT_SEARCH_FIELDS))
    file_size_buckets: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EngineSettings":
        settings = cls()
        if "cascade_mode" in data:
            settings.cascade_mode = bool(data["cascade_mode"])
        fields = data.get("search_fields")
        if fields:
            settings.search_fields = [str(f) for f in fields]
        buckets = data.get("file_size_buckets")
        if buckets:
            settings.file_size_buckets = [dict(b) for b in buckets]
        return settings

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "EngineSettings":
        merged: Dict[str, Any] = dict(_load_defaults())
        source = path or user_config_path()
        if source.exists():
            merged.update(_read_toml(source))
            log.debug("Loaded engine config from %s", source)
        return cls.from_mapping(merged)

    def size_classifier(self) -> Optional[SizeBucketClassifier]:
        return SizeBucketClassifier.from_config(self.file_size_buckets)


def build_engine(
    settings: EngineSettings,
    memberships: Optional[Memberships] = None,
    clock: Optional[Clock] = None,
) -> FilterEngine:
    return FilterEngine(
        memberships=memberships,
        size_classifier=settings.size_classifier(),
        clock=clock,
        search_fields=settings.search_fields,
    )
