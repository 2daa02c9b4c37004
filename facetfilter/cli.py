from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Tuple

import typer

from facetfilter.config.settings import EngineSettings, build_engine
from facetfilter.engine.facet_counter import FacetCounter
from facetfilter.engine.predicates import Memberships
from facetfilter.model.date_filter import DateFilterType
from facetfilter.model.facet_counts import DIMENSIONS, display_label
from facetfilter.model.item import Item
from facetfilter.service.session import FilterSession

app = typer.Typer(help="facetfilter developer CLI")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine internals.")) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="[%(levelname)s] %(message)s")


def _load_catalog(path: Path) -> Tuple[List[Item], Memberships]:
    data: Any = json.loads(path.read_text("utf-8"))
    if isinstance(data, list):
        return [Item.from_dict(d) for d in data], Memberships()
    memberships = Memberships(
        favorites=set(data["favorites"]) if "favorites" in data else None,
        auto_install=set(data["auto_install"]) if "auto_install" in data else None,
        playlists={name: set(keys) for name, keys in (data.get("playlists") or {}).items()},
    )
    return [Item.from_dict(d) for d in data.get("items", [])], memberships


@app.command()
def inspect(
    catalog: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON list of items, or an object with 'items'."),
    status: Optional[List[str]] = typer.Option(None, "--status", help="Status-list value (repeatable)."),
    creator: Optional[List[str]] = typer.Option(None, "--creator"),
    category: Optional[List[str]] = typer.Option(None, "--category"),
    license_type: Optional[List[str]] = typer.Option(None, "--license"),
    subfolder: Optional[List[str]] = typer.Option(None, "--subfolder"),
    search: str = typer.Option("", "--search", help="Free-text search."),
    date: DateFilterType = typer.Option(DateFilterType.ALL_TIME, "--date"),
    cascade: Optional[bool] = typer.Option(None, "--cascade/--flat", help="Facet count mode (default from config)."),
    config: Optional[Path] = typer.Option(None, "--config", help="Engine TOML config."),
    show_items: bool = typer.Option(False, "--items", help="Also list matching item keys."),
) -> None:
    """Filter a catalog file and print facet counts."""
    settings = EngineSettings.load(config)
    items, memberships = _load_catalog(catalog)
    engine = build_engine(settings, memberships=memberships)
    session = FilterSession(items, engine=engine, counter=FacetCounter(engine))
    state = session.state
    state.cascade_mode = settings.cascade_mode if cascade is None else cascade
    state.set_selection("status", status or [])
    state.set_selection("creator", creator or [])
    state.set_selection("category", category or [])
    state.set_selection("license_type", license_type or [])
    state.set_selection("subfolder", subfolder or [])
    state.search_text = search
    state.date_filter.filter_type = date
    result = session.recompute()

    typer.echo(f"{len(result.filtered)} of {len(items)} items")
    typer.echo(session.date_description())
    for token in session.active_filters():
        typer.echo(f"  [{token.label}]")
    for dimension in DIMENSIONS:
        entries = result.facet_lists[dimension]
        if not entries:
            continue
        typer.echo(f"\n{dimension}:")
        for entry in entries:
            mark = "*" if entry.selected else " "
            typer.echo(f" {mark} {display_label(entry.value)} ({entry.count:,})")
    if show_items:
        typer.echo("")
        for item in result.filtered:
            typer.echo(item.key)


if __name__ == "__main__":
    sys.exit(app())
