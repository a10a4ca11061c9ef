"""
Command-line interface for YardScout.

Commands:
- search: run one aggregated search across every branch
- locations: list branches from the directory
- makes: show popular makes, or common models for one make
"""
import json
from enum import Enum
from typing import Optional

import typer

from .config import setup_logging
from .models.search import SearchFilters
from .pipeline.catalog import models_for_make, popular_makes
from .pipeline.orchestrator import build_aggregator


app = typer.Typer(help="Search salvage yard inventory across all branches")


class SortBy(str, Enum):
    distance = "distance"
    date = "date"
    year = "year"
    make = "make"
    location = "location"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


@app.callback()
def main(log_level: Optional[str] = typer.Option(None, "--log-level", help="Overrides LOG_LEVEL")):
    setup_logging(log_level)


@app.command()
def search(
    query: str = typer.Argument("", help="Free text sent to every branch"),
    make: list[str] = typer.Option([], "--make", help="Accepted make (repeatable)"),
    model: list[str] = typer.Option([], "--model", help="Accepted model (repeatable)"),
    color: list[str] = typer.Option([], "--color", help="Accepted color (repeatable)"),
    year_min: Optional[int] = typer.Option(None, "--year-min"),
    year_max: Optional[int] = typer.Option(None, "--year-max"),
    lat: Optional[float] = typer.Option(None, "--lat", help="Your latitude"),
    lng: Optional[float] = typer.Option(None, "--lng", help="Your longitude"),
    max_distance: Optional[float] = typer.Option(None, "--max-distance", help="Miles from --lat/--lng"),
    sort_by: Optional[SortBy] = typer.Option(None, "--sort-by", help="Sort key"),
    sort_order: SortOrder = typer.Option(SortOrder.asc, "--sort-order"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
):
    """Search every branch and print the merged result."""
    year_range = None
    if year_min is not None or year_max is not None:
        year_range = (year_min if year_min is not None else 0, year_max if year_max is not None else 9999)

    user_location = (lat, lng) if lat is not None and lng is not None else None

    filters = SearchFilters(
        query=query,
        makes=make,
        models=model,
        colors=color,
        year_range=year_range,
        max_distance=max_distance,
        user_location=user_location,
        sort_by=sort_by.value if sort_by is not None else None,
        sort_order=sort_order.value,
    )
    result = build_aggregator().search(filters)

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
        return

    for record in result.records:
        yard = record.yard_location
        typer.echo(
            f"{record.title:<40} {record.color:<12} {record.branch.display_name:<20} "
            f"sec {yard.section or '-'} row {yard.row or '-'} space {yard.space or '-'}  {record.details_url}"
        )
    typer.echo(
        f"{result.total_count} vehicles from {result.locations_covered} branches "
        f"in {result.elapsed_ms:.0f}ms"
    )
    if result.locations_with_errors:
        typer.echo(f"Branches with errors: {', '.join(result.locations_with_errors)}", err=True)


@app.command()
def locations(
    state: list[str] = typer.Option([], "--state", help="State abbreviation (repeatable)"),
    text: Optional[str] = typer.Option(None, "--search", help="Match name, city or state"),
):
    """List branches known to the directory."""
    directory = build_aggregator().directory
    if state:
        branches = directory.by_region(state)
    elif text:
        branches = directory.search(text)
    else:
        branches = directory.list()

    for branch in branches:
        typer.echo(f"{branch.code:<6} {branch.display_name:<24} {branch.city}, {branch.state_abbr}")
    typer.echo(f"{len(branches)} branches")


@app.command()
def makes(make: Optional[str] = typer.Argument(None, help="Show models for this make")):
    """Show popular makes, or common models for one make."""
    values = models_for_make(make) if make else popular_makes()
    typer.echo(json.dumps(values))


if __name__ == "__main__":
    app()
