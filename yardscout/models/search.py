"""
Search models - the query contract and its result snapshot.
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .vehicle import VehicleRecord


SortKey = Literal["distance", "date", "year", "make", "location"]


class SearchFilters(BaseModel):
    """
    Everything a caller can ask of a search.
    Empty or missing fields impose no constraint.
    """
    query: str = Field(default="", description="Free text forwarded to every branch")

    makes: list[str] = Field(default_factory=list)
    models: list[str] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)

    # Inclusive ranges; an inverted range simply matches nothing
    year_range: Optional[tuple[int, int]] = None
    date_range: Optional[tuple[datetime, datetime]] = None

    # Distance only applies when both are given
    max_distance: Optional[float] = Field(default=None, description="Miles")
    user_location: Optional[tuple[float, float]] = Field(default=None, description="(lat, lng)")

    sort_by: Optional[SortKey] = None
    sort_order: Literal["asc", "desc"] = "asc"


class SearchResult(BaseModel):
    """Fully materialized outcome of one search call."""
    records: list[VehicleRecord] = Field(default_factory=list)
    total_count: int = 0
    elapsed_ms: float = Field(default=0.0, description="Wall-clock time of the whole search")
    locations_covered: int = 0
    locations_with_errors: list[str] = Field(default_factory=list)
