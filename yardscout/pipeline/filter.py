"""
Vehicle filter - declarative predicates and ordering over merged records.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ..models.search import SearchFilters, SortKey
from ..models.vehicle import VehicleRecord


logger = logging.getLogger(__name__)


_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def parse_available_date(value: str) -> Optional[datetime]:
    try:
        return _as_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except (ValueError, AttributeError):
        return None


def _in_set(value: str, accepted: list[str]) -> bool:
    wanted = {a.casefold() for a in accepted}
    return value.casefold() in wanted


def matches(record: VehicleRecord, filters: SearchFilters) -> bool:
    """True if the record satisfies every populated filter field."""
    if filters.makes and not _in_set(record.make, filters.makes):
        return False

    if filters.models and not _in_set(record.model, filters.models):
        return False

    if filters.colors and not _in_set(record.color, filters.colors):
        return False

    if filters.year_range is not None:
        min_year, max_year = filters.year_range
        if record.year < min_year or record.year > max_year:
            return False

    if filters.date_range is not None:
        start, end = (_as_utc(d) for d in filters.date_range)
        available = parse_available_date(record.available_date)
        if available is None or available < start or available > end:
            return False

    if filters.max_distance is not None and filters.user_location is not None:
        if record.branch.distance > filters.max_distance:
            return False

    return True


SORT_KEYS: dict[str, Callable[[VehicleRecord], Any]] = {
    "distance": lambda r: r.branch.distance,
    "date": lambda r: parse_available_date(r.available_date) or _EARLIEST,
    "year": lambda r: r.year,
    "make": lambda r: r.make.casefold(),
    "location": lambda r: r.branch.display_name.casefold(),
}


def sort_records(
    records: list[VehicleRecord],
    sort_by: Optional[SortKey],
    sort_order: str = "asc",
) -> list[VehicleRecord]:
    """Stable sort; without a key the input order is kept."""
    if sort_by is None:
        return list(records)
    return sorted(records, key=SORT_KEYS[sort_by], reverse=(sort_order == "desc"))


def apply_filters(records: list[VehicleRecord], filters: SearchFilters) -> list[VehicleRecord]:
    """
    Narrow and order records. Pure: the input list is not modified, and
    applying the same filters to the output changes nothing.
    """
    kept = [record for record in records if matches(record, filters)]
    logger.debug(f"Filter kept {len(kept)}/{len(records)} records")
    return sort_records(kept, filters.sort_by, filters.sort_order)
