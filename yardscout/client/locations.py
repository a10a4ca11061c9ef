"""
Location directory - the list of branches every search fans out to.
"""
from __future__ import annotations

import json
import logging
import re
import threading
import time
from typing import Callable, Iterable, Optional

import numpy as np
from pydantic import ValidationError

from ..models.branch import Branch, BranchUrls
from .http import FetchError, HttpFetcher


logger = logging.getLogger(__name__)


EARTH_RADIUS_MILES = 3959.0

# Matches both "var _locationList = [" and "var _locationList=["
_LOCATION_LIST_PATTERN = re.compile(r"var\s+_locationList\s*=\s*(\[.*?\]);", re.DOTALL)


FALLBACK_BRANCHES: tuple[Branch, ...] = (
    Branch(
        code="1223",
        name="LKQ Pick Your Part - Huntsville",
        display_name="Huntsville",
        page_url="https://locations.lkqpickyourpart.com/en-us/al/huntsville/6942-stringfield-rd-nw/",
        address="6942 Stringfield Rd.",
        city="Huntsville",
        state="Alabama",
        state_abbr="AL",
        zip="35806",
        phone="(800) 962-2277",
        lat=34.77887,
        lng=-86.652217,
        legacy_code="223",
        urls=BranchUrls(
            store="https://locations.lkqpickyourpart.com/en-us/al/huntsville/6942-stringfield-rd-nw/",
            interchange="/parts/huntsville-1223/",
            inventory="/inventory/huntsville-1223/",
            prices="/prices/huntsville-1223/",
            directions=(
                "https://www.google.com/maps/dir/?api=1&destination=6942+Stringfield+Rd."
                "+Huntsville+Alabama+35806&dir_action=navigate"
            ),
            sell_a_car="/sellacar/huntsville-1223/",
            contact="/contact/huntsville-1223/",
            deals="/deals/huntsville-1223/",
            parts="/parts/huntsville-1223/",
        ),
    ),
)


def haversine_miles(lat: float, lng: float, lats: Iterable[float], lngs: Iterable[float]) -> np.ndarray:
    """Great-circle distance in miles from one point to many."""
    lat1, lng1 = np.radians(lat), np.radians(lng)
    lat2 = np.radians(np.asarray(list(lats), dtype=float))
    lng2 = np.radians(np.asarray(list(lngs), dtype=float))

    a = (
        np.sin((lat2 - lat1) / 2) ** 2
        + np.cos(lat1) * np.cos(lat2) * np.sin((lng2 - lng1) / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))


def with_distances(branches: list[Branch], lat: float, lng: float) -> list[Branch]:
    """Copies of `branches` with distance from (lat, lng) filled in."""
    if not branches:
        return []
    distances = haversine_miles(lat, lng, [b.lat for b in branches], [b.lng for b in branches])
    return [branch.with_distance(float(d)) for branch, d in zip(branches, distances)]


def parse_location_list(html: str) -> list[Branch]:
    """
    Extract the embedded `_locationList` array from the directory page.

    Entries that fail validation are logged and skipped; the rest are kept.

    Raises:
        ValueError: if the variable is missing, not JSON, or yields no branches
    """
    match = _LOCATION_LIST_PATTERN.search(html)
    if not match:
        raise ValueError("Could not find _locationList in HTML")

    payload = json.loads(match.group(1))
    if not isinstance(payload, list):
        raise ValueError("_locationList is not an array")

    branches = []
    for index, item in enumerate(payload):
        try:
            branches.append(Branch.model_validate(item))
        except ValidationError as e:
            code = item.get("LocationCode") if isinstance(item, dict) else None
            logger.warning(f"Skipping location {index} (code {code!r}): {e}")

    if not branches:
        raise ValueError(f"_locationList has no usable entries ({len(payload)} in payload)")
    return branches


class LocationDirectory:
    """
    Supplies the branch list, refreshed on a long cycle.

    Availability wins over freshness: a failed refresh serves the last good
    snapshot, or the bundled fallback list when nothing was ever fetched.
    """

    def __init__(
        self,
        fetcher: HttpFetcher,
        *,
        base_url: str,
        location_page: str = "/inventory/",
        user_agent: Optional[str] = None,
        ttl: float = 24 * 60 * 60,
        retry_interval: float = 5 * 60,
        clock: Callable[[], float] = time.monotonic,
        fallback: Iterable[Branch] = FALLBACK_BRANCHES,
    ):
        self.fetcher = fetcher
        self.url = f"{base_url.rstrip('/')}{location_page}"
        self.user_agent = user_agent
        self.ttl = ttl
        self.retry_interval = retry_interval
        self._clock = clock
        self._fallback = list(fallback)

        self._lock = threading.Lock()
        self._refresh_lock = threading.Lock()
        self._snapshot: Optional[list[Branch]] = None
        self._fetched_at = 0.0
        self._retry_after: Optional[float] = None

    def list(self) -> list[Branch]:
        """
        Return all branches. Never raises.

        Only one caller refreshes at a time, and the network call runs
        outside the snapshot lock. While a refresh is running, callers that
        already have a snapshot to serve get it straight away; only callers
        with nothing to serve wait for the refresh.
        """
        with self._lock:
            served = self._serve_without_fetch(self._clock())
            if served is not None:
                return served
            have_snapshot = self._snapshot is not None

        if not self._refresh_lock.acquire(blocking=not have_snapshot):
            with self._lock:
                return self._stale_or_fallback()

        try:
            with self._lock:
                now = self._clock()
                # Another caller may have finished a refresh while we waited
                served = self._serve_without_fetch(now)
                if served is not None:
                    return served

            try:
                branches = self._fetch()
            except (FetchError, ValueError) as e:
                # JSONDecodeError is a ValueError
                logger.warning(f"Location directory refresh failed: {e}")
                with self._lock:
                    self._retry_after = now + self.retry_interval
                    return self._stale_or_fallback()

            logger.info(f"Location directory refreshed: {len(branches)} branches")
            with self._lock:
                self._snapshot = branches
                self._fetched_at = now
                self._retry_after = None
            return list(branches)
        finally:
            self._refresh_lock.release()

    def clear(self) -> None:
        """Forget the snapshot so the next call refetches."""
        with self._lock:
            self._snapshot = None
            self._fetched_at = 0.0
            self._retry_after = None
        logger.info("Location directory cleared")

    def _fetch(self) -> list[Branch]:
        headers = {"User-Agent": self.user_agent} if self.user_agent else None
        response = self.fetcher.fetch(self.url, headers=headers)
        return parse_location_list(response.text)

    def _serve_without_fetch(self, now: float) -> Optional[list[Branch]]:
        if self._snapshot is not None and now - self._fetched_at < self.ttl:
            return list(self._snapshot)
        if self._retry_after is not None and now < self._retry_after:
            return self._stale_or_fallback()
        return None

    def _stale_or_fallback(self) -> list[Branch]:
        if self._snapshot is not None:
            logger.info("Serving stale location directory")
            return list(self._snapshot)
        logger.info("Serving built-in fallback locations")
        return list(self._fallback)

    # Read-only views

    def get(self, code: str) -> Optional[Branch]:
        return next((b for b in self.list() if b.code == code), None)

    def by_region(self, state_abbrs: Iterable[str]) -> list[Branch]:
        wanted = {s.upper() for s in state_abbrs}
        return [b for b in self.list() if b.state_abbr.upper() in wanted]

    def within_radius(self, lat: float, lng: float, max_miles: float) -> list[Branch]:
        """Branches within `max_miles`, nearest first."""
        nearby = [b for b in with_distances(self.list(), lat, lng) if b.distance <= max_miles]
        return sorted(nearby, key=lambda b: b.distance)

    def search(self, text: str) -> list[Branch]:
        """Case-insensitive match against display name, city and state."""
        needle = text.strip().lower()
        if not needle:
            return []
        return [
            b for b in self.list()
            if needle in b.display_name.lower()
            or needle in b.city.lower()
            or needle in b.state.lower()
        ]

    def regions(self) -> list[dict]:
        """States that have branches, with branch counts, sorted by name."""
        counts: dict[str, dict] = {}
        for branch in self.list():
            entry = counts.setdefault(branch.state_abbr, {"code": branch.state_abbr, "name": branch.state, "count": 0})
            entry["count"] += 1
        return sorted(counts.values(), key=lambda r: r["name"])
