"""
Aggregation orchestrator - fans one search out to every branch and merges.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Protocol

from ..models.branch import Branch
from ..models.search import SearchFilters, SearchResult
from ..models.vehicle import RawListing, VehicleRecord
from ..config import Config, get_config
from ..client.http import HttpFetcher
from ..client.inventory import InventoryClient
from ..client.locations import LocationDirectory, with_distances
from .cache import InventoryCache
from .filter import apply_filters


logger = logging.getLogger(__name__)


class ListingSource(Protocol):
    def fetch_listings(self, branch: Branch, query: str) -> list[RawListing]: ...


class InventoryAggregator:
    """
    The single entry point presentation code calls.

    Every search resolves the branch directory, runs one task per branch on
    a pool no larger than `max_concurrency`, waits for every task to settle
    and merges whatever succeeded. A failing branch is recorded in
    `locations_with_errors` and never affects its siblings.
    """

    def __init__(
        self,
        directory: LocationDirectory,
        source: ListingSource,
        cache: InventoryCache,
        *,
        max_concurrency: int = 5,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.directory = directory
        self.source = source
        self.cache = cache
        self.max_concurrency = max_concurrency

    def search(self, filters: SearchFilters) -> SearchResult:
        started = time.perf_counter()

        branches = self.directory.list()
        if filters.user_location is not None:
            branches = with_distances(branches, *filters.user_location)

        logger.info(f"Searching {len(branches)} branches for {filters.query!r}")
        outcomes = self._fan_out(branches, filters.query)

        records: list[VehicleRecord] = []
        seen: set[tuple[str, str]] = set()
        errors: list[str] = []
        for branch, outcome in zip(branches, outcomes):
            if isinstance(outcome, Exception):
                errors.append(branch.code)
                continue
            for listing in outcome:
                record = VehicleRecord.from_listing(listing, branch)
                if record.key in seen:
                    continue
                seen.add(record.key)
                records.append(record)

        results = apply_filters(records, filters)
        elapsed_ms = (time.perf_counter() - started) * 1000.0

        logger.info(
            f"Search completed: {len(results)}/{len(records)} vehicles, "
            f"{len(errors)} branch errors, {elapsed_ms:.0f}ms"
        )
        return SearchResult(
            records=results,
            total_count=len(results),
            elapsed_ms=elapsed_ms,
            locations_covered=len(branches) - len(errors),
            locations_with_errors=errors,
        )

    def get_vehicle(self, branch_code: str, vehicle_id: str) -> Optional[VehicleRecord]:
        """Look up one vehicle in one branch's unfiltered inventory."""
        branch = self.directory.get(branch_code)
        if branch is None:
            return None
        try:
            listings = self._load(branch, "")
        except Exception as e:
            logger.warning(f"Could not load inventory for {branch_code}: {e}")
            return None
        listing = next((l for l in listings if l.id == vehicle_id), None)
        return VehicleRecord.from_listing(listing, branch) if listing is not None else None

    def revalidate(self, tag: str) -> None:
        """Operator trigger: force-refresh data answering to `tag`."""
        if tag in self.cache.tags:
            self.cache.clear()
        elif tag == "locations":
            self.directory.clear()
        else:
            logger.warning(f"Unknown revalidation tag: {tag!r}")

    def _load(self, branch: Branch, query: str) -> list[RawListing]:
        return self.cache.get_or_fetch(
            branch,
            query,
            lambda: self.source.fetch_listings(branch, query),
        )

    def _fan_out(self, branches: list[Branch], query: str) -> list[list[RawListing] | Exception]:
        """Run every branch task and return settled outcomes in branch order."""
        if not branches:
            return []

        outcomes: list[list[RawListing] | Exception] = []
        with ThreadPoolExecutor(max_workers=self.max_concurrency, thread_name_prefix="branch") as pool:
            futures = [pool.submit(self._load, branch, query) for branch in branches]
            for branch, future in zip(branches, futures):
                try:
                    outcomes.append(future.result())
                except Exception as e:
                    logger.warning(f"Branch {branch.code} failed: {e!r}")
                    outcomes.append(e)
        return outcomes


def build_aggregator(config: Optional[Config] = None) -> InventoryAggregator:
    """Wire the production dependency graph from configuration."""
    config = config or get_config()
    upstream, search, cache = config.upstream, config.search, config.cache

    fetcher = HttpFetcher(
        timeout=search.request_timeout,
        max_attempts=search.max_retries,
        base_delay=search.base_retry_delay,
        max_delay=search.max_retry_delay,
        request_delay=search.request_delay,
    )
    directory = LocationDirectory(
        fetcher,
        base_url=upstream.base_url,
        location_page=upstream.location_page,
        user_agent=upstream.user_agent,
        ttl=cache.directory_ttl,
        retry_interval=cache.directory_retry_interval,
    )
    source = InventoryClient(
        fetcher,
        base_url=upstream.base_url,
        inventory_path=upstream.inventory_path,
        user_agent=upstream.user_agent,
    )
    return InventoryAggregator(
        directory,
        source,
        InventoryCache(ttl=cache.inventory_ttl),
        max_concurrency=search.max_concurrent_requests,
    )
