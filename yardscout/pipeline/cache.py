"""
Per-branch inventory cache - short-lived read-through memo of branch results.
"""
import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from ..models.branch import Branch
from ..models.vehicle import RawListing


logger = logging.getLogger(__name__)


CacheKey = tuple[str, str]


@dataclass
class CacheEntry:
    listings: list[RawListing]
    created_at: float


class InventoryCache:
    """
    Memoizes (branch code, query) -> listings for `ttl` seconds.

    Concurrent callers asking for the same key share one load: the first
    caller runs the loader, the others wait for its outcome. Failed loads
    are never stored. `clear()` drops everything at once, and loads that
    were already running when it was called do not repopulate the cache.
    """

    def __init__(
        self,
        ttl: float = 300.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        tags: Iterable[str] = ("vehicles",),
    ):
        self.ttl = ttl
        self.tags = frozenset(tags)
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._inflight: dict[CacheKey, Future] = {}
        self._generation = 0

    @staticmethod
    def normalize_query(query: str) -> str:
        return " ".join(query.split()).casefold()

    def key_for(self, branch: Branch, query: str) -> CacheKey:
        return (branch.code, self.normalize_query(query))

    def get_or_fetch(
        self,
        branch: Branch,
        query: str,
        loader: Callable[[], list[RawListing]],
    ) -> list[RawListing]:
        key = self.key_for(branch, query)

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                if self._clock() - entry.created_at < self.ttl:
                    return list(entry.listings)
                del self._entries[key]

            future: Optional[Future] = self._inflight.get(key)
            is_leader = future is None
            if is_leader:
                future = Future()
                self._inflight[key] = future
            generation = self._generation

        if not is_leader:
            logger.debug(f"Joining in-flight load for {key}")
            return list(future.result())

        try:
            listings = list(loader())
        except BaseException as e:
            self._release(key, future)
            future.set_exception(e)
            raise

        with self._lock:
            if generation == self._generation:
                self._entries[key] = CacheEntry(listings=listings, created_at=self._clock())
        self._release(key, future)
        future.set_result(listings)
        return list(listings)

    def clear(self) -> None:
        """Invalidate every entry regardless of age."""
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
            self._inflight.clear()
            self._generation += 1
        logger.info(f"Inventory cache cleared ({dropped} entries)")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _release(self, key: CacheKey, future: Future) -> None:
        with self._lock:
            if self._inflight.get(key) is future:
                del self._inflight[key]
