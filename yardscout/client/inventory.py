"""
Inventory client - fetches and parses one branch's inventory page.
"""
import logging
from typing import Optional

from ..models.branch import Branch
from ..models.vehicle import RawListing
from ..parsing.inventory import parse_inventory
from ..parsing.rows import RowExtractor
from .http import HttpFetcher


logger = logging.getLogger(__name__)


class InventoryClient:
    """
    Calls the branch inventory endpoint the way the inventory page's own
    script does; the endpoint rejects requests that do not look like an
    in-page AJAX call.
    """

    def __init__(
        self,
        fetcher: HttpFetcher,
        *,
        base_url: str,
        inventory_path: str,
        user_agent: str,
        extractor: Optional[RowExtractor] = None,
    ):
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")
        self.endpoint = f"{self.base_url}{inventory_path}"
        self.user_agent = user_agent
        self.extractor = extractor or RowExtractor()

    def headers_for(self, branch: Branch) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "X-Requested-With": "XMLHttpRequest",
            "Referer": f"{self.base_url}{branch.urls.inventory}",
            "Origin": self.base_url,
            "DNT": "1",
            "Sec-Fetch-Dest": "empty",
            "Sec-Fetch-Mode": "cors",
            "Sec-Fetch-Site": "same-origin",
            "Cache-Control": "no-cache",
        }

    def fetch_listings(self, branch: Branch, query: str) -> list[RawListing]:
        """
        Fetch and parse one branch's inventory for a free-text filter.

        Raises:
            FetchError: if the branch could not be reached
        """
        params = {"page": "1", "filter": query, "store": branch.code}
        response = self.fetcher.fetch(self.endpoint, params=params, headers=self.headers_for(branch))
        listings = parse_inventory(response.text, branch, base_url=self.base_url, extractor=self.extractor)
        logger.info(f"Branch {branch.code}: {len(listings)} vehicles for {query!r}")
        return listings
