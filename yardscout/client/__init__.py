"""Upstream clients: HTTP fetching, branch directory and inventory pages."""

from .http import FetchError, HttpFetcher
from .locations import LocationDirectory
from .inventory import InventoryClient

__all__ = [
    "FetchError",
    "HttpFetcher",
    "LocationDirectory",
    "InventoryClient",
]
