"""
Pydantic models for YardScout.
All data contracts are defined here for strict validation.
"""

from .branch import Branch, BranchUrls
from .vehicle import ImageType, RawListing, VehicleImage, VehicleRecord, YardLocation
from .search import SearchFilters, SearchResult, SortKey

__all__ = [
    # Branch
    "Branch",
    "BranchUrls",
    # Vehicle
    "ImageType",
    "RawListing",
    "VehicleImage",
    "VehicleRecord",
    "YardLocation",
    # Search
    "SearchFilters",
    "SearchResult",
    "SortKey",
]
