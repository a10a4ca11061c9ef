"""YardScout - multi-branch salvage yard inventory search."""

from .models import SearchFilters, SearchResult, VehicleRecord
from .pipeline import InventoryAggregator, build_aggregator

__all__ = [
    "SearchFilters",
    "SearchResult",
    "VehicleRecord",
    "InventoryAggregator",
    "build_aggregator",
]

__version__ = "0.1.0"
