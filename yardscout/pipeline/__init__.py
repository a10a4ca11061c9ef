"""Pipeline modules for aggregation."""

from .cache import InventoryCache
from .filter import apply_filters
from .catalog import models_for_make, popular_makes
from .orchestrator import InventoryAggregator, build_aggregator

__all__ = [
    "InventoryCache",
    "apply_filters",
    "models_for_make",
    "popular_makes",
    "InventoryAggregator",
    "build_aggregator",
]
