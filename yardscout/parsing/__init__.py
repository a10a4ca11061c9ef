"""HTML parsing for branch inventory pages."""

from .rows import RowExtractor
from .inventory import parse_inventory, parse_title

__all__ = [
    "RowExtractor",
    "parse_inventory",
    "parse_title",
]
