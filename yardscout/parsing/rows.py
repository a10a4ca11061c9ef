"""
Row extractor - the only place that knows the inventory page markup.

If the upstream page changes, this is the file to edit; the parser only
talks to `RowExtractor` and never selects elements itself.
"""
from dataclasses import dataclass
from typing import Iterator, Optional

from bs4 import BeautifulSoup, Tag


HTML_PARSER = "lxml"


@dataclass
class GalleryLink:
    href: str
    thumb: str


class RowExtractor:
    """Structural selectors for one branch inventory fragment."""

    ROW = ".pypvi_resultRow"
    TITLE = ".pypvi_ymm"
    DETAIL_ITEM = ".pypvi_detailItem"
    MAIN_IMAGE = ".pypvi_image img"
    GALLERY_LINK = "a[data-fancybox]"
    AVAILABLE_LABEL = "Available:"

    def __init__(self, parser: str = HTML_PARSER):
        self.parser = parser

    def load(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, self.parser)

    def rows(self, soup: BeautifulSoup) -> Iterator[tuple[Optional[str], Tag]]:
        """Yield (row id, row element) for every listing row."""
        for row in soup.select(self.ROW):
            row_id = row.get("id")
            yield (row_id.strip() if isinstance(row_id, str) and row_id.strip() else None), row

    def title(self, row: Tag) -> Optional[str]:
        node = row.select_one(self.TITLE)
        return node.get_text() if node else None

    def details(self, row: Tag) -> list[str]:
        """Raw text of every "Label: value" fragment, whitespace untouched."""
        return [item.get_text() for item in row.select(self.DETAIL_ITEM)]

    def available_datetime(self, row: Tag) -> Optional[str]:
        for item in row.select(self.DETAIL_ITEM):
            if self.AVAILABLE_LABEL not in item.get_text():
                continue
            time_node = item.find("time")
            value = time_node.get("datetime") if time_node else None
            return value.strip() if isinstance(value, str) and value.strip() else None
        return None

    def main_image_src(self, row: Tag) -> Optional[str]:
        img = row.select_one(self.MAIN_IMAGE)
        src = img.get("src") if img else None
        return src if isinstance(src, str) and src else None

    def gallery(self, row: Tag) -> list[GalleryLink]:
        links = []
        for link in row.select(self.GALLERY_LINK):
            href = link.get("href")
            thumb = link.get("data-thumb")
            if href and thumb:
                links.append(GalleryLink(href=href, thumb=thumb))
        return links
