"""
Inventory parser - turns one branch's inventory HTML into RawListings.

One bad row never aborts the batch: rows are parsed independently and any
row that raises is logged and dropped.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Callable, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..models.branch import Branch
from ..models.vehicle import ImageType, RawListing, VehicleImage, YardLocation
from .rows import RowExtractor


logger = logging.getLogger(__name__)


# str patterns are unicode-aware, so \s also covers non-breaking spaces
_WHITESPACE = re.compile(r"\s+")
_MULTI_SPACE = re.compile(r"\s{2,}")

# Server-side resize parameters on thumbnail URLs
CROP_PARAMS = frozenset({"w", "h", "mode"})

# Order matters: compound positions must win over their single-word prefixes
IMAGE_KEYWORDS: tuple[ImageType, ...] = (
    "CAR-FRONT-LEFT",
    "CAR-BACK-LEFT",
    "CAR-BACK-RIGHT",
    "CAR-FRONT-RIGHT",
    "CAR-BACK",
    "CAR-FRONT",
    "CAR-LEFT",
    "CAR-RIGHT",
    "ENGINE",
    "INTERIOR",
)

COLOR_LABEL = "Color:"
VIN_LABEL = "VIN:"
STOCK_LABEL = "Stock #:"
SECTION_LABEL = "Section:"
ROW_LABEL = "Row:"
SPACE_LABEL = "Space:"


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def slugify(text: str) -> str:
    return "-".join(text.lower().split())


def parse_title(text: str) -> Optional[tuple[int, str, str]]:
    """
    Split "<year> <make> <model...>" into its parts.
    Returns None unless there is a numeric year, a make and a model.
    """
    tokens = normalize_whitespace(text).split(" ")
    if len(tokens) < 3 or not tokens[0].isdigit():
        return None
    return int(tokens[0]), tokens[1], " ".join(tokens[2:])


def _labeled_value(fragments: list[str], label: str) -> Optional[str]:
    for text in fragments:
        if label in text:
            return normalize_whitespace(text.replace(label, "", 1))
    return None


def parse_yard_location(text: str) -> YardLocation:
    """Parse "Section: A  Row: 3  Space: 12" into its three parts."""
    parts: list[str] = []
    for piece in _MULTI_SPACE.split(text):
        piece = piece.strip()
        if not piece:
            continue
        # A bare label was split from its value by layout whitespace
        if parts and parts[-1] in (SECTION_LABEL, ROW_LABEL, SPACE_LABEL):
            parts[-1] = f"{parts[-1]} {piece}"
        else:
            parts.append(piece)

    return YardLocation(
        section=_labeled_value(parts, SECTION_LABEL) or "",
        row=_labeled_value(parts, ROW_LABEL) or "",
        space=_labeled_value(parts, SPACE_LABEL) or "",
    )


def canonical_image_url(url: str) -> str:
    """Drop resize parameters to get the full-resolution image."""
    parts = urlsplit(url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key.lower() not in CROP_PARAMS
    ]
    return urlunsplit(parts._replace(query=urlencode(query)))


def classify_image(url: str) -> ImageType:
    upper = url.upper()
    for keyword in IMAGE_KEYWORDS:
        if keyword in upper:
            return keyword
    return "OTHER"


def build_links(year: int, make: str, model: str, branch: Branch, base_url: str) -> dict[str, str]:
    base = base_url.rstrip("/")
    return {
        "details_url": f"{base}{branch.urls.inventory}{year}-{slugify(make)}-{slugify(model)}/",
        "parts_url": f"{base}{branch.urls.parts}?{urlencode({'year': year, 'make': make, 'model': model})}",
        "prices_url": f"{base}{branch.urls.prices}",
    }


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_inventory(
    html: str,
    branch: Branch,
    *,
    base_url: str,
    extractor: Optional[RowExtractor] = None,
    now: Callable[[], datetime] = _utc_now,
) -> list[RawListing]:
    """
    Parse a branch inventory fragment.

    Args:
        html: Inventory HTML as served by the branch
        branch: Branch the page belongs to (used for outbound links)
        base_url: Site root the branch URL templates are relative to
        extractor: Markup selectors, defaults to RowExtractor()
        now: Clock used when a row carries no availability date

    Returns:
        Every row that parsed; never raises
    """
    extractor = extractor or RowExtractor()
    listings: list[RawListing] = []

    try:
        soup = extractor.load(html)
        rows = list(extractor.rows(soup))
    except Exception as e:
        logger.warning(f"Unparseable inventory document for {branch.code}: {e}")
        return listings

    for row_id, row in rows:
        if not row_id:
            continue
        try:
            listing = _parse_row(extractor, row, row_id, branch, base_url, now)
        except Exception as e:
            logger.warning(f"Skipping vehicle row {row_id} at {branch.code}: {e}")
            continue
        if listing is not None:
            listings.append(listing)

    logger.debug(f"Parsed {len(listings)}/{len(rows)} rows for {branch.code}")
    return listings


def _parse_row(extractor, row, row_id, branch, base_url, now) -> Optional[RawListing]:
    title_text = extractor.title(row)
    if title_text is None:
        return None
    title = parse_title(title_text)
    if title is None:
        return None
    year, make, model = title

    details = extractor.details(row)
    section_text = next((text for text in details if SECTION_LABEL in text), None)

    images: list[VehicleImage] = []
    main_src = extractor.main_image_src(row)
    if main_src:
        images.append(
            VehicleImage(
                url=canonical_image_url(main_src),
                thumbnail_url=main_src,
                type=classify_image(main_src),
            )
        )
    for link in extractor.gallery(row):
        images.append(VehicleImage(url=link.href, thumbnail_url=link.thumb, type=classify_image(link.href)))

    return RawListing(
        id=row_id,
        year=year,
        make=make,
        model=model,
        color=_labeled_value(details, COLOR_LABEL) or "Unknown",
        vin=_labeled_value(details, VIN_LABEL) or "",
        stock_number=_labeled_value(details, STOCK_LABEL) or "",
        yard_location=parse_yard_location(section_text) if section_text else YardLocation(),
        available_date=extractor.available_datetime(row) or now().isoformat(),
        images=images,
        **build_links(year, make, model, branch, base_url),
    )
