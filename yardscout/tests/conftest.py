"""
Shared fixtures for YardScout tests.
"""
from pathlib import Path
from typing import Optional

import pytest

from yardscout.models.branch import Branch, BranchUrls
from yardscout.models.vehicle import RawListing, VehicleRecord


FIXTURES = Path(__file__).parent / "fixtures"

BASE_URL = "https://yard.example.com"


def make_branch(code: str, display_name: str, lat: float = 0.0, lng: float = 0.0, **kwargs) -> Branch:
    slug = f"{display_name.lower().replace(' ', '-')}-{code}"
    return Branch(
        code=code,
        name=f"Pick Your Part - {display_name}",
        display_name=display_name,
        city=display_name,
        lat=lat,
        lng=lng,
        urls=BranchUrls(
            inventory=f"/inventory/{slug}/",
            parts=f"/parts/{slug}/",
            prices=f"/prices/{slug}/",
        ),
        **kwargs,
    )


def make_listing(
    listing_id: str,
    year: int = 2018,
    make: str = "HONDA",
    model: str = "CIVIC",
    color: str = "SILVER",
    available_date: str = "2024-11-02T08:00:00+00:00",
) -> RawListing:
    return RawListing(
        id=listing_id,
        year=year,
        make=make,
        model=model,
        color=color,
        available_date=available_date,
    )


def make_record(listing_id: str, branch: Optional[Branch] = None, **kwargs) -> VehicleRecord:
    branch = branch or make_branch("1223", "Huntsville")
    return VehicleRecord.from_listing(make_listing(listing_id, **kwargs), branch)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def huntsville() -> Branch:
    return make_branch(
        "1223", "Huntsville", lat=34.77887, lng=-86.652217,
        state="Alabama", state_abbr="AL",
    )


@pytest.fixture
def inventory_html() -> str:
    return (FIXTURES / "inventory_sample.html").read_text(encoding="utf-8")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
