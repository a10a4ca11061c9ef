"""
Vehicle models - parsed listings and branch-attached records.
"""
from typing import Literal

from pydantic import BaseModel, Field

from .branch import Branch


ImageType = Literal[
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
    "OTHER",
]


class VehicleImage(BaseModel):
    """A photo of a vehicle with its inferred subject."""
    url: str
    thumbnail_url: str
    type: ImageType = "OTHER"


class YardLocation(BaseModel):
    """Where the vehicle sits in the yard."""
    section: str = ""
    row: str = ""
    space: str = ""


class RawListing(BaseModel):
    """
    One inventory row as parsed from a branch page.
    The id is only unique within its branch.
    """
    id: str
    year: int
    make: str = Field(min_length=1)
    model: str = Field(min_length=1)
    color: str = "Unknown"
    vin: str = ""
    stock_number: str = ""
    yard_location: YardLocation = Field(default_factory=YardLocation)
    available_date: str = Field(description="ISO-8601 timestamp")
    images: list[VehicleImage] = Field(default_factory=list)
    details_url: str = ""
    parts_url: str = ""
    prices_url: str = ""

    @property
    def title(self) -> str:
        return f"{self.year} {self.make} {self.model}"


class VehicleRecord(RawListing):
    """A listing joined with the branch it came from."""
    branch: Branch

    @property
    def key(self) -> tuple[str, str]:
        """Composite identity across the whole chain."""
        return (self.branch.code, self.id)

    @classmethod
    def from_listing(cls, listing: RawListing, branch: Branch) -> "VehicleRecord":
        return cls(**listing.model_dump(), branch=branch)
