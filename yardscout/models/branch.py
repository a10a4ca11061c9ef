"""
Branch models - one upstream salvage yard and its URL templates.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BranchUrls(BaseModel):
    """Relative URL templates published by the directory for one branch."""
    model_config = ConfigDict(populate_by_name=True)

    store: str = Field(default="", alias="Store")
    interchange: str = Field(default="", alias="Interchange")
    inventory: str = Field(default="", alias="Inventory")
    prices: str = Field(default="", alias="Prices")
    directions: str = Field(default="", alias="Directions")
    sell_a_car: str = Field(default="", alias="SellACar")
    contact: str = Field(default="", alias="Contact")
    deals: str = Field(default="", alias="Deals")
    parts: str = Field(default="", alias="Parts")

    @field_validator("*", mode="before")
    @classmethod
    def blank_if_none(cls, value: Any) -> Any:
        return "" if value is None else value


class Branch(BaseModel):
    """
    One upstream branch as described by the location directory.

    Accepts the directory's PascalCase payload keys as well as the
    snake_case field names. Nulls in text fields read as empty strings and
    numeric codes as strings. `distance` is derived per query and is only
    ever set on copies.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    code: str = Field(alias="LocationCode", min_length=1)
    name: str = Field(default="", alias="Name")
    display_name: str = Field(default="", alias="DisplayName")
    page_url: str = Field(default="", alias="LocationPageURL")
    address: str = Field(default="", alias="Address")
    city: str = Field(default="", alias="City")
    state: str = Field(default="", alias="State")
    state_abbr: str = Field(default="", alias="StateAbbr")
    zip: str = Field(default="", alias="Zip")
    phone: str = Field(default="", alias="Phone")
    lat: float = Field(default=0.0, alias="Lat")
    lng: float = Field(default=0.0, alias="Lng")
    distance: float = Field(default=0.0, alias="Distance", description="Miles from the searcher")
    legacy_code: Optional[str] = Field(default=None, alias="LegacyCode")
    urls: BranchUrls = Field(default_factory=BranchUrls, alias="Urls")

    @field_validator(
        "name", "display_name", "page_url", "address", "city",
        "state", "state_abbr", "zip", "phone",
        mode="before",
    )
    @classmethod
    def blank_if_none(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("lat", "lng", "distance", mode="before")
    @classmethod
    def zero_if_none(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("urls", mode="before")
    @classmethod
    def empty_urls_if_none(cls, value: Any) -> Any:
        return {} if value is None else value

    def with_distance(self, distance: float) -> "Branch":
        """Return a copy carrying a per-query distance."""
        return self.model_copy(update={"distance": distance})
