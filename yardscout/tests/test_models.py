"""
Tests for Pydantic models and the make/model catalog.
"""
import pytest
from pydantic import ValidationError

from yardscout.models.branch import Branch
from yardscout.models.search import SearchFilters, SearchResult
from yardscout.models.vehicle import RawListing, VehicleRecord
from yardscout.pipeline.catalog import models_for_make, popular_makes

from conftest import make_branch, make_listing


class TestBranchModel:
    """Tests for branch parsing."""

    def test_upstream_keys(self):
        branch = Branch.model_validate({
            "LocationCode": "1223",
            "DisplayName": "Huntsville",
            "StateAbbr": "AL",
            "Lat": 34.77887,
            "Lng": -86.652217,
            "Urls": {"Inventory": "/inventory/huntsville-1223/", "SellACar": "/sellacar/huntsville-1223/"},
        })

        assert branch.code == "1223"
        assert branch.urls.inventory == "/inventory/huntsville-1223/"
        assert branch.urls.sell_a_car == "/sellacar/huntsville-1223/"

    def test_code_required(self):
        with pytest.raises(ValidationError):
            Branch.model_validate({"DisplayName": "Nowhere"})

    def test_with_distance_copies(self):
        branch = make_branch("1223", "Huntsville")
        near = branch.with_distance(12.5)

        assert near.distance == 12.5
        assert branch.distance == 0.0


class TestVehicleModels:
    """Tests for listing and record models."""

    def test_listing_defaults(self):
        listing = RawListing(
            id="1", year=2018, make="HONDA", model="CIVIC", available_date="2024-11-02T08:00:00"
        )

        assert listing.color == "Unknown"
        assert listing.vin == ""
        assert listing.images == []
        assert listing.title == "2018 HONDA CIVIC"

    def test_listing_requires_make_and_model(self):
        with pytest.raises(ValidationError):
            RawListing(id="1", year=2018, make="", model="CIVIC", available_date="2024-11-02")

    def test_record_identity(self):
        record = VehicleRecord.from_listing(make_listing("48213"), make_branch("1142", "Birmingham"))

        assert record.key == ("1142", "48213")
        assert record.branch.display_name == "Birmingham"
        assert record.make == "HONDA"


class TestSearchModels:
    """Tests for the query contract."""

    def test_filters_open_by_default(self):
        filters = SearchFilters()

        assert filters.query == ""
        assert filters.makes == [] and filters.models == [] and filters.colors == []
        assert filters.year_range is None
        assert filters.sort_by is None
        assert filters.sort_order == "asc"

    def test_inverted_range_accepted(self):
        assert SearchFilters(year_range=(2020, 2010)).year_range == (2020, 2010)

    def test_unknown_sort_key_rejected(self):
        with pytest.raises(ValidationError):
            SearchFilters(sort_by="price")

    def test_result_serializes(self):
        record = VehicleRecord.from_listing(make_listing("1"), make_branch("1223", "Huntsville"))
        result = SearchResult(records=[record], total_count=1, locations_covered=1)

        dumped = result.model_dump()
        assert dumped["records"][0]["branch"]["code"] == "1223"
        assert dumped["locations_with_errors"] == []


class TestCatalog:
    """Tests for the make/model catalog."""

    def test_popular_makes(self):
        makes = popular_makes()

        assert makes[0] == "HONDA"
        assert len(makes) == 10

    def test_models_for_make_case_insensitive(self):
        assert "CIVIC" in models_for_make("honda")
        assert "F-150" in models_for_make(" Ford ")

    def test_unknown_make(self):
        assert models_for_make("DELOREAN") == []
