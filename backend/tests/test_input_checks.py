"""Tests for pre-workflow input checks."""

from __future__ import annotations

import pytest

from paloalto_zoning.models.schemas import DesignData, SiteData
from paloalto_zoning.zoning_engine.input_checks import (
    InputValidationError,
    check_planning_input,
    check_validation_input,
    ensure_planning_input,
    ensure_validation_input,
)


def _site(**overrides) -> SiteData:
    data = {"address": "123 Main St", "zone": "R-1", "lot_size": 7000}
    data.update(overrides)
    return SiteData(**data)


def _design(**overrides) -> DesignData:
    data = {"submitted_zone": "R-1", "building_height": 25, "total_floor_area": 2500}
    data.update(overrides)
    return DesignData(**data)


class TestPlanningInput:

    def test_valid(self):
        assert check_planning_input(_site()) == []

    def test_all_problems_reported(self):
        errors = check_planning_input(_site(address=" ", zone="", lot_size=500))
        assert errors == [
            "Property address is required",
            "Zone district is required",
            "Valid lot size is required (minimum 1000 sq ft)",
        ]

    def test_ensure_raises_with_messages(self):
        with pytest.raises(InputValidationError) as exc_info:
            ensure_planning_input(_site(lot_size=0))
        assert exc_info.value.messages == ["Valid lot size is required (minimum 1000 sq ft)"]


class TestValidationInput:

    def test_valid(self):
        assert check_validation_input(_site(), _design()) == []

    def test_missing_design_values(self):
        errors = check_validation_input(
            _site(lot_size=999), _design(building_height=0, total_floor_area=-1),
        )
        assert errors == [
            "Valid lot size is required",
            "Building height is required",
            "Total floor area is required",
        ]

    def test_ensure_passes_silently(self):
        ensure_validation_input(_site(), _design())

    def test_error_is_value_error(self):
        with pytest.raises(ValueError, match="Building height is required"):
            ensure_validation_input(_site(), _design(building_height=0))
