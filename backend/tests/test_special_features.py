"""Tests for second unit, accessory structure and pool rules."""

from __future__ import annotations

from paloalto_zoning.models.schemas import AccessoryStructure, LotType
from paloalto_zoning.zoning_engine.special_features import (
    find_accessory_violations,
    find_pool_violations,
    get_accessory_parameters,
    get_pool_parameters,
    get_second_unit_max_size,
    get_second_unit_parameters,
    is_second_unit_feasible,
    total_feature_coverage,
)
from paloalto_zoning.zoning_engine.zone_table import ZONE_TABLE

R1 = ZONE_TABLE.lookup("R-1")


class TestSecondUnitFeasibility:
    """R-1 typical needs 8,100 sq ft; flag lots need 9,720."""

    def test_just_below_threshold(self):
        feasible, minimum = is_second_unit_feasible(R1, 8099, LotType.TYPICAL)
        assert feasible is False
        assert minimum == 8100

    def test_at_threshold(self):
        feasible, _ = is_second_unit_feasible(R1, 8100, LotType.TYPICAL)
        assert feasible is True

    def test_flag_lot_stricter(self):
        feasible, minimum = is_second_unit_feasible(R1, 9000, LotType.FLAG)
        assert feasible is False
        assert minimum == 9720

    def test_parameters(self):
        params = get_second_unit_parameters()
        assert params.max_size == 640
        assert params.max_size_percent == 50
        assert params.parking_required == 2
        assert params.covered_required == 1


class TestSecondUnitSize:
    """min(640, 50% of the main house)."""

    def test_small_main_house(self):
        assert get_second_unit_max_size(1000) == 500

    def test_large_main_house_capped(self):
        assert get_second_unit_max_size(3000) == 640


class TestAccessoryStructures:

    def test_parameters(self):
        params = get_accessory_parameters()
        assert params.max_height == 15
        assert params.min_setbacks == 5
        assert params.min_separation == 5
        assert params.included_in_coverage is True

    def test_compliant_structures(self):
        structures = [AccessoryStructure(height=12, setback=5)]
        assert find_accessory_violations(structures) == []

    def test_violations_labelled_by_position(self):
        structures = [
            AccessoryStructure(height=12, setback=6),
            AccessoryStructure(height=16, setback=3),
        ]
        assert find_accessory_violations(structures) == [
            "Structure 2: Height exceeds 15 ft (16 ft)",
            "Structure 2: Setback less than 5 ft (3 ft)",
        ]

    def test_named_structure(self):
        structures = [AccessoryStructure(name="Shed", height=18, setback=10)]
        assert find_accessory_violations(structures) == ["Shed: Height exceeds 15 ft (18 ft)"]

    def test_total_feature_coverage(self):
        structures = [
            AccessoryStructure(height=10, setback=5, footprint=120),
            AccessoryStructure(height=10, setback=5, footprint=80),
        ]
        assert total_feature_coverage(2000, structures) == 2200


class TestPool:

    def test_parameters(self):
        params = get_pool_parameters()
        assert params.min_setbacks == 5
        assert params.safety_barriers == "required"

    def test_compliant_pool(self):
        assert find_pool_violations(5, True) == []

    def test_close_pool_without_barriers(self):
        assert find_pool_violations(3, False) == [
            "Pool setback insufficient (3 ft < 5 ft required)",
            "Pool safety barriers not specified",
        ]

    def test_missing_setback(self):
        violations = find_pool_violations(None, True)
        assert violations == ["Pool setback not specified (5 ft required)"]
