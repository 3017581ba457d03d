"""Tests for the five-phase validation workflow."""

from __future__ import annotations

import pytest

from paloalto_zoning.models.schemas import (
    AccessoryStructure,
    CheckResult,
    DesignData,
    LotType,
    OverallStatus,
    SiteData,
    ValidationStatus,
    ViolationType,
    ZoneRequirement,
)
from paloalto_zoning.zoning_engine import UnknownZoneError, ValidationEngine, ZoneRuleTable


# ──────────────────────────────────────────────────────────────────
# HELPERS
# ──────────────────────────────────────────────────────────────────

def _make_site(
    lot_size: float = 8000,
    zone: str = "R-1",
    lot_type: LotType = LotType.TYPICAL,
    is_corner_lot: bool = False,
    creek_areas: float = 0,
    easements: float = 0,
    historic_category: str | None = None,
) -> SiteData:
    return SiteData(
        address="456 Waverley St",
        zone=zone,
        lot_size=lot_size,
        lot_type=lot_type,
        is_corner_lot=is_corner_lot,
        creek_areas=creek_areas,
        easements=easements,
        historic_category=historic_category,
    )


def _make_design(**overrides) -> DesignData:
    """A design that passes every check on an 8,000 sq ft interior R-1 lot."""
    data = dict(
        submitted_zone="R-1",
        building_height=25,
        total_floor_area=3000,
        floors=2,
        second_floor_ceiling=16,
        total_coverage=3000,
        front_setback=20,
        interior_side_setback=6,
        rear_setback=22,
        parking_spaces=2,
        covered_parking_spaces=1,
        has_garage=True,
        garage_front_setback=25,
        professional_stamps={"Architect", "Structural Engineer"},
        submitted_documents={"site_plan", "floor_plans", "elevations", "structural_calcs"},
    )
    data.update(overrides)
    return DesignData(**data)


def _check(result, name):
    return next(c for c in result.validation_checks if c.check_name == name)


def _rule_ids(result):
    return [v.rule_id for v in result.violations]


@pytest.fixture
def engine():
    return ValidationEngine()


# ──────────────────────────────────────────────────────────────────
# PHASE 1
# ──────────────────────────────────────────────────────────────────

class TestSitePreValidation:
    """Phase 1: lot size, zone match, historic and environmental checks."""

    def test_compliant_site(self, engine):
        result = engine.execute_phase1_validation(_make_site(), _make_design())
        assert result.status == ValidationStatus.PASSED
        assert result.passed == 4
        assert result.failed == 0
        assert _check(result, "Substandard Lot Assessment").result == CheckResult.INFO
        assert result.next_phase_inputs.buildable_area == 8000

    def test_undersized_lot_is_critical(self, engine):
        result = engine.execute_phase1_validation(_make_site(lot_size=5000), _make_design())
        assert result.status == ValidationStatus.CRITICAL_FAILURE
        assert len(result.validation_checks) == 1
        assert result.validation_checks[0].rule_id == "R001"
        assert result.failed == 1
        violation = result.violations[0]
        assert violation.type == ViolationType.ABSOLUTE_STOPPER
        assert violation.rule_id == "CP001"
        assert violation.remediation == "Site not suitable for development in current zone"
        assert result.next_phase_inputs is None

    def test_zone_mismatch(self, engine):
        result = engine.execute_phase1_validation(
            _make_site(), _make_design(submitted_zone="R-1(7000)"),
        )
        assert result.status == ValidationStatus.VIOLATIONS_FOUND
        assert _rule_ids(result) == ["V001"]
        assert result.violations[0].type == ViolationType.ABSOLUTE_STOPPER
        assert "Zone mismatch" in result.violations[0].description

    def test_historic_without_approval(self, engine):
        result = engine.execute_phase1_validation(
            _make_site(historic_category="Category 2"), _make_design(),
        )
        assert _rule_ids(result) == ["CP009"]
        assert result.violations[0].type == ViolationType.MAJOR_STOPPER

    def test_historic_with_approval(self, engine):
        result = engine.execute_phase1_validation(
            _make_site(historic_category="Category 2"),
            _make_design(historic_compliance="approved"),
        )
        assert result.violations == []

    def test_creek_encroachment(self, engine):
        result = engine.execute_phase1_validation(
            _make_site(creek_areas=500), _make_design(encroaches_creek=True),
        )
        assert _rule_ids(result) == ["CP012"]
        assert "creek channel" in result.violations[0].description

    def test_encroachment_flag_without_creek_area(self, engine):
        result = engine.execute_phase1_validation(
            _make_site(), _make_design(encroaches_creek=True, encroaches_easement=True),
        )
        assert result.violations == []

    def test_exclusions_exceeding_lot_warn(self, engine):
        result = engine.execute_phase1_validation(
            _make_site(creek_areas=5000, easements=4000), _make_design(),
        )
        assert [w.type for w in result.warnings] == ["environmental_exclusions"]
        assert result.next_phase_inputs.buildable_area == 0


class TestSubstandardLotValidation:
    """Substandard lots get a height warning and a 17 ft limit."""

    @pytest.fixture
    def engine(self):
        return ValidationEngine(ZoneRuleTable({
            "R-1": ZoneRequirement(
                min_lot_size=4000, max_lot_size=9999,
                sub_standard_typical=4980, sub_standard_flag=5976,
                second_unit_min_typical=8100, second_unit_min_flag=9720,
            ),
        }))

    def _run(self, engine, site, design):
        phase1 = engine.execute_phase1_validation(site, design)
        return phase1, engine.execute_phase2_validation(site, design, phase1)

    def test_typical_lot_below_threshold(self, engine):
        phase1, phase2 = self._run(
            engine, _make_site(lot_size=4500), _make_design(building_height=20),
        )
        assert [w.type for w in phase1.warnings] == ["height_restriction"]
        assert phase1.next_phase_inputs.is_sub_standard is True

        height = _check(phase2, "Building Height Compliance")
        assert height.result == CheckResult.FAIL
        assert height.required == 17
        cp002 = next(v for v in phase2.violations if v.rule_id == "CP002")
        assert cp002.type == ViolationType.ABSOLUTE_STOPPER
        assert phase2.next_phase_inputs.max_height == 17

    def test_flag_lot_uses_flag_threshold(self, engine):
        site = _make_site(lot_size=5500, lot_type=LotType.FLAG)
        phase1, phase2 = self._run(engine, site, _make_design(building_height=20))
        assert [w.type for w in phase1.warnings] == ["height_restriction"]
        assert _check(phase1, "Substandard Lot Assessment").required == 5976
        assert "CP002" in _rule_ids(phase2)

    def test_typical_lot_above_threshold(self, engine):
        phase1, phase2 = self._run(
            engine, _make_site(lot_size=5500), _make_design(building_height=20),
        )
        assert phase1.warnings == []
        assert _check(phase2, "Building Height Compliance").result == CheckResult.PASS
        assert "CP002" not in _rule_ids(phase2)


# ──────────────────────────────────────────────────────────────────
# PHASE 2
# ──────────────────────────────────────────────────────────────────

class TestEnvelopeValidation:
    """Phase 2: all seven checks always run."""

    def _run(self, engine, site, design):
        phase1 = engine.execute_phase1_validation(site, design)
        return engine.execute_phase2_validation(site, design, phase1)

    def test_compliant_design(self, engine):
        result = self._run(engine, _make_site(), _make_design())
        assert result.status == ValidationStatus.PASSED
        assert result.passed == 7
        assert result.next_phase_inputs.max_floor_area == 3150
        assert result.next_phase_inputs.max_coverage == 3200

    def test_all_checks_run_despite_failures(self, engine):
        design = _make_design(
            building_height=35,
            total_floor_area=4000,
            front_setback=10,
            daylight_plane_compliant=False,
            porch_area=300,
            total_coverage=3500,
            second_floor_ceiling=18,
        )
        result = self._run(engine, _make_site(), design)
        assert len(result.validation_checks) == 7
        assert result.failed == 7
        assert _rule_ids(result) == ["CP002", "CP015", "CP004", "CP003", "CP005", None, "CP013"]

    def test_severities(self, engine):
        design = _make_design(building_height=35, daylight_plane_compliant=False, porch_area=300)
        result = self._run(engine, _make_site(), design)
        kinds = {v.category: v.type for v in result.violations}
        assert kinds["Building Height"] == ViolationType.ABSOLUTE_STOPPER
        assert kinds["Building Envelope"] == ViolationType.MAJOR_STOPPER
        assert kinds["Architectural Features"] == ViolationType.DESIGN_STOPPER

    def test_setback_messages_concatenated(self, engine):
        design = _make_design(front_setback=15, rear_setback=10)
        result = self._run(engine, _make_site(), design)
        check = _check(result, "Setback Compliance")
        assert check.message == (
            "Front setback insufficient (15 ft < 20 ft required); "
            "Rear setback insufficient (10 ft < 20 ft required)"
        )
        assert result.violations[0].remediation == "Move building within compliant envelope"

    def test_corner_lot_requires_street_side(self, engine):
        result = self._run(engine, _make_site(is_corner_lot=True), _make_design())
        assert _rule_ids(result) == ["CP004"]
        assert "Street side setback not provided" in result.violations[0].description

    def test_far_limit(self, engine):
        at_limit = self._run(engine, _make_site(), _make_design(total_floor_area=3150))
        over = self._run(engine, _make_site(), _make_design(total_floor_area=3151))
        assert at_limit.violations == []
        assert _rule_ids(over) == ["CP003"]
        assert "3151 sq ft > 3150 sq ft" in over.violations[0].description


# ──────────────────────────────────────────────────────────────────
# PHASE 3
# ──────────────────────────────────────────────────────────────────

class TestParkingValidation:
    """Phase 3: parking, driveway and garage checks."""

    def test_compliant(self, engine):
        result = engine.execute_phase3_validation(_make_site(), _make_design())
        assert result.status == ValidationStatus.PASSED
        assert result.passed == 6

    def test_second_unit_needs_more_parking(self, engine):
        result = engine.execute_phase3_validation(
            _make_site(), _make_design(has_second_unit=True),
        )
        assert _rule_ids(result) == ["CP006", None]
        assert [v.category for v in result.violations] == ["Parking", "Covered Parking"]

    def test_non_corner_garage_at_20_passes(self, engine):
        result = engine.execute_phase3_validation(
            _make_site(), _make_design(garage_front_setback=20),
        )
        assert _check(result, "Garage Placement").result == CheckResult.PASS

    def test_corner_garage_short_street_side_fails(self, engine):
        result = engine.execute_phase3_validation(
            _make_site(is_corner_lot=True),
            _make_design(garage_front_setback=75, garage_street_side_setback=15),
        )
        check = _check(result, "Garage Placement (Corner Lot)")
        assert check.result == CheckResult.FAIL
        assert _rule_ids(result) == ["CP014"]
        assert result.violations[0].type == ViolationType.DESIGN_STOPPER

    def test_no_garage_is_not_applicable(self, engine):
        result = engine.execute_phase3_validation(_make_site(), _make_design(has_garage=False))
        assert _check(result, "Garage Placement").result == CheckResult.NOT_APPLICABLE
        assert result.passed == 6

    def test_driveway_and_backing(self, engine):
        result = engine.execute_phase3_validation(
            _make_site(),
            _make_design(driveway_surface_width=7, backing_distance=15),
        )
        assert _rule_ids(result) == ["CP007", None]
        assert result.violations[1].category == "Vehicle Access"
        assert all(v.type == ViolationType.MAJOR_STOPPER for v in result.violations)

    def test_unapproved_material_is_only_a_warning(self, engine):
        # Material failures stay warnings, unlike every other parking check.
        result = engine.execute_phase3_validation(
            _make_site(), _make_design(driveway_material="gravel"),
        )
        assert _check(result, "Driveway Materials").result == CheckResult.FAIL
        assert result.violations == []
        assert [w.type for w in result.warnings] == ["materials"]
        assert result.warnings[0].message == "Non-approved driveway material: gravel"
        assert result.status == ValidationStatus.PASSED
        assert result.passed == 5
        assert result.failed == 0

    def test_material_must_match_exactly(self, engine):
        result = engine.execute_phase3_validation(
            _make_site(), _make_design(driveway_material=" Concrete "),
        )
        assert _check(result, "Driveway Materials").result == CheckResult.FAIL
        assert [w.type for w in result.warnings] == ["materials"]
        assert result.violations == []


# ──────────────────────────────────────────────────────────────────
# PHASE 4
# ──────────────────────────────────────────────────────────────────

class TestFeatureValidation:
    """Phase 4: conditional feature checks plus total coverage."""

    def test_only_total_coverage_without_features(self, engine):
        result = engine.execute_phase4_validation(_make_site(), _make_design())
        assert [c.check_name for c in result.validation_checks] == [
            "Total Coverage With Features",
        ]
        assert result.status == ValidationStatus.PASSED

    def test_second_unit_lot_too_small(self, engine):
        result = engine.execute_phase4_validation(
            _make_site(lot_size=8099),
            _make_design(has_second_unit=True, second_unit_area=400),
        )
        assert _rule_ids(result) == ["CP008"]
        assert result.violations[0].type == ViolationType.MAJOR_STOPPER

    def test_second_unit_at_threshold(self, engine):
        result = engine.execute_phase4_validation(
            _make_site(lot_size=8100),
            _make_design(has_second_unit=True, second_unit_area=640, main_house_area=2000),
        )
        assert result.violations == []

    def test_second_unit_size_from_floor_area(self, engine):
        result = engine.execute_phase4_validation(
            _make_site(lot_size=9000),
            _make_design(has_second_unit=True, second_unit_area=600, total_floor_area=1000),
        )
        assert _rule_ids(result) == ["CP017"]
        check = _check(result, "Second Unit Size")
        assert check.required == 500

    def test_accessory_structures(self, engine):
        design = _make_design(accessory_structures=[
            AccessoryStructure(height=10, setback=5),
            AccessoryStructure(height=16, setback=4),
        ])
        result = engine.execute_phase4_validation(_make_site(), design)
        check = _check(result, "Accessory Structures")
        assert check.result == CheckResult.FAIL
        assert len(check.violations) == 2
        assert result.violations[0].category == "Accessory Structures"

    def test_pool_without_barriers(self, engine):
        result = engine.execute_phase4_validation(
            _make_site(), _make_design(has_pool=True, pool_setback=6),
        )
        assert _rule_ids(result) == ["CP020"]
        assert result.violations[0].remediation == "Install compliant safety barriers"

    def test_compliant_pool(self, engine):
        result = engine.execute_phase4_validation(
            _make_site(),
            _make_design(has_pool=True, pool_setback=6, pool_safety_barriers=True),
        )
        assert result.violations == []

    def test_total_coverage_includes_accessory_footprints(self, engine):
        design = _make_design(
            total_coverage=3100,
            accessory_structures=[AccessoryStructure(height=10, setback=5, footprint=200)],
        )
        result = engine.execute_phase4_validation(_make_site(), design)
        check = _check(result, "Total Coverage With Features")
        assert check.actual == 3300
        assert check.result == CheckResult.FAIL
        assert result.violations[0].category == "Total Coverage"

    def test_explicit_total_coverage(self, engine):
        result = engine.execute_phase4_validation(
            _make_site(), _make_design(total_coverage_with_features=3200),
        )
        assert result.violations == []

    def test_coverage_limit_read_from_phase2(self, engine):
        site, design = _make_site(), _make_design()
        phase1 = engine.execute_phase1_validation(site, design)
        phase2 = engine.execute_phase2_validation(site, design, phase1)
        phase2.next_phase_inputs.max_coverage = 2500
        result = engine.execute_phase4_validation(
            site, design, {"phase1": phase1, "phase2": phase2},
        )
        check = _check(result, "Total Coverage With Features")
        assert check.required == 2500
        assert check.result == CheckResult.FAIL


# ──────────────────────────────────────────────────────────────────
# PHASE 5 & WORKFLOW
# ──────────────────────────────────────────────────────────────────

class TestValidationWorkflow:
    """End-to-end runs and final status derivation."""

    def test_fully_compliant_design_approved(self, engine):
        workflow = engine.execute_validation_workflow(_make_site(), _make_design())
        assert workflow.overall_status == "approved"
        report = workflow.final_report
        assert report.overall_status == OverallStatus.APPROVED
        assert report.violation_summary.total == 0
        assert report.estimated_resolution == "Ready for submission"
        assert report.next_steps[0] == "Design fully compliant"
        assert report.phase_results.phase2 == "passed"
        assert report.phase_results.phase5 == "approved"
        assert workflow.end_time is not None

    def test_comprehensive_check_counts_prior_phases(self, engine):
        workflow = engine.execute_validation_workflow(_make_site(), _make_design())
        check = _check(workflow.phases.phase5, "Comprehensive Rule Validation")
        # 4 site checks, 7 envelope, 6 parking, 1 coverage
        assert check.details["total_checks"] == 18
        assert check.details["passed"] == 18
        assert check.result == CheckResult.PASS

    def test_major_only_is_conditional(self, engine):
        workflow = engine.execute_validation_workflow(
            _make_site(), _make_design(daylight_plane_compliant=False),
        )
        assert workflow.overall_status == "conditional"
        assert workflow.final_report.violation_summary.major == 1
        assert workflow.final_report.estimated_resolution == "1-3 weeks (minor corrections)"

    def test_absolute_stopper_rejects(self, engine):
        workflow = engine.execute_validation_workflow(
            _make_site(), _make_design(building_height=31),
        )
        assert workflow.overall_status == "rejected"
        report = workflow.final_report
        assert report.overall_status == OverallStatus.REJECTED
        assert report.violation_summary.critical == 1
        assert report.violations.critical[0].rule_id == "CP002"
        critical_path = _check(workflow.phases.phase5, "Critical Path Validation")
        assert critical_path.message == "1 critical path violations found"

    def test_missing_stamps_and_documents(self, engine):
        workflow = engine.execute_validation_workflow(
            _make_site(),
            _make_design(professional_stamps={"Architect"}, submitted_documents=set()),
        )
        phase5 = workflow.phases.phase5
        assert [v.category for v in phase5.violations] == [
            "Professional Requirements", "Documentation",
        ]
        assert phase5.violations[0].description == (
            "Missing professional stamps: Structural Engineer"
        )
        assert phase5.violations[1].description == (
            "Missing documents: site_plan, floor_plans, elevations, structural_calcs"
        )
        assert workflow.overall_status == "conditional"
        assert workflow.final_report.violation_summary.process == 2

    def test_many_violations_resolution(self, engine):
        design = _make_design(
            daylight_plane_compliant=False,
            porch_area=300,
            parking_spaces=1,
            covered_parking_spaces=0,
            backing_distance=10,
            professional_stamps=set(),
        )
        workflow = engine.execute_validation_workflow(_make_site(), design)
        assert workflow.final_report.violation_summary.total == 6
        assert workflow.final_report.estimated_resolution == "2-6 weeks (design revisions)"

    def test_short_circuit_leaves_only_phase1(self, engine):
        workflow = engine.execute_validation_workflow(_make_site(lot_size=5999), _make_design())
        assert workflow.overall_status == "rejected"
        assert workflow.stop_reason == "Critical site validation failures"
        assert workflow.phases.completed_keys() == ["phase1"]
        assert workflow.phases.phase1.status == ValidationStatus.CRITICAL_FAILURE
        assert workflow.final_report is None

    def test_idempotent(self, engine):
        site = _make_site(is_corner_lot=True)
        design = _make_design(building_height=32, driveway_material="gravel")
        first = engine.execute_validation_workflow(site, design)
        second = engine.execute_validation_workflow(site, design)
        assert first.overall_status == second.overall_status
        assert first.final_report.violations == second.final_report.violations
        assert first.final_report.violation_summary == second.final_report.violation_summary

    def test_unknown_zone_fails_fast(self, engine):
        with pytest.raises(UnknownZoneError):
            engine.execute_validation_workflow(_make_site(zone="R-3"), _make_design())

    def test_unexpected_error_reported(self, engine, monkeypatch):
        def boom(site, design, previous=None):
            raise RuntimeError("boom")

        monkeypatch.setattr(engine, "execute_phase4_validation", boom)
        workflow = engine.execute_validation_workflow(_make_site(), _make_design())
        assert workflow.overall_status == "error"
        assert workflow.error == "Special Features & Accessories Validation: boom"
        assert workflow.phases.completed_keys() == ["phase1", "phase2", "phase3"]
