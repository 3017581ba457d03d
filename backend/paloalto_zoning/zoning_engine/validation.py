"""
Validation workflow: checks a proposed design against the R-1 rules.

Five phases mirror the planning workflow, but every step is a
PASS / FAIL / WARNING / INFO / N/A check and each failure is recorded as
a Violation with a severity tier:

  1. Site Analysis & Pre-Validation           (lot size failure aborts the run)
  2. Building Envelope Validation             (seven independent checks)
  3. Parking & Access Validation
  4. Special Features & Accessories Validation
  5. Final Compliance Validation & Report Generation

Rule IDs (CPxxx) follow the Palo Alto compliance checklist numbering.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Mapping, Optional

from paloalto_zoning.models.schemas import (
    CheckResult,
    DesignData,
    EnvelopeValidationOutput,
    EnvelopeValidationResult,
    FinalComplianceResult,
    PhaseStatusMap,
    SiteData,
    SitePreValidationOutput,
    SitePreValidationResult,
    ValidationCheck,
    ValidationFinalReport,
    ValidationPhaseResult,
    ValidationPhases,
    ValidationProjectSummary,
    ValidationStatus,
    ValidationWarning,
    ValidationWorkflow,
    Violation,
    ViolationType,
    ZoneRequirement,
)
from paloalto_zoning.zoning_engine.far import (
    calculate_buildable_area,
    calculate_coverage,
    calculate_far,
    exclusions_exceed_lot,
)
from paloalto_zoning.zoning_engine.height_setback import (
    DAYLIGHT_PLANE_ANGLE,
    SUBSTANDARD_MAX_HEIGHT_FT,
    find_projection_violations,
    find_setback_violations,
    find_story_height_violations,
    fmt_num,
    get_max_height,
)
from paloalto_zoning.zoning_engine.parking import (
    APPROVED_DRIVEWAY_MATERIALS,
    MIN_BACKING_DISTANCE_FT,
    find_driveway_violations,
    find_garage_violations,
    get_required_spaces,
    is_approved_material,
)
from paloalto_zoning.zoning_engine.pipeline import PhaseStep, run_phases
from paloalto_zoning.zoning_engine.special_features import (
    find_accessory_violations,
    find_pool_violations,
    get_second_unit_max_size,
    is_second_unit_feasible,
    total_feature_coverage,
)
from paloalto_zoning.zoning_engine.violations import (
    collect_violations,
    critical_violations,
    derive_overall_status,
    estimate_resolution,
    get_next_steps,
    group_by_severity,
    summarize,
    to_phase_status,
)
from paloalto_zoning.zoning_engine.zone_table import (
    ZONE_TABLE,
    ZoneRuleTable,
    get_sub_standard_threshold,
)

logger = logging.getLogger(__name__)

REQUIRED_STAMPS = ["Architect", "Structural Engineer"]
REQUIRED_DOCUMENTS = ["site_plan", "floor_plans", "elevations", "structural_calcs"]


class ValidationEngine:
    """Checks a design against the zone rules, phase by phase."""

    PHASES = {
        1: "Site Analysis & Pre-Validation",
        2: "Building Envelope Validation",
        3: "Parking & Access Validation",
        4: "Special Features & Accessories Validation",
        5: "Final Compliance Validation & Report Generation",
    }

    def __init__(self, zone_table: ZoneRuleTable = ZONE_TABLE):
        self.zone_table = zone_table

    # ──────────────────────────────────────────────────────────────
    # PHASE 1
    # ──────────────────────────────────────────────────────────────

    def execute_phase1_validation(
        self, site: SiteData, design: DesignData,
    ) -> SitePreValidationResult:
        req = self.zone_table.lookup(site.zone)
        results = SitePreValidationResult(phase=1, phase_name=self.PHASES[1])

        lot_check = self._check_lot_size(site, req)
        results.validation_checks.append(lot_check)
        if lot_check.result == CheckResult.FAIL:
            _record(results, lot_check, ViolationType.ABSOLUTE_STOPPER, "CP001",
                    "Lot Requirements", "Site not suitable for development in current zone")
            results.status = ValidationStatus.CRITICAL_FAILURE
            return results
        results.passed += 1

        sub_check = self._check_sub_standard(site, req)
        is_sub_standard = sub_check.details["is_sub_standard"]
        results.validation_checks.append(sub_check)
        if is_sub_standard:
            results.warnings.append(ValidationWarning(
                type="height_restriction",
                message=(
                    f"Substandard lot detected - height limited to "
                    f"{SUBSTANDARD_MAX_HEIGHT_FT} feet"
                ),
                impact="Building height restrictions apply",
            ))

        zone_check = ValidationCheck(
            check_name="Zone District Verification",
            rule_id="V001",
            result=CheckResult.PASS if site.zone == design.submitted_zone else CheckResult.FAIL,
            actual=design.submitted_zone,
            required=site.zone,
            message=(
                f"Zone designation verified: {site.zone}"
                if site.zone == design.submitted_zone
                else f"Zone mismatch: Property is {site.zone}, "
                     f"design submitted for {design.submitted_zone}"
            ),
        )
        _tally(results, zone_check, ViolationType.ABSOLUTE_STOPPER, "V001", "Zone Verification")

        _tally(results, self._check_historic(site, design),
               ViolationType.MAJOR_STOPPER, "CP009", "Historic Properties")

        _tally(results, self._check_environmental(site, design),
               ViolationType.MAJOR_STOPPER, "CP012", "Environmental")
        if exclusions_exceed_lot(site.lot_size, site.creek_areas, site.easements):
            results.warnings.append(ValidationWarning(
                type="environmental_exclusions",
                message="Creek areas and easements exceed the lot area",
                impact="No buildable area remains after exclusions",
            ))

        results.next_phase_inputs = SitePreValidationOutput(
            is_sub_standard=is_sub_standard,
            zone_requirements=req,
            buildable_area=calculate_buildable_area(
                site.lot_size, site.creek_areas, site.easements,
            ),
            historic_category=site.historic_category,
        )
        results.status = _phase_status(results)
        return results

    # ──────────────────────────────────────────────────────────────
    # PHASE 2
    # ──────────────────────────────────────────────────────────────

    def execute_phase2_validation(
        self, site: SiteData, design: DesignData, phase1: SitePreValidationResult,
    ) -> EnvelopeValidationResult:
        """Height, story heights, setbacks, FAR, daylight plane, projections, coverage.

        Every check runs regardless of earlier failures.
        """
        if phase1.next_phase_inputs is None:
            raise ValueError("Missing phase 1 site validation results")
        is_sub_standard = phase1.next_phase_inputs.is_sub_standard
        results = EnvelopeValidationResult(phase=2, phase_name=self.PHASES[2])

        max_height = get_max_height(is_sub_standard)
        height_ok = design.building_height <= max_height
        _tally(results, ValidationCheck(
            check_name="Building Height Compliance",
            rule_id="CP002",
            result=_pass_fail(height_ok),
            actual=design.building_height,
            required=max_height,
            message=(
                f"Building height complies with {max_height} ft limit" if height_ok
                else f"Building height exceeds {max_height} ft limit "
                     f"(Actual: {fmt_num(design.building_height)} ft)"
            ),
            details={"is_sub_standard": is_sub_standard},
        ), ViolationType.ABSOLUTE_STOPPER, "CP002", "Building Height",
            "Reduce building height or reconfigure design")

        _tally(results, _list_check(
            "Story Height Equivalency", "CP015",
            find_story_height_violations(
                design.floors, design.second_floor_ceiling, design.third_floor_ceiling,
            ),
            "All floor ceiling heights comply with story equivalencies",
        ), ViolationType.DESIGN_STOPPER, "CP015", "Story Height")

        _tally(results, _list_check(
            "Setback Compliance", "CP004",
            find_setback_violations(
                site.is_corner_lot,
                design.front_setback,
                design.interior_side_setback,
                design.street_side_setback,
                design.rear_setback,
            ),
            "All setbacks meet minimum requirements",
        ), ViolationType.ABSOLUTE_STOPPER, "CP004", "Setbacks",
            "Move building within compliant envelope")

        far = calculate_far(site.lot_size)
        far_ok = design.total_floor_area <= far.max_floor_area
        _tally(results, ValidationCheck(
            check_name="Floor Area Ratio (FAR) Validation",
            rule_id="CP003",
            result=_pass_fail(far_ok),
            actual=design.total_floor_area,
            required=far.max_floor_area,
            message=(
                f"Floor area within limits ({fmt_num(design.total_floor_area)} sq ft "
                f"≤ {fmt_num(far.max_floor_area)} sq ft)" if far_ok
                else f"Floor area exceeds calculated limit ({fmt_num(design.total_floor_area)} "
                     f"sq ft > {fmt_num(far.max_floor_area)} sq ft)"
            ),
            details={"calculation": far.model_dump()},
        ), ViolationType.ABSOLUTE_STOPPER, "CP003", "Floor Area",
            "Reduce floor area or redesign to comply with FAR limits")

        _tally(results, ValidationCheck(
            check_name="Daylight Plane Compliance",
            rule_id="CP005",
            result=_pass_fail(design.daylight_plane_compliant),
            message=(
                f"Building envelope complies with {DAYLIGHT_PLANE_ANGLE}-degree daylight plane"
                if design.daylight_plane_compliant
                else f"Building mass violates {DAYLIGHT_PLANE_ANGLE}-degree daylight plane "
                     f"from property lines"
            ),
        ), ViolationType.MAJOR_STOPPER, "CP005", "Building Envelope",
            "Redesign building envelope to comply with daylight plane")

        _tally(results, _list_check(
            "Architectural Feature Compliance", None,
            find_projection_violations(
                design.porch_area, design.entry_projection, design.bay_window_projection,
            ),
            "All architectural features within size limits",
        ), ViolationType.DESIGN_STOPPER, None, "Architectural Features")

        coverage = calculate_coverage(site.lot_size)
        max_coverage = coverage.total_max_coverage
        coverage_ok = design.total_coverage <= max_coverage
        _tally(results, ValidationCheck(
            check_name="Lot Coverage Validation",
            rule_id="CP013",
            result=_pass_fail(coverage_ok),
            actual=design.total_coverage,
            required=max_coverage,
            message=(
                f"Lot coverage within limits ({fmt_num(design.total_coverage)} sq ft "
                f"≤ {fmt_num(max_coverage)} sq ft)" if coverage_ok
                else f"Lot coverage exceeds maximum ({fmt_num(design.total_coverage)} sq ft "
                     f"> {fmt_num(max_coverage)} sq ft)"
            ),
            details={"breakdown": coverage.model_dump()},
        ), ViolationType.DESIGN_STOPPER, "CP013", "Lot Coverage",
            "Reduce building size or eliminate structures")

        results.next_phase_inputs = EnvelopeValidationOutput(
            max_height=max_height,
            max_floor_area=far.max_floor_area,
            max_coverage=max_coverage,
        )
        results.status = _phase_status(results)
        return results

    # ──────────────────────────────────────────────────────────────
    # PHASE 3
    # ──────────────────────────────────────────────────────────────

    def execute_phase3_validation(
        self, site: SiteData, design: DesignData,
    ) -> ValidationPhaseResult:
        results = ValidationPhaseResult(phase=3, phase_name=self.PHASES[3])
        required_total, required_covered = get_required_spaces(design.has_second_unit)

        spaces_ok = design.parking_spaces >= required_total
        _tally(results, ValidationCheck(
            check_name="Parking Space Count",
            rule_id="CP006",
            result=_pass_fail(spaces_ok),
            actual=design.parking_spaces,
            required=required_total,
            message=(
                f"Adequate parking spaces provided ({design.parking_spaces} ≥ {required_total})"
                if spaces_ok
                else f"Insufficient parking spaces ({design.parking_spaces} < "
                     f"{required_total} required)"
            ),
        ), ViolationType.MAJOR_STOPPER, "CP006", "Parking",
            "Provide adequate parking or eliminate second unit")

        covered_ok = design.covered_parking_spaces >= required_covered
        _tally(results, ValidationCheck(
            check_name="Covered Parking Validation",
            result=_pass_fail(covered_ok),
            actual=design.covered_parking_spaces,
            required=required_covered,
            message=(
                f"Adequate covered parking provided ({design.covered_parking_spaces} "
                f"≥ {required_covered})" if covered_ok
                else f"Insufficient covered parking ({design.covered_parking_spaces} < "
                     f"{required_covered} required)"
            ),
        ), ViolationType.MAJOR_STOPPER, None, "Covered Parking")

        _tally(results, _list_check(
            "Driveway Dimensions", "CP007",
            find_driveway_violations(
                design.driveway_surface_width, design.driveway_clearance_width,
            ),
            "Driveway dimensions meet requirements",
        ), ViolationType.MAJOR_STOPPER, "CP007", "Access",
            "Modify driveway design to meet requirements")

        _tally(results, self._check_garage(site, design),
               ViolationType.DESIGN_STOPPER, "CP014", "Garage Placement",
               "Relocate garage or design carport alternative")

        backing_ok = design.backing_distance >= MIN_BACKING_DISTANCE_FT
        _tally(results, ValidationCheck(
            check_name="Vehicle Maneuverability",
            result=_pass_fail(backing_ok),
            actual=design.backing_distance,
            required=MIN_BACKING_DISTANCE_FT,
            message=(
                "Adequate backing distance provided" if backing_ok
                else f"Insufficient backing distance ({fmt_num(design.backing_distance)} ft "
                     f"< {MIN_BACKING_DISTANCE_FT} ft required)"
            ),
        ), ViolationType.MAJOR_STOPPER, None, "Vehicle Access")

        # A non-approved material is reported as a warning, never a violation.
        material_ok = is_approved_material(design.driveway_material)
        materials_check = ValidationCheck(
            check_name="Driveway Materials",
            result=_pass_fail(material_ok),
            actual=design.driveway_material,
            required=list(APPROVED_DRIVEWAY_MATERIALS),
            message=(
                "Approved driveway materials specified" if material_ok
                else f"Non-approved driveway material: {design.driveway_material}"
            ),
        )
        results.validation_checks.append(materials_check)
        if material_ok:
            results.passed += 1
        else:
            results.warnings.append(ValidationWarning(
                type="materials", message=materials_check.message,
            ))

        results.status = _phase_status(results)
        return results

    # ──────────────────────────────────────────────────────────────
    # PHASE 4
    # ──────────────────────────────────────────────────────────────

    def execute_phase4_validation(
        self, site: SiteData, design: DesignData,
        previous: Optional[Mapping[str, ValidationPhaseResult]] = None,
    ) -> ValidationPhaseResult:
        """Feature checks run only for features present in the design;
        total coverage is always checked, against the phase 2 limit when
        *previous* carries one."""
        results = ValidationPhaseResult(phase=4, phase_name=self.PHASES[4])

        if design.has_second_unit:
            req = self.zone_table.lookup(site.zone)
            feasible, minimum = is_second_unit_feasible(req, site.lot_size, site.lot_type)
            _tally(results, ValidationCheck(
                check_name="Second Dwelling Unit Lot Size",
                rule_id="CP008",
                result=_pass_fail(feasible),
                actual=site.lot_size,
                required=minimum,
                message=(
                    f"Lot size adequate for second unit ({fmt_num(site.lot_size)} sq ft "
                    f"≥ {fmt_num(minimum)} sq ft)" if feasible
                    else f"Lot too small for second unit ({fmt_num(site.lot_size)} sq ft "
                         f"< {fmt_num(minimum)} sq ft required)"
                ),
            ), ViolationType.MAJOR_STOPPER, "CP008", "Second Dwelling Unit",
                "Eliminate second unit or find larger lot")

            main_house = (
                design.main_house_area if design.main_house_area is not None
                else design.total_floor_area
            )
            max_size = get_second_unit_max_size(main_house)
            size_ok = design.second_unit_area <= max_size
            _tally(results, ValidationCheck(
                check_name="Second Unit Size",
                rule_id="CP017",
                result=_pass_fail(size_ok),
                actual=design.second_unit_area,
                required=max_size,
                message=(
                    f"Second unit size within limits ({fmt_num(design.second_unit_area)} "
                    f"sq ft ≤ {fmt_num(max_size)} sq ft)" if size_ok
                    else f"Second unit exceeds size limit ({fmt_num(design.second_unit_area)} "
                         f"sq ft > {fmt_num(max_size)} sq ft)"
                ),
            ), ViolationType.DESIGN_STOPPER, "CP017", "Second Unit Design",
                "Redesign second unit within limits")

        if design.accessory_structures:
            _tally(results, _list_check(
                "Accessory Structures", None,
                find_accessory_violations(design.accessory_structures),
                "All accessory structures comply with requirements",
            ), ViolationType.DESIGN_STOPPER, None, "Accessory Structures")

        if design.has_pool:
            _tally(results, _list_check(
                "Pool Safety", "CP020",
                find_pool_violations(design.pool_setback, design.pool_safety_barriers),
                "Pool safety requirements met",
            ), ViolationType.DESIGN_STOPPER, "CP020", "Pool Safety",
                "Install compliant safety barriers")

        total = (
            design.total_coverage_with_features
            if design.total_coverage_with_features is not None
            else total_feature_coverage(design.total_coverage, design.accessory_structures)
        )
        envelope = previous.get("phase2") if previous else None
        if envelope is not None and envelope.next_phase_inputs is not None:
            max_coverage = envelope.next_phase_inputs.max_coverage
        else:
            max_coverage = calculate_coverage(site.lot_size).total_max_coverage
        total_ok = total <= max_coverage
        _tally(results, ValidationCheck(
            check_name="Total Coverage With Features",
            result=_pass_fail(total_ok),
            actual=total,
            required=max_coverage,
            message=(
                "Total coverage including all features within limits" if total_ok
                else "Total coverage including all features exceeds maximum allowed"
            ),
        ), ViolationType.DESIGN_STOPPER, None, "Total Coverage",
            "Reduce structure sizes or eliminate features")

        results.status = _phase_status(results)
        return results

    # ──────────────────────────────────────────────────────────────
    # PHASE 5
    # ──────────────────────────────────────────────────────────────

    def execute_phase5_validation(
        self, site: SiteData, design: DesignData,
        previous: Mapping[str, ValidationPhaseResult],
    ) -> FinalComplianceResult:
        """Aggregate review, critical path, stamps, documents, final report.

        The final status considers violations from every phase, not only
        this one.
        """
        results = FinalComplianceResult(phase=5, phase_name=self.PHASES[5])
        prior = [previous.get(f"phase{n}") for n in range(1, 5)]

        results.validation_checks.append(_comprehensive_check(prior))

        critical = critical_violations(collect_violations(prior))
        results.validation_checks.append(ValidationCheck(
            check_name="Critical Path Validation",
            result=_pass_fail(not critical),
            violations=[v.description for v in critical],
            message=(
                "No critical path violations detected" if not critical
                else f"{len(critical)} critical path violations found"
            ),
        ))

        missing_stamps = [s for s in REQUIRED_STAMPS if s not in design.professional_stamps]
        _tally(results, ValidationCheck(
            check_name="Professional Requirements",
            result=_pass_fail(not missing_stamps),
            required=list(REQUIRED_STAMPS),
            violations=missing_stamps,
            message=(
                "All required professional stamps present" if not missing_stamps
                else f"Missing professional stamps: {', '.join(missing_stamps)}"
            ),
        ), ViolationType.PROCESS_STOPPER, None, "Professional Requirements")

        missing_docs = [d for d in REQUIRED_DOCUMENTS if d not in design.submitted_documents]
        _tally(results, ValidationCheck(
            check_name="Documentation Completeness",
            result=_pass_fail(not missing_docs),
            required=list(REQUIRED_DOCUMENTS),
            violations=missing_docs,
            message=(
                "All required documentation present" if not missing_docs
                else f"Missing documents: {', '.join(missing_docs)}"
            ),
        ), ViolationType.PROCESS_STOPPER, None, "Documentation")

        all_violations = collect_violations([*prior, results])
        overall = derive_overall_status(all_violations)
        results.status = to_phase_status(overall)

        grouped = group_by_severity(all_violations)
        phase_map = {
            key: result.status.value
            for key, result in previous.items() if result is not None
        }
        phase_map["phase5"] = results.status.value
        results.final_report = ValidationFinalReport(
            project_summary=ValidationProjectSummary(
                address=site.address,
                zone=site.zone,
                lot_size=site.lot_size,
                validation_date=datetime.now(),
            ),
            overall_status=overall,
            violation_summary=summarize(grouped),
            phase_results=PhaseStatusMap(**phase_map),
            violations=grouped,
            next_steps=get_next_steps(overall),
            estimated_resolution=estimate_resolution(all_violations),
        )
        return results

    # ──────────────────────────────────────────────────────────────
    # WORKFLOW
    # ──────────────────────────────────────────────────────────────

    def execute_validation_workflow(self, site: SiteData, design: DesignData) -> ValidationWorkflow:
        """Run phases 1-5, stopping after phase 1 on a critical site failure."""
        self.zone_table.lookup(site.zone)
        workflow = ValidationWorkflow(
            start_time=datetime.now(), site_data=site, design_data=design,
        )
        logger.info("Validation workflow started: %s (%s)", site.address, site.zone)

        steps = [
            PhaseStep("phase1", self.PHASES[1],
                      lambda prev: self.execute_phase1_validation(site, design)),
            PhaseStep("phase2", self.PHASES[2],
                      lambda prev: self.execute_phase2_validation(site, design, prev["phase1"])),
            PhaseStep("phase3", self.PHASES[3],
                      lambda prev: self.execute_phase3_validation(site, design)),
            PhaseStep("phase4", self.PHASES[4],
                      lambda prev: self.execute_phase4_validation(site, design, prev)),
            PhaseStep("phase5", self.PHASES[5],
                      lambda prev: self.execute_phase5_validation(site, design, prev)),
        ]
        outcome = run_phases(
            steps, should_stop=lambda r: r.status == ValidationStatus.CRITICAL_FAILURE,
        )
        workflow.phases = ValidationPhases(**outcome.results)

        if outcome.stopped:
            workflow.overall_status = ValidationStatus.REJECTED.value
            workflow.stop_reason = "Critical site validation failures"
            logger.info("Validation workflow stopped after phase 1: %s", site.address)
            return workflow
        if outcome.error:
            workflow.overall_status = "error"
            workflow.error = outcome.error
            return workflow

        phase5 = workflow.phases.phase5
        workflow.overall_status = phase5.status.value
        workflow.final_report = phase5.final_report
        workflow.end_time = datetime.now()
        logger.info("Validation workflow finished: %s -> %s",
                    site.address, workflow.overall_status)
        return workflow

    # ──────────────────────────────────────────────────────────────
    # CHECKS
    # ──────────────────────────────────────────────────────────────

    def _check_lot_size(self, site: SiteData, req: ZoneRequirement) -> ValidationCheck:
        ok = site.lot_size >= req.min_lot_size
        return ValidationCheck(
            check_name="Lot Size Validation",
            rule_id="R001",
            result=_pass_fail(ok),
            actual=site.lot_size,
            required=req.min_lot_size,
            message=(
                f"Lot size meets minimum requirement ({fmt_num(req.min_lot_size)} sq ft)" if ok
                else f"Lot area below minimum threshold for {site.zone} zone "
                     f"(Required: {fmt_num(req.min_lot_size)} sq ft, "
                     f"Actual: {fmt_num(site.lot_size)} sq ft)"
            ),
        )

    def _check_sub_standard(self, site: SiteData, req: ZoneRequirement) -> ValidationCheck:
        threshold = get_sub_standard_threshold(req, site.lot_type)
        is_sub_standard = site.lot_size < threshold
        return ValidationCheck(
            check_name="Substandard Lot Assessment",
            result=CheckResult.INFO,
            actual=site.lot_size,
            required=threshold,
            message=(
                "Lot qualifies as substandard - height restrictions apply" if is_sub_standard
                else "Lot meets standard size requirements"
            ),
            details={"is_sub_standard": is_sub_standard, "threshold": threshold},
        )

    def _check_historic(self, site: SiteData, design: DesignData) -> ValidationCheck:
        if not site.historic_category:
            return ValidationCheck(
                check_name="Historic Property Constraints",
                rule_id="CP009",
                result=CheckResult.PASS,
                message="No historic designation - standard regulations apply",
            )
        approved = design.historic_compliance == "approved"
        return ValidationCheck(
            check_name="Historic Property Constraints",
            rule_id="CP009",
            result=_pass_fail(approved),
            actual=design.historic_compliance,
            required="approved",
            message=(
                f"Historic {site.historic_category} compliance verified" if approved
                else f"Historic {site.historic_category} property requires special design review"
            ),
            details={"category": site.historic_category},
        )

    def _check_environmental(self, site: SiteData, design: DesignData) -> ValidationCheck:
        encroachments = []
        if site.creek_areas > 0 and design.encroaches_creek:
            encroachments.append("creek channel")
        if site.easements > 0 and design.encroaches_easement:
            encroachments.append("utility easement")
        return ValidationCheck(
            check_name="Environmental Exclusions",
            rule_id="CP012",
            result=_pass_fail(not encroachments),
            violations=encroachments,
            message=(
                "No encroachments into protected areas" if not encroachments
                else f"Building encroaches into protected areas: {', '.join(encroachments)}"
            ),
            details={
                "buildable_area": calculate_buildable_area(
                    site.lot_size, site.creek_areas, site.easements,
                ),
            },
        )

    def _check_garage(self, site: SiteData, design: DesignData) -> ValidationCheck:
        if not design.has_garage:
            return ValidationCheck(
                check_name="Garage Placement",
                result=CheckResult.NOT_APPLICABLE,
                message="No garage proposed",
            )
        violations = find_garage_violations(
            site.is_corner_lot, design.garage_front_setback, design.garage_street_side_setback,
        )
        name = "Garage Placement (Corner Lot)" if site.is_corner_lot else "Garage Placement"
        return ValidationCheck(
            check_name=name,
            rule_id="CP014",
            result=_pass_fail(not violations),
            violations=violations,
            message=(
                "Garage placement meets setback requirements" if not violations
                else "; ".join(violations)
            ),
        )


# ──────────────────────────────────────────────────────────────────
# HELPERS
# ──────────────────────────────────────────────────────────────────

def _pass_fail(ok: bool) -> CheckResult:
    return CheckResult.PASS if ok else CheckResult.FAIL


def _list_check(
    name: str, rule_id: Optional[str], violations: list[str], ok_message: str,
) -> ValidationCheck:
    """A check that fails if any violation string was found; the message
    joins them all."""
    return ValidationCheck(
        check_name=name,
        rule_id=rule_id,
        result=_pass_fail(not violations),
        violations=violations,
        message=ok_message if not violations else "; ".join(violations),
    )


def _record(
    results: ValidationPhaseResult,
    check: ValidationCheck,
    severity: ViolationType,
    rule_id: Optional[str],
    category: str,
    remediation: Optional[str] = None,
) -> None:
    results.violations.append(Violation(
        type=severity,
        rule_id=rule_id,
        category=category,
        description=check.message,
        remediation=remediation,
    ))
    results.failed += 1


def _tally(
    results: ValidationPhaseResult,
    check: ValidationCheck,
    severity: ViolationType,
    rule_id: Optional[str],
    category: str,
    remediation: Optional[str] = None,
) -> None:
    """Append *check*; a FAIL becomes a violation, anything else counts as passed."""
    results.validation_checks.append(check)
    if check.result == CheckResult.FAIL:
        _record(results, check, severity, rule_id, category, remediation)
    else:
        results.passed += 1


def _phase_status(results: ValidationPhaseResult) -> ValidationStatus:
    return ValidationStatus.VIOLATIONS_FOUND if results.violations else ValidationStatus.PASSED


def _comprehensive_check(prior: list[Optional[ValidationPhaseResult]]) -> ValidationCheck:
    """Roll up the pass/fail counters of the earlier phases."""
    ran = [r for r in prior if r is not None]
    passed = sum(r.passed for r in ran)
    failed = sum(r.failed for r in ran)
    warnings = sum(len(r.warnings) for r in ran)
    total = passed + failed
    return ValidationCheck(
        check_name="Comprehensive Rule Validation",
        result=_pass_fail(failed == 0),
        actual=passed,
        required=total,
        message=f"{passed} of {total} rule checks passed across {len(ran)} phases",
        details={
            "total_checks": total,
            "passed": passed,
            "failed": failed,
            "warnings": warnings,
        },
    )
