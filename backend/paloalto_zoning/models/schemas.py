from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ──────────────────────────────────────────────────────────────────
# ENUMS
# ──────────────────────────────────────────────────────────────────

class LotType(str, Enum):
    TYPICAL = "typical"
    FLAG = "flag"


class TaskStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    COMPLETED = "completed"
    FEASIBLE = "feasible"
    NOT_FEASIBLE = "not_feasible"


class PlanningStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    STOPPED = "stopped"


class ValidationStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    VIOLATIONS_FOUND = "violations_found"
    PASSED = "passed"
    CRITICAL_FAILURE = "critical_failure"
    APPROVED = "approved"
    CONDITIONAL = "conditional"
    REJECTED = "rejected"


class CheckResult(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    WARNING = "WARNING"
    INFO = "INFO"
    NOT_APPLICABLE = "N/A"


class ViolationType(str, Enum):
    """Violation severity, most to least severe."""
    ABSOLUTE_STOPPER = "absolute_stopper"
    MAJOR_STOPPER = "major_stopper"
    DESIGN_STOPPER = "design_stopper"
    PROCESS_STOPPER = "process_stopper"


class RecommendationType(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"
    CRITICAL = "critical"


class OverallStatus(str, Enum):
    APPROVED = "APPROVED"
    CONDITIONAL = "CONDITIONAL"
    REJECTED = "REJECTED"


# ──────────────────────────────────────────────────────────────────
# ZONE TABLE
# ──────────────────────────────────────────────────────────────────

class ZoneRequirement(BaseModel):
    """Lot-size thresholds (sq ft) for one R-1 zone district."""
    model_config = ConfigDict(frozen=True)

    min_lot_size: float
    max_lot_size: float
    sub_standard_typical: float
    sub_standard_flag: float
    second_unit_min_typical: float
    second_unit_min_flag: float


# ──────────────────────────────────────────────────────────────────
# INPUTS
# ──────────────────────────────────────────────────────────────────

class SiteData(BaseModel):
    address: str
    zone: str
    lot_size: float
    apn: str = ""
    lot_type: LotType = LotType.TYPICAL
    is_corner_lot: bool = False
    creek_areas: float = Field(0, ge=0)
    easements: float = Field(0, ge=0)
    historic_category: Optional[str] = None
    has_second_unit: bool = False


class AccessoryStructure(BaseModel):
    name: Optional[str] = None
    height: float
    setback: float
    footprint: float = 0


class DesignData(BaseModel):
    """A proposed design. Optional dimensions that are absent are reported
    as not provided by the checks that need them."""
    submitted_zone: str
    building_height: float
    total_floor_area: float
    floors: int = Field(1, ge=1)
    total_coverage: float = 0

    front_setback: Optional[float] = None
    interior_side_setback: Optional[float] = None
    street_side_setback: Optional[float] = None
    rear_setback: Optional[float] = None

    parking_spaces: int = 0
    covered_parking_spaces: int = 0
    driveway_surface_width: float = 8
    driveway_clearance_width: float = 10
    backing_distance: float = 18
    driveway_material: str = "concrete"

    has_second_unit: bool = False
    has_pool: bool = False
    has_garage: bool = False
    daylight_plane_compliant: bool = True

    professional_stamps: set[str] = set()
    submitted_documents: set[str] = set()

    historic_compliance: Optional[str] = None
    encroaches_creek: bool = False
    encroaches_easement: bool = False

    second_floor_ceiling: Optional[float] = None
    third_floor_ceiling: Optional[float] = None
    porch_area: Optional[float] = None
    entry_projection: Optional[float] = None
    bay_window_projection: Optional[float] = None

    garage_front_setback: Optional[float] = None
    garage_street_side_setback: Optional[float] = None
    pool_setback: Optional[float] = None
    pool_safety_barriers: bool = False
    accessory_structures: list[AccessoryStructure] = []

    second_unit_area: float = 0
    main_house_area: Optional[float] = None
    total_coverage_with_features: Optional[float] = None


# ──────────────────────────────────────────────────────────────────
# PLANNING: TASKS & PARAMETERS
# ──────────────────────────────────────────────────────────────────

class Task(BaseModel):
    name: str
    status: TaskStatus
    message: Optional[str] = None
    parameters: Optional[dict] = None
    recommendations: list[str] = []
    details: dict = {}


class Recommendation(BaseModel):
    type: RecommendationType
    message: str
    action: Optional[str] = None


class Constraint(BaseModel):
    type: str
    description: str
    impact: str
    category: Optional[str] = None


class StoryEquivalencies(BaseModel):
    second_floor: float
    third_floor: float


class HeightParameters(BaseModel):
    max_height: float
    story_equivalencies: StoryEquivalencies
    daylight_plane: str


class DaylightPlaneParameters(BaseModel):
    angle: float
    measurement_height: float
    applicable_lines: list[str]


class FARBreakdown(BaseModel):
    first_5000_allowance: float
    excess_allowance: float
    calculated_far: float
    max_floor_area: float
    breakdown: dict[str, float] = {}


class SetbackParameters(BaseModel):
    front: float
    interior_side: float
    street_side: Optional[float] = None
    rear: float
    special_conditions: list[str] = []


class PorchAllowance(BaseModel):
    max_size: float
    unit: str = "sq ft"


class EntryProjectionAllowance(BaseModel):
    max_projection: float
    unit: str = "feet into setback"


class BayWindowAllowance(BaseModel):
    max_projection: float
    max_width: float
    unit: str = "feet"


class ArchitecturalFeatures(BaseModel):
    porches: PorchAllowance
    entry_projections: EntryProjectionAllowance
    bay_windows: BayWindowAllowance


class BuildingEnvelope(BaseModel):
    daylight_plane: DaylightPlaneParameters
    architectural_features: ArchitecturalFeatures


class DesignParameters(BaseModel):
    max_height: float
    max_floor_area: float
    setbacks: SetbackParameters
    far_breakdown: FARBreakdown
    building_envelope: BuildingEnvelope


class ParkingCount(BaseModel):
    total: int
    covered: int


class ParkingRequirements(BaseModel):
    main_dwelling: ParkingCount
    second_unit: Optional[ParkingCount] = None
    total_required: int
    covered_required: int


class DrivewayParameters(BaseModel):
    min_surface_width: float
    min_clearance_width: float
    approved_materials: list[str]
    min_backing_distance: float


class GaragePlacement(BaseModel):
    front_setback: float
    street_side_setback: Optional[float] = None
    special_conditions: list[str] = []


class AccessRequirements(BaseModel):
    min_backing_distance: float
    turning_radius: str = "adequate for vehicle maneuverability"
    transportation_approval: str = "required for driveway design"


class ParkingParameters(BaseModel):
    required: ParkingRequirements
    driveway: DrivewayParameters
    garage: GaragePlacement
    access: AccessRequirements


class SecondUnitParameters(BaseModel):
    max_size: float
    max_size_percent: float
    parking_required: int
    covered_required: int


class AccessoryStructureParameters(BaseModel):
    max_height: float
    min_setbacks: float
    min_separation: float
    included_in_coverage: bool = True


class PoolParameters(BaseModel):
    min_setbacks: float
    safety_barriers: str = "required"
    equipment_screening: str = "required"


class CoverageParameters(BaseModel):
    max_coverage_percent: float
    additional_allowance_percent: float
    max_coverage_area: float
    additional_allowance_area: float
    total_max_coverage: float


class FeatureParameters(BaseModel):
    second_unit: Optional[SecondUnitParameters] = None
    accessory_structures: AccessoryStructureParameters
    pool_spa: PoolParameters
    coverage: CoverageParameters


class ComplianceReviewSummary(BaseModel):
    total_checks: int
    passed: int
    failed: int
    warnings: int


class DocumentationRequirements(BaseModel):
    required_drawings: list[str]
    professional_stamps: list[str]


class ProfessionalRequirements(BaseModel):
    required: list[str]
    recommended: list[str]
    conditional: list[str] = []


class SubmissionStrategy(BaseModel):
    submit_to: list[str]
    timeline: str
    strategy: str


class Documentation(BaseModel):
    compliance_review: ComplianceReviewSummary
    requirements: DocumentationRequirements
    professionals: ProfessionalRequirements
    submission_strategy: SubmissionStrategy


# ──────────────────────────────────────────────────────────────────
# PLANNING: PHASE HAND-OFFS
# ──────────────────────────────────────────────────────────────────

class SiteAnalysisOutput(BaseModel):
    buildable_area: float
    is_sub_standard: bool
    zone_requirements: ZoneRequirement
    constraints: list[Constraint] = []


class EnvelopeOutput(BaseModel):
    design_parameters: DesignParameters
    lot_size: float
    is_corner_lot: bool
    zone: str


class ParkingOutput(BaseModel):
    parking_parameters: ParkingParameters
    has_second_unit: bool
    lot_size: float


class FeaturesOutput(BaseModel):
    feature_parameters: FeatureParameters
    total_compliance: dict[str, str] = {}


# ──────────────────────────────────────────────────────────────────
# PLANNING: PHASE RESULTS & REPORT
# ──────────────────────────────────────────────────────────────────

class PlanningProjectSummary(BaseModel):
    address: str
    zone: str
    lot_size: float
    is_sub_standard: bool = False


class PlanningFinalReport(BaseModel):
    project_summary: PlanningProjectSummary
    design_parameters: Optional[DesignParameters] = None
    parking_parameters: Optional[ParkingParameters] = None
    feature_parameters: Optional[FeatureParameters] = None
    compliance_status: str
    next_steps: list[str] = []
    estimated_timeline: str


class PlanningPhaseResult(BaseModel):
    phase: int
    phase_name: str
    status: PlanningStatus = PlanningStatus.IN_PROGRESS
    tasks: list[Task] = []
    recommendations: list[Recommendation] = []
    constraints: list[Constraint] = []


class SiteAnalysisResult(PlanningPhaseResult):
    next_phase_inputs: Optional[SiteAnalysisOutput] = None


class BuildingEnvelopeResult(PlanningPhaseResult):
    design_parameters: Optional[DesignParameters] = None
    next_phase_inputs: Optional[EnvelopeOutput] = None


class ParkingAccessResult(PlanningPhaseResult):
    parking_parameters: Optional[ParkingParameters] = None
    next_phase_inputs: Optional[ParkingOutput] = None


class SpecialFeaturesResult(PlanningPhaseResult):
    feature_parameters: Optional[FeatureParameters] = None
    next_phase_inputs: Optional[FeaturesOutput] = None


class DocumentationResult(PlanningPhaseResult):
    documentation: Optional[Documentation] = None
    final_report: Optional[PlanningFinalReport] = None


class PlanningPhases(BaseModel):
    phase1: Optional[SiteAnalysisResult] = None
    phase2: Optional[BuildingEnvelopeResult] = None
    phase3: Optional[ParkingAccessResult] = None
    phase4: Optional[SpecialFeaturesResult] = None
    phase5: Optional[DocumentationResult] = None

    def completed_keys(self) -> list[str]:
        return [k for k, v in self if v is not None]


class PlanningWorkflow(BaseModel):
    start_time: datetime
    site_data: SiteData
    phases: PlanningPhases = Field(default_factory=PlanningPhases)
    overall_status: str = "in_progress"
    stop_reason: Optional[str] = None
    final_report: Optional[PlanningFinalReport] = None
    end_time: Optional[datetime] = None
    error: Optional[str] = None


# ──────────────────────────────────────────────────────────────────
# VALIDATION: CHECKS & VIOLATIONS
# ──────────────────────────────────────────────────────────────────

class ValidationCheck(BaseModel):
    check_name: str
    rule_id: Optional[str] = None
    result: CheckResult
    message: str
    actual: Any = None
    required: Any = None
    violations: list[str] = []
    details: dict = {}


class Violation(BaseModel):
    type: ViolationType
    rule_id: Optional[str] = None
    category: str
    description: str
    remediation: Optional[str] = None


class ValidationWarning(BaseModel):
    type: str
    message: str
    impact: Optional[str] = None


class SitePreValidationOutput(BaseModel):
    is_sub_standard: bool
    zone_requirements: ZoneRequirement
    buildable_area: float
    historic_category: Optional[str] = None


class EnvelopeValidationOutput(BaseModel):
    max_height: float
    max_floor_area: float
    max_coverage: float


class ViolationSummary(BaseModel):
    total: int = 0
    critical: int = 0
    major: int = 0
    design: int = 0
    process: int = 0


class ViolationsBySeverity(BaseModel):
    critical: list[Violation] = []
    major: list[Violation] = []
    design: list[Violation] = []
    process: list[Violation] = []


class PhaseStatusMap(BaseModel):
    phase1: str = "not_run"
    phase2: str = "not_run"
    phase3: str = "not_run"
    phase4: str = "not_run"
    phase5: str = "not_run"


class ValidationProjectSummary(BaseModel):
    address: str
    zone: str
    lot_size: float
    validation_date: datetime


class ValidationFinalReport(BaseModel):
    project_summary: ValidationProjectSummary
    overall_status: OverallStatus
    violation_summary: ViolationSummary
    phase_results: PhaseStatusMap
    violations: ViolationsBySeverity
    next_steps: list[str] = []
    estimated_resolution: str


class ValidationPhaseResult(BaseModel):
    phase: int
    phase_name: str
    status: ValidationStatus = ValidationStatus.IN_PROGRESS
    validation_checks: list[ValidationCheck] = []
    violations: list[Violation] = []
    warnings: list[ValidationWarning] = []
    passed: int = 0
    failed: int = 0


class SitePreValidationResult(ValidationPhaseResult):
    next_phase_inputs: Optional[SitePreValidationOutput] = None


class EnvelopeValidationResult(ValidationPhaseResult):
    next_phase_inputs: Optional[EnvelopeValidationOutput] = None


class FinalComplianceResult(ValidationPhaseResult):
    final_report: Optional[ValidationFinalReport] = None


class ValidationPhases(BaseModel):
    phase1: Optional[SitePreValidationResult] = None
    phase2: Optional[EnvelopeValidationResult] = None
    phase3: Optional[ValidationPhaseResult] = None
    phase4: Optional[ValidationPhaseResult] = None
    phase5: Optional[FinalComplianceResult] = None

    def completed_keys(self) -> list[str]:
        return [k for k, v in self if v is not None]


class ValidationWorkflow(BaseModel):
    start_time: datetime
    site_data: SiteData
    design_data: DesignData
    phases: ValidationPhases = Field(default_factory=ValidationPhases)
    overall_status: str = "in_progress"
    stop_reason: Optional[str] = None
    final_report: Optional[ValidationFinalReport] = None
    end_time: Optional[datetime] = None
    error: Optional[str] = None


# ──────────────────────────────────────────────────────────────────
# API
# ──────────────────────────────────────────────────────────────────

class PlanningRequest(BaseModel):
    site: SiteData


class ValidationRequest(BaseModel):
    site: SiteData
    design: DesignData


class ZoneInfo(BaseModel):
    zone: str
    requirements: ZoneRequirement
