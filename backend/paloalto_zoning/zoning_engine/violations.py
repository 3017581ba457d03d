"""
Violation severity aggregation for design validation.

Severity tiers:
  - absolute_stopper:  blocks approval outright; any one forces REJECTED
  - major_stopper:     code requirement not met, correctable
  - design_stopper:    design-level correction
  - process_stopper:   missing documents or professional stamps

Overall status: REJECTED if any absolute stopper exists anywhere in the
run, CONDITIONAL if any violation exists, otherwise APPROVED.
"""

from __future__ import annotations

from typing import Iterable, Optional

from paloalto_zoning.models.schemas import (
    OverallStatus,
    ValidationPhaseResult,
    ValidationStatus,
    Violation,
    ViolationsBySeverity,
    ViolationSummary,
    ViolationType,
)

NEXT_STEPS = {
    OverallStatus.APPROVED: [
        "Design fully compliant",
        "Ready for permit submission",
        "Submit to Planning Department",
        "Coordinate with Building Department",
    ],
    OverallStatus.CONDITIONAL: [
        "Address identified violations",
        "Revise design drawings",
        "Resubmit for validation",
        "Consider professional consultation",
    ],
    OverallStatus.REJECTED: [
        "Major redesign required",
        "Address critical violations first",
        "Consider project feasibility",
        "Engage professional team",
    ],
}

_PHASE_STATUS = {
    OverallStatus.APPROVED: ValidationStatus.APPROVED,
    OverallStatus.CONDITIONAL: ValidationStatus.CONDITIONAL,
    OverallStatus.REJECTED: ValidationStatus.REJECTED,
}


def collect_violations(results: Iterable[Optional[ValidationPhaseResult]]) -> list[Violation]:
    """Flatten violations from every phase result, in phase order."""
    violations: list[Violation] = []
    for result in results:
        if result is not None:
            violations.extend(result.violations)
    return violations


def critical_violations(violations: Iterable[Violation]) -> list[Violation]:
    return [v for v in violations if v.type == ViolationType.ABSOLUTE_STOPPER]


def derive_overall_status(violations: list[Violation]) -> OverallStatus:
    if critical_violations(violations):
        return OverallStatus.REJECTED
    if violations:
        return OverallStatus.CONDITIONAL
    return OverallStatus.APPROVED


def to_phase_status(overall: OverallStatus) -> ValidationStatus:
    return _PHASE_STATUS[overall]


def group_by_severity(violations: list[Violation]) -> ViolationsBySeverity:
    def of(kind: ViolationType) -> list[Violation]:
        return [v for v in violations if v.type == kind]

    return ViolationsBySeverity(
        critical=of(ViolationType.ABSOLUTE_STOPPER),
        major=of(ViolationType.MAJOR_STOPPER),
        design=of(ViolationType.DESIGN_STOPPER),
        process=of(ViolationType.PROCESS_STOPPER),
    )


def summarize(grouped: ViolationsBySeverity) -> ViolationSummary:
    return ViolationSummary(
        total=(len(grouped.critical) + len(grouped.major)
               + len(grouped.design) + len(grouped.process)),
        critical=len(grouped.critical),
        major=len(grouped.major),
        design=len(grouped.design),
        process=len(grouped.process),
    )


def estimate_resolution(violations: list[Violation]) -> str:
    """Rough time to resolve, keyed off severity and count."""
    if critical_violations(violations):
        return "4-12 weeks (major redesign)"
    if len(violations) > 5:
        return "2-6 weeks (design revisions)"
    if violations:
        return "1-3 weeks (minor corrections)"
    return "Ready for submission"


def get_next_steps(overall: OverallStatus) -> list[str]:
    return list(NEXT_STEPS[overall])
