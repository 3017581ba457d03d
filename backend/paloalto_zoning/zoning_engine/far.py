"""
Palo Alto R-1 floor area ratio (FAR) and lot coverage rules.

FAR is tiered on lot area with an absolute ceiling (PAMC 18.12.040):
  - 45% of the first 5,000 sq ft of lot area
  - 30% of lot area above 5,000 sq ft
  - never more than 6,000 sq ft of gross floor area

Lot coverage (PAMC 18.12.040):
  - 35% of lot area base coverage
  - 5% of lot area additional allowance (porches, eaves, accessory)
"""

from __future__ import annotations

import logging

from paloalto_zoning.models.schemas import CoverageParameters, FARBreakdown

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────
# FLOOR AREA
# ──────────────────────────────────────────────────────────────────

FAR_TIER_BREAK_SF = 5000
FAR_FIRST_TIER_PCT = 45
FAR_EXCESS_PCT = 30
MAX_FLOOR_AREA_SF = 6000

# ──────────────────────────────────────────────────────────────────
# LOT COVERAGE
# ──────────────────────────────────────────────────────────────────

BASE_COVERAGE_PCT = 35
ADDITIONAL_COVERAGE_PCT = 5
MAX_COVERAGE_RATIO = (BASE_COVERAGE_PCT + ADDITIONAL_COVERAGE_PCT) / 100


def calculate_far(lot_size: float) -> FARBreakdown:
    """Tiered floor-area allowance for a lot.

    >>> calculate_far(8000).max_floor_area
    3150.0
    """
    first_5000 = min(lot_size, FAR_TIER_BREAK_SF) * FAR_FIRST_TIER_PCT / 100
    excess = max(lot_size - FAR_TIER_BREAK_SF, 0) * FAR_EXCESS_PCT / 100
    calculated = first_5000 + excess
    max_floor_area = min(calculated, MAX_FLOOR_AREA_SF)

    return FARBreakdown(
        first_5000_allowance=first_5000,
        excess_allowance=excess,
        calculated_far=calculated,
        max_floor_area=max_floor_area,
        breakdown={
            "First 5000 sq ft @ 45%": first_5000,
            "Excess area @ 30%": excess,
            "Maximum regardless": MAX_FLOOR_AREA_SF,
            "Final allowance": max_floor_area,
        },
    )


def get_max_floor_area(lot_size: float) -> float:
    return calculate_far(lot_size).max_floor_area


def calculate_coverage(lot_size: float) -> CoverageParameters:
    """Base + additional coverage allowance in square feet."""
    base = lot_size * BASE_COVERAGE_PCT / 100
    additional = lot_size * ADDITIONAL_COVERAGE_PCT / 100
    return CoverageParameters(
        max_coverage_percent=BASE_COVERAGE_PCT,
        additional_allowance_percent=ADDITIONAL_COVERAGE_PCT,
        max_coverage_area=base,
        additional_allowance_area=additional,
        total_max_coverage=base + additional,
    )


def get_max_coverage(lot_size: float) -> float:
    """Total coverage cap (base + allowance), i.e. 40% of lot area."""
    return calculate_coverage(lot_size).total_max_coverage


# ──────────────────────────────────────────────────────────────────
# BUILDABLE AREA
# ──────────────────────────────────────────────────────────────────

def exclusions_exceed_lot(lot_size: float, creek_areas: float, easements: float) -> bool:
    return creek_areas + easements > lot_size


def calculate_buildable_area(lot_size: float, creek_areas: float, easements: float) -> float:
    """Lot area net of creek areas and easements, clamped at zero."""
    buildable = lot_size - creek_areas - easements
    if buildable < 0:
        logger.warning(
            "Environmental exclusions (%.0f sq ft) exceed lot area (%.0f sq ft); "
            "buildable area clamped to 0",
            creek_areas + easements, lot_size,
        )
        return 0.0
    return buildable
