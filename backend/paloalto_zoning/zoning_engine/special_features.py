"""
Palo Alto R-1 second dwelling unit, accessory structure and pool rules.

Second dwelling units (PAMC 18.42.040):
  - lot must meet the zone's second-unit minimum (stricter for flag lots)
  - max 640 sq ft, and no more than 50% of the main house
  - 2 additional parking spaces, 1 covered

Accessory structures (PAMC 18.12.080): 15 ft max height, 5 ft setbacks,
5 ft separation from the main house, counted toward lot coverage.

Pools and spas: 5 ft setbacks, safety barriers, screened equipment.
"""

from __future__ import annotations

from typing import Optional

from paloalto_zoning.models.schemas import (
    AccessoryStructure,
    AccessoryStructureParameters,
    LotType,
    PoolParameters,
    SecondUnitParameters,
    ZoneRequirement,
)
from paloalto_zoning.zoning_engine.height_setback import fmt_num
from paloalto_zoning.zoning_engine.parking import SECOND_UNIT_COVERED, SECOND_UNIT_SPACES
from paloalto_zoning.zoning_engine.zone_table import get_second_unit_minimum

SECOND_UNIT_MAX_SF = 640
SECOND_UNIT_MAX_PCT_OF_MAIN = 50

ACCESSORY_MAX_HEIGHT_FT = 15
ACCESSORY_MIN_SETBACK_FT = 5
ACCESSORY_MIN_SEPARATION_FT = 5

POOL_MIN_SETBACK_FT = 5


def is_second_unit_feasible(
    req: ZoneRequirement, lot_size: float, lot_type: LotType | str,
) -> tuple[bool, float]:
    """(feasible, minimum lot size) for a second dwelling unit."""
    minimum = get_second_unit_minimum(req, lot_type)
    return lot_size >= minimum, minimum


def get_second_unit_parameters() -> SecondUnitParameters:
    return SecondUnitParameters(
        max_size=SECOND_UNIT_MAX_SF,
        max_size_percent=SECOND_UNIT_MAX_PCT_OF_MAIN,
        parking_required=SECOND_UNIT_SPACES,
        covered_required=SECOND_UNIT_COVERED,
    )


def get_second_unit_max_size(main_house_area: float) -> float:
    """min(640, 50% of the main house)."""
    return min(SECOND_UNIT_MAX_SF, main_house_area * SECOND_UNIT_MAX_PCT_OF_MAIN / 100)


def get_accessory_parameters() -> AccessoryStructureParameters:
    return AccessoryStructureParameters(
        max_height=ACCESSORY_MAX_HEIGHT_FT,
        min_setbacks=ACCESSORY_MIN_SETBACK_FT,
        min_separation=ACCESSORY_MIN_SEPARATION_FT,
        included_in_coverage=True,
    )


def get_pool_parameters() -> PoolParameters:
    return PoolParameters(min_setbacks=POOL_MIN_SETBACK_FT)


def find_accessory_violations(structures: list[AccessoryStructure]) -> list[str]:
    """Per-structure height and setback violations, numbered from 1."""
    violations = []
    for index, structure in enumerate(structures, start=1):
        label = structure.name or f"Structure {index}"
        if structure.height > ACCESSORY_MAX_HEIGHT_FT:
            violations.append(
                f"{label}: Height exceeds {ACCESSORY_MAX_HEIGHT_FT} ft "
                f"({fmt_num(structure.height)} ft)"
            )
        if structure.setback < ACCESSORY_MIN_SETBACK_FT:
            violations.append(
                f"{label}: Setback less than {ACCESSORY_MIN_SETBACK_FT} ft "
                f"({fmt_num(structure.setback)} ft)"
            )
    return violations


def find_pool_violations(setback: Optional[float], has_barriers: bool) -> list[str]:
    violations = []
    if setback is None:
        violations.append(f"Pool setback not specified ({POOL_MIN_SETBACK_FT} ft required)")
    elif setback < POOL_MIN_SETBACK_FT:
        violations.append(
            f"Pool setback insufficient ({fmt_num(setback)} ft < {POOL_MIN_SETBACK_FT} ft required)"
        )
    if not has_barriers:
        violations.append("Pool safety barriers not specified")
    return violations


def total_feature_coverage(
    total_coverage: float, structures: list[AccessoryStructure],
) -> float:
    """Main coverage plus accessory structure footprints."""
    return total_coverage + sum(s.footprint for s in structures)
