"""
Palo Alto R-1 parking, driveway and garage placement rules.

Parking (PAMC 18.52.040, Table 1):
  - main dwelling: 2 spaces, 1 covered
  - second dwelling unit: +2 spaces, +1 covered

Driveways (PAMC 18.54.020 / Transportation standards):
  - 8 ft minimum paved surface, 10 ft minimum clearance
  - 18 ft minimum backing distance from the sidewalk
  - concrete, asphalt or approved pavers

Garages: 20 ft behind the front property line; on corner lots 75 ft
from the front and 20 ft from the street side.
"""

from __future__ import annotations

from typing import Optional

from paloalto_zoning.models.schemas import (
    AccessRequirements,
    DrivewayParameters,
    GaragePlacement,
    ParkingCount,
    ParkingRequirements,
)
from paloalto_zoning.zoning_engine.height_setback import fmt_num

MAIN_DWELLING_SPACES = 2
MAIN_DWELLING_COVERED = 1
SECOND_UNIT_SPACES = 2
SECOND_UNIT_COVERED = 1

MIN_DRIVEWAY_SURFACE_FT = 8
MIN_DRIVEWAY_CLEARANCE_FT = 10
MIN_BACKING_DISTANCE_FT = 18
APPROVED_DRIVEWAY_MATERIALS = ("concrete", "asphalt", "approved_pavers")

GARAGE_FRONT_SETBACK_FT = 20
CORNER_GARAGE_FRONT_SETBACK_FT = 75
CORNER_GARAGE_STREET_SIDE_SETBACK_FT = 20


def get_required_spaces(has_second_unit: bool) -> tuple[int, int]:
    """(total, covered) spaces required."""
    total, covered = MAIN_DWELLING_SPACES, MAIN_DWELLING_COVERED
    if has_second_unit:
        total += SECOND_UNIT_SPACES
        covered += SECOND_UNIT_COVERED
    return total, covered


def calculate_parking(has_second_unit: bool) -> ParkingRequirements:
    total, covered = get_required_spaces(has_second_unit)
    return ParkingRequirements(
        main_dwelling=ParkingCount(total=MAIN_DWELLING_SPACES, covered=MAIN_DWELLING_COVERED),
        second_unit=(
            ParkingCount(total=SECOND_UNIT_SPACES, covered=SECOND_UNIT_COVERED)
            if has_second_unit else None
        ),
        total_required=total,
        covered_required=covered,
    )


def get_driveway_parameters() -> DrivewayParameters:
    return DrivewayParameters(
        min_surface_width=MIN_DRIVEWAY_SURFACE_FT,
        min_clearance_width=MIN_DRIVEWAY_CLEARANCE_FT,
        approved_materials=list(APPROVED_DRIVEWAY_MATERIALS),
        min_backing_distance=MIN_BACKING_DISTANCE_FT,
    )


def get_garage_placement(is_corner_lot: bool) -> GaragePlacement:
    if is_corner_lot:
        return GaragePlacement(
            front_setback=CORNER_GARAGE_FRONT_SETBACK_FT,
            street_side_setback=CORNER_GARAGE_STREET_SIDE_SETBACK_FT,
            special_conditions=["Corner lot requirements"],
        )
    return GaragePlacement(front_setback=GARAGE_FRONT_SETBACK_FT)


def get_garage_recommendations(garage: GaragePlacement, is_corner_lot: bool) -> list[str]:
    if is_corner_lot:
        return [
            f"Corner lot: Garage must be {garage.front_setback:g} feet from front property line",
            f"Corner lot: Garage must be {garage.street_side_setback:g} feet from street side",
        ]
    return [f"Garage must be {garage.front_setback:g} feet from front property line"]


def get_access_requirements() -> AccessRequirements:
    return AccessRequirements(min_backing_distance=MIN_BACKING_DISTANCE_FT)


def find_driveway_violations(surface_width: float, clearance_width: float) -> list[str]:
    violations = []
    if surface_width < MIN_DRIVEWAY_SURFACE_FT:
        violations.append(
            f"Driveway surface width insufficient ({fmt_num(surface_width)} ft < "
            f"{MIN_DRIVEWAY_SURFACE_FT} ft required)"
        )
    if clearance_width < MIN_DRIVEWAY_CLEARANCE_FT:
        violations.append(
            f"Driveway clearance width insufficient ({fmt_num(clearance_width)} ft < "
            f"{MIN_DRIVEWAY_CLEARANCE_FT} ft required)"
        )
    return violations


def find_garage_violations(
    is_corner_lot: bool,
    front_setback: Optional[float],
    street_side_setback: Optional[float],
) -> list[str]:
    """Garage setback shortfalls. Corner lots must satisfy both distances."""
    violations = []
    required_front = CORNER_GARAGE_FRONT_SETBACK_FT if is_corner_lot else GARAGE_FRONT_SETBACK_FT
    if front_setback is None or front_setback < required_front:
        violations.append(
            f"Garage front setback insufficient ({_ft(front_setback)} < "
            f"{required_front} ft required)"
        )
    if is_corner_lot and (
        street_side_setback is None
        or street_side_setback < CORNER_GARAGE_STREET_SIDE_SETBACK_FT
    ):
        violations.append(
            f"Garage street side setback insufficient ({_ft(street_side_setback)} < "
            f"{CORNER_GARAGE_STREET_SIDE_SETBACK_FT} ft required)"
        )
    return violations


def is_approved_material(material: str) -> bool:
    return material in APPROVED_DRIVEWAY_MATERIALS


def _ft(value: Optional[float]) -> str:
    return "not provided" if value is None else f"{fmt_num(value)} ft"
