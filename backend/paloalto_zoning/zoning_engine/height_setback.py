"""
Palo Alto R-1 height, daylight plane, setback and projection rules.

Height (PAMC 18.12.040):
  - 30 ft maximum; 17 ft on substandard lots
  - story equivalency: 2nd floor plate/ceiling at or below 17 ft,
    3rd floor at or below 26 ft

Daylight plane: 45 degrees, starting 10 ft above grade at every
property line.

Setbacks (minimum, feet):
  - front 20, interior side 5, rear 20
  - street side 16 on corner lots only
"""

from __future__ import annotations

from typing import Optional

from paloalto_zoning.models.schemas import (
    ArchitecturalFeatures,
    BayWindowAllowance,
    DaylightPlaneParameters,
    EntryProjectionAllowance,
    HeightParameters,
    PorchAllowance,
    SetbackParameters,
    StoryEquivalencies,
)

# ──────────────────────────────────────────────────────────────────
# HEIGHT
# ──────────────────────────────────────────────────────────────────

MAX_HEIGHT_FT = 30
SUBSTANDARD_MAX_HEIGHT_FT = 17
SECOND_FLOOR_MAX_FT = 17
THIRD_FLOOR_MAX_FT = 26

DAYLIGHT_PLANE_ANGLE = 45
DAYLIGHT_PLANE_START_FT = 10
DAYLIGHT_PLANE_LINES = ["front", "rear", "side_interior", "side_street"]

# ──────────────────────────────────────────────────────────────────
# SETBACKS
# ──────────────────────────────────────────────────────────────────

FRONT_SETBACK_FT = 20
INTERIOR_SIDE_SETBACK_FT = 5
STREET_SIDE_SETBACK_FT = 16
REAR_SETBACK_FT = 20

# ──────────────────────────────────────────────────────────────────
# PROJECTIONS
# ──────────────────────────────────────────────────────────────────

MAX_PORCH_SF = 200
MAX_ENTRY_PROJECTION_FT = 6
MAX_BAY_WINDOW_PROJECTION_FT = 3
MAX_BAY_WINDOW_WIDTH_FT = 12


def get_max_height(is_sub_standard: bool) -> int:
    return SUBSTANDARD_MAX_HEIGHT_FT if is_sub_standard else MAX_HEIGHT_FT


def get_height_parameters(is_sub_standard: bool) -> HeightParameters:
    return HeightParameters(
        max_height=get_max_height(is_sub_standard),
        story_equivalencies=StoryEquivalencies(
            second_floor=SECOND_FLOOR_MAX_FT,
            third_floor=THIRD_FLOOR_MAX_FT,
        ),
        daylight_plane=f"{DAYLIGHT_PLANE_ANGLE} degrees from property lines",
    )


def get_daylight_plane() -> DaylightPlaneParameters:
    return DaylightPlaneParameters(
        angle=DAYLIGHT_PLANE_ANGLE,
        measurement_height=DAYLIGHT_PLANE_START_FT,
        applicable_lines=list(DAYLIGHT_PLANE_LINES),
    )


def get_setback_requirements(is_corner_lot: bool) -> SetbackParameters:
    """Minimum setbacks. Street side only applies on corner lots."""
    return SetbackParameters(
        front=FRONT_SETBACK_FT,
        interior_side=INTERIOR_SIDE_SETBACK_FT,
        street_side=STREET_SIDE_SETBACK_FT if is_corner_lot else None,
        rear=REAR_SETBACK_FT,
        special_conditions=(
            ["Corner lot - street side setback applies"] if is_corner_lot else []
        ),
    )


def get_architectural_features() -> ArchitecturalFeatures:
    return ArchitecturalFeatures(
        porches=PorchAllowance(max_size=MAX_PORCH_SF),
        entry_projections=EntryProjectionAllowance(max_projection=MAX_ENTRY_PROJECTION_FT),
        bay_windows=BayWindowAllowance(
            max_projection=MAX_BAY_WINDOW_PROJECTION_FT,
            max_width=MAX_BAY_WINDOW_WIDTH_FT,
        ),
    )


def find_story_height_violations(
    floors: int,
    second_floor_ceiling: Optional[float],
    third_floor_ceiling: Optional[float],
) -> list[str]:
    """Ceiling heights above the story-equivalency caps.

    A ceiling that was not supplied is not checked.
    """
    violations = []
    if floors >= 2 and second_floor_ceiling is not None \
            and second_floor_ceiling > SECOND_FLOOR_MAX_FT:
        violations.append(
            f"Second floor ceiling height exceeds {SECOND_FLOOR_MAX_FT} ft "
            f"({fmt_num(second_floor_ceiling)} ft)"
        )
    if floors >= 3 and third_floor_ceiling is not None \
            and third_floor_ceiling > THIRD_FLOOR_MAX_FT:
        violations.append(
            f"Third floor ceiling height exceeds {THIRD_FLOOR_MAX_FT} ft "
            f"({fmt_num(third_floor_ceiling)} ft)"
        )
    return violations


def find_setback_violations(
    is_corner_lot: bool,
    front: Optional[float],
    interior_side: Optional[float],
    street_side: Optional[float],
    rear: Optional[float],
) -> list[str]:
    """Every setback dimension below its minimum, in front/side/street/rear order."""
    violations = []
    _below(violations, "Front setback", front, FRONT_SETBACK_FT)
    _below(violations, "Interior side setback", interior_side, INTERIOR_SIDE_SETBACK_FT)
    if is_corner_lot:
        _below(violations, "Street side setback", street_side, STREET_SIDE_SETBACK_FT)
    _below(violations, "Rear setback", rear, REAR_SETBACK_FT)
    return violations


def find_projection_violations(
    porch_area: Optional[float],
    entry_projection: Optional[float],
    bay_window_projection: Optional[float],
) -> list[str]:
    violations = []
    if porch_area and porch_area > MAX_PORCH_SF:
        violations.append(f"Porch area exceeds {MAX_PORCH_SF} sq ft ({fmt_num(porch_area)} sq ft)")
    if entry_projection and entry_projection > MAX_ENTRY_PROJECTION_FT:
        violations.append(
            f"Entry projection exceeds {MAX_ENTRY_PROJECTION_FT} ft ({fmt_num(entry_projection)} ft)"
        )
    if bay_window_projection and bay_window_projection > MAX_BAY_WINDOW_PROJECTION_FT:
        violations.append(
            f"Bay window projection exceeds {MAX_BAY_WINDOW_PROJECTION_FT} ft "
            f"({fmt_num(bay_window_projection)} ft)"
        )
    return violations


def _below(violations: list[str], label: str, value: Optional[float], minimum: float) -> None:
    if value is None:
        violations.append(f"{label} not provided ({minimum} ft required)")
    elif value < minimum:
        violations.append(f"{label} insufficient ({fmt_num(value)} ft < {minimum} ft required)")


def fmt_num(value: float) -> str:
    """Render 20.0 as '20' and 19.5 as '19.5'."""
    return f"{value:.10g}"
