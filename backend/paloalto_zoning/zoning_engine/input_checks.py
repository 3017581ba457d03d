"""
Input checks run before a workflow starts.

Each check returns the list of user-facing problems; an empty list means
the workflow may run. ``ensure_*`` raises InputValidationError instead.
"""

from __future__ import annotations

from paloalto_zoning.models.schemas import DesignData, SiteData

MIN_VALID_LOT_SIZE_SF = 1000


class InputValidationError(ValueError):
    """Raised when site or design input is unusable; carries every message."""

    def __init__(self, messages: list[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


def _check_site(site: SiteData, lot_size_message: str) -> list[str]:
    errors = []
    if not site.address.strip():
        errors.append("Property address is required")
    if not site.zone.strip():
        errors.append("Zone district is required")
    if not site.lot_size or site.lot_size < MIN_VALID_LOT_SIZE_SF:
        errors.append(lot_size_message)
    return errors


def check_planning_input(site: SiteData) -> list[str]:
    return _check_site(site, "Valid lot size is required (minimum 1000 sq ft)")


def check_validation_input(site: SiteData, design: DesignData) -> list[str]:
    errors = _check_site(site, "Valid lot size is required")
    if design.building_height <= 0:
        errors.append("Building height is required")
    if design.total_floor_area <= 0:
        errors.append("Total floor area is required")
    return errors


def ensure_planning_input(site: SiteData) -> None:
    errors = check_planning_input(site)
    if errors:
        raise InputValidationError(errors)


def ensure_validation_input(site: SiteData, design: DesignData) -> None:
    errors = check_validation_input(site, design)
    if errors:
        raise InputValidationError(errors)
