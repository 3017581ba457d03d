"""
Palo Alto single-family (R-1) zone district requirements.

Lot-size thresholds in square feet per zone district:
  - min_lot_size / max_lot_size:  permitted lot range for new lots
  - sub_standard_typical / _flag:  below this a lot is substandard
  - second_unit_min_typical / _flag:  minimum lot for a second dwelling unit

Flag lots carry the stricter thresholds in every district.

Sources:
  - PAMC 18.12.040 (Site Development Standards, R-1 districts)
  - PAMC 18.12.050 (Substandard Lots)
  - PAMC 18.42.040 (Second Dwelling Units)
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from paloalto_zoning.models.schemas import LotType, ZoneRequirement


class UnknownZoneError(ValueError):
    """Raised when a zone code is not in the R-1 requirement table."""

    def __init__(self, zone: str, known: Iterable[str] | None = None):
        self.zone = zone
        self.known = list(ZONE_REQUIREMENTS if known is None else known)
        super().__init__(
            f"Unknown zone district '{zone}'. "
            f"Expected one of: {', '.join(self.known)}"
        )


# ──────────────────────────────────────────────────────────────────
# R-1 DISTRICTS
# ──────────────────────────────────────────────────────────────────

ZONE_REQUIREMENTS: Mapping[str, ZoneRequirement] = MappingProxyType({
    "R-1": ZoneRequirement(
        min_lot_size=6000, max_lot_size=9999,
        sub_standard_typical=4980, sub_standard_flag=5976,
        second_unit_min_typical=8100, second_unit_min_flag=9720,
    ),
    "R-1(7000)": ZoneRequirement(
        min_lot_size=7000, max_lot_size=13999,
        sub_standard_typical=5810, sub_standard_flag=6972,
        second_unit_min_typical=9450, second_unit_min_flag=11340,
    ),
    "R-1(8000)": ZoneRequirement(
        min_lot_size=8000, max_lot_size=15999,
        sub_standard_typical=6640, sub_standard_flag=7968,
        second_unit_min_typical=10800, second_unit_min_flag=12960,
    ),
    "R-1(10000)": ZoneRequirement(
        min_lot_size=10000, max_lot_size=19999,
        sub_standard_typical=8300, sub_standard_flag=9960,
        second_unit_min_typical=13500, second_unit_min_flag=16200,
    ),
    "R-1(20000)": ZoneRequirement(
        min_lot_size=20000, max_lot_size=39999,
        sub_standard_typical=16600, sub_standard_flag=19920,
        second_unit_min_typical=27000, second_unit_min_flag=32400,
    ),
})


class ZoneRuleTable:
    """Read-only view over the zone requirement table.

    Both engines take one of these by reference; the default instance
    ``ZONE_TABLE`` wraps ``ZONE_REQUIREMENTS``.
    """

    def __init__(self, requirements: Mapping[str, ZoneRequirement] = ZONE_REQUIREMENTS):
        self._requirements = MappingProxyType(dict(requirements))

    def lookup(self, zone: str) -> ZoneRequirement:
        """Return the requirements for *zone* or raise UnknownZoneError."""
        try:
            return self._requirements[zone]
        except (KeyError, TypeError):
            raise UnknownZoneError(zone, self._requirements) from None

    def zones(self) -> list[str]:
        return list(self._requirements)

    def items(self):
        return self._requirements.items()

    def __contains__(self, zone: object) -> bool:
        return zone in self._requirements

    def __iter__(self) -> Iterator[str]:
        return iter(self._requirements)

    def __len__(self) -> int:
        return len(self._requirements)


ZONE_TABLE = ZoneRuleTable()


def get_sub_standard_threshold(req: ZoneRequirement, lot_type: LotType | str) -> float:
    """Substandard threshold for the lot type (flag lots use the flag column)."""
    if lot_type == LotType.FLAG:
        return req.sub_standard_flag
    return req.sub_standard_typical


def get_second_unit_minimum(req: ZoneRequirement, lot_type: LotType | str) -> float:
    """Minimum lot area for a second dwelling unit for the lot type."""
    if lot_type == LotType.FLAG:
        return req.second_unit_min_flag
    return req.second_unit_min_typical
