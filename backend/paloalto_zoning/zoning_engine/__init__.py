from __future__ import annotations

from paloalto_zoning.zoning_engine.input_checks import InputValidationError
from paloalto_zoning.zoning_engine.planning import PlanningEngine
from paloalto_zoning.zoning_engine.validation import ValidationEngine
from paloalto_zoning.zoning_engine.zone_table import ZONE_TABLE, UnknownZoneError, ZoneRuleTable

__all__ = [
    "InputValidationError",
    "PlanningEngine",
    "UnknownZoneError",
    "ValidationEngine",
    "ZONE_TABLE",
    "ZoneRuleTable",
]
