from __future__ import annotations

from paloalto_zoning.models.schemas import (
    DesignData,
    PlanningWorkflow,
    SiteData,
    ValidationWorkflow,
    ZoneRequirement,
)

__all__ = ["SiteData", "DesignData", "ZoneRequirement", "PlanningWorkflow", "ValidationWorkflow"]
