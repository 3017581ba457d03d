from __future__ import annotations

import io

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from paloalto_zoning.models.schemas import (
    PlanningRequest,
    PlanningWorkflow,
    ValidationRequest,
    ValidationWorkflow,
    ZoneInfo,
)
from paloalto_zoning.services.report import (
    generate_planning_report_bytes,
    generate_validation_report_bytes,
)
from paloalto_zoning.zoning_engine import (
    ZONE_TABLE,
    InputValidationError,
    PlanningEngine,
    UnknownZoneError,
    ValidationEngine,
)
from paloalto_zoning.zoning_engine.input_checks import (
    ensure_planning_input,
    ensure_validation_input,
)

router = APIRouter(prefix="/api")
planning_engine = PlanningEngine(ZONE_TABLE)
validation_engine = ValidationEngine(ZONE_TABLE)


def _run_planning(request: PlanningRequest) -> PlanningWorkflow:
    try:
        ensure_planning_input(request.site)
        return planning_engine.execute_planning_workflow(request.site)
    except InputValidationError as e:
        raise HTTPException(status_code=422, detail=e.messages)
    except UnknownZoneError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _run_validation(request: ValidationRequest) -> ValidationWorkflow:
    try:
        ensure_validation_input(request.site, request.design)
        return validation_engine.execute_validation_workflow(request.site, request.design)
    except InputValidationError as e:
        raise HTTPException(status_code=422, detail=e.messages)
    except UnknownZoneError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _pdf_response(pdf_bytes: bytes, filename: str) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/zones", response_model=list[ZoneInfo])
async def list_zones():
    """The R-1 zone requirement table."""
    return [ZoneInfo(zone=zone, requirements=req) for zone, req in ZONE_TABLE.items()]


@router.post("/planning", response_model=PlanningWorkflow)
async def run_planning(request: PlanningRequest):
    """Derive the permissible design envelope for a site."""
    return _run_planning(request)


@router.post("/validation", response_model=ValidationWorkflow)
async def run_validation(request: ValidationRequest):
    """Check a proposed design against the zone rules."""
    return _run_validation(request)


@router.post("/planning/report")
async def planning_report(request: PlanningRequest):
    """Run the planning workflow and stream the PDF report."""
    workflow = _run_planning(request)
    return _pdf_response(generate_planning_report_bytes(workflow), "planning_report.pdf")


@router.post("/validation/report")
async def validation_report(request: ValidationRequest):
    """Run the validation workflow and stream the PDF report."""
    workflow = _run_validation(request)
    return _pdf_response(generate_validation_report_bytes(workflow), "validation_report.pdf")
