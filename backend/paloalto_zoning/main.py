from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from paloalto_zoning.config import settings
from paloalto_zoning.api.routes import router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    description=(
        "Palo Alto single-family (R-1) zoning rules as two five-phase workflows: "
        "planning derives the permissible design envelope for a site, "
        "validation checks a proposed design and classifies its violations."
    ),
    version=settings.version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/")
async def root():
    """Service info and endpoint index."""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "endpoints": {
            "api_docs": "/docs",
            "health": "/health",
            "zones": "GET /api/zones",
            "planning": "POST /api/planning",
            "validation": "POST /api/validation",
            "planning_report": "POST /api/planning/report",
            "validation_report": "POST /api/validation/report",
        },
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "version": settings.version}
