"""Tests for the HTTP API."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from paloalto_zoning.main import app


SITE = {
    "address": "789 Emerson St",
    "zone": "R-1",
    "lot_size": 8000,
    "lot_type": "typical",
    "is_corner_lot": False,
}

DESIGN = {
    "submitted_zone": "R-1",
    "building_height": 25,
    "total_floor_area": 3000,
    "total_coverage": 3000,
    "front_setback": 20,
    "interior_side_setback": 6,
    "rear_setback": 22,
    "parking_spaces": 2,
    "covered_parking_spaces": 1,
    "professional_stamps": ["Architect", "Structural Engineer"],
    "submitted_documents": ["site_plan", "floor_plans", "elevations", "structural_calcs"],
}


@pytest.fixture
def client():
    return TestClient(app)


class TestServiceEndpoints:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_root_lists_endpoints(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "planning" in resp.json()["endpoints"]

    def test_zones(self, client):
        resp = client.get("/api/zones")
        assert resp.status_code == 200
        zones = resp.json()
        assert [z["zone"] for z in zones][0] == "R-1"
        assert zones[0]["requirements"]["min_lot_size"] == 6000


class TestPlanningEndpoint:

    def test_completed(self, client):
        resp = client.post("/api/planning", json={"site": SITE})
        assert resp.status_code == 200
        body = resp.json()
        assert body["overall_status"] == "completed"
        assert body["final_report"]["design_parameters"]["max_floor_area"] == 3150

    def test_stopped(self, client):
        resp = client.post("/api/planning", json={"site": {**SITE, "lot_size": 5000}})
        body = resp.json()
        assert body["overall_status"] == "stopped"
        assert body["phases"]["phase2"] is None

    def test_input_errors_are_422(self, client):
        resp = client.post("/api/planning", json={"site": {**SITE, "address": "", "lot_size": 500}})
        assert resp.status_code == 422
        assert resp.json()["detail"] == [
            "Property address is required",
            "Valid lot size is required (minimum 1000 sq ft)",
        ]

    def test_unknown_zone_is_400(self, client):
        resp = client.post("/api/planning", json={"site": {**SITE, "zone": "R-2"}})
        assert resp.status_code == 400
        assert "R-2" in resp.json()["detail"]


class TestValidationEndpoint:

    def test_approved(self, client):
        resp = client.post("/api/validation", json={"site": SITE, "design": DESIGN})
        assert resp.status_code == 200
        body = resp.json()
        assert body["overall_status"] == "approved"
        assert body["final_report"]["overall_status"] == "APPROVED"

    def test_rejected(self, client):
        design = {**DESIGN, "building_height": 40}
        resp = client.post("/api/validation", json={"site": SITE, "design": design})
        body = resp.json()
        assert body["overall_status"] == "rejected"
        assert body["final_report"]["violations"]["critical"][0]["rule_id"] == "CP002"

    def test_missing_height_is_422(self, client):
        design = {**DESIGN, "building_height": 0}
        resp = client.post("/api/validation", json={"site": SITE, "design": design})
        assert resp.status_code == 422
        assert resp.json()["detail"] == ["Building height is required"]


class TestReportEndpoints:

    def test_planning_report_pdf(self, client):
        resp = client.post("/api/planning/report", json={"site": SITE})
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.content.startswith(b"%PDF")

    def test_validation_report_pdf(self, client):
        resp = client.post("/api/validation/report", json={"site": SITE, "design": DESIGN})
        assert resp.status_code == 200
        assert resp.content.startswith(b"%PDF")
