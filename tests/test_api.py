"""
Tests for the Risk Service API
==============================

Tests the HTTP surface with FastAPI's TestClient. The risk service
itself is mocked; pies live in the in-memory store.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from shared.schemas.fhir import Coding
from riskservice.api.dependencies import ServiceContainer
from riskservice.api.main import create_app
from riskservice.api.routes.calculate import calculation_key
from riskservice.config import Settings
from riskservice.integrations.fhir_client import FHIRClient
from riskservice.plugins.pie import Pie
from riskservice.service.risk_service import RiskService
from riskservice.storage.pie_store import PieStore


FHIR_ENDPOINT_URL = "http://example.org/fhir"


@pytest.fixture
def container():
    settings = Settings(
        basis_pie_url="http://riskservice.example.org/pies",
        debounce_seconds=60.0,
        shutdown_grace_seconds=1.0,
    )
    c = ServiceContainer(
        settings,
        pie_store=PieStore(),
        fhir_client=AsyncMock(spec=FHIRClient),
    )
    c.risk_service = AsyncMock(spec=RiskService)
    return c


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client


@pytest.fixture
def stored_pie(container):
    pie = Pie(patient=f"{FHIR_ENDPOINT_URL}/Patient/1")
    pie.add_slice("Conditions", 50, value=2, max_value=5)
    pie.add_slice("Medications", 50, value=0, max_value=5)
    asyncio.run(container.pie_store.insert_many(
        [pie], Coding(system="http://interventionengine.org/risk-assessments", code="Simple")
    ))
    return pie


class TestPieEndpoint:
    """Tests for GET /pies/{pie_id}."""

    def test_get_pie(self, client, stored_pie):
        response = client.get(f"/pies/{stored_pie.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == stored_pie.id
        assert data["patient"] == f"{FHIR_ENDPOINT_URL}/Patient/1"
        assert data["slices"] == [
            {"name": "Conditions", "weight": 50, "value": 2, "maxValue": 5},
            {"name": "Medications", "weight": 50, "value": 0, "maxValue": 5},
        ]

    def test_malformed_id(self, client):
        response = client.get("/pies/not-a-pie-id")
        assert response.status_code == 400

    def test_missing_pie(self, client):
        response = client.get(f"/pies/{'0' * 32}")
        assert response.status_code == 404


class TestCalculateEndpoint:
    """Tests for POST /calculate."""

    def test_schedules_calculation(self, client, container):
        response = client.post(
            "/calculate",
            data={"patientId": "1", "fhirEndpointUrl": FHIR_ENDPOINT_URL},
        )

        assert response.status_code == 202
        assert response.json()["key"] == f"1@{FHIR_ENDPOINT_URL}"
        assert container.delayer.pending_keys() == [f"1@{FHIR_ENDPOINT_URL}"]
        container.risk_service.calculate.assert_not_awaited()

    def test_burst_is_debounced(self, client, container):
        for _ in range(3):
            client.post("/calculate", data={"patientId": "1", "fhirEndpointUrl": FHIR_ENDPOINT_URL})
        client.post("/calculate", data={"patientId": "2", "fhirEndpointUrl": FHIR_ENDPOINT_URL})

        assert sorted(container.delayer.pending_keys()) == [
            f"1@{FHIR_ENDPOINT_URL}",
            f"2@{FHIR_ENDPOINT_URL}",
        ]

    def test_shutdown_runs_pending_calculation(self, container):
        with TestClient(create_app(container)) as test_client:
            test_client.post(
                "/calculate",
                data={"patientId": "1", "fhirEndpointUrl": FHIR_ENDPOINT_URL},
            )

        container.risk_service.calculate.assert_awaited_once_with(
            "1", FHIR_ENDPOINT_URL, "http://riskservice.example.org/pies"
        )

    def test_missing_form_field(self, client):
        response = client.post("/calculate", data={"patientId": "1"})
        assert response.status_code == 422

    def test_calculation_key(self):
        assert calculation_key("123", "http://fhir") == "123@http://fhir"


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["plugins"] == ["CHA2DS2–VASc score", "Simple Conditions + Medications"]
        assert data["pending_calculations"] == []
