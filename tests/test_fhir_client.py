"""
Tests for the FHIR Client
=========================

Tests FHIRClient against an httpx.MockTransport.
"""

import json

import httpx
import pytest

from shared.schemas.fhir import Bundle, BundleEntry, BundleEntryRequest
from riskservice.errors import RiskAssessmentPostError
from riskservice.integrations.fhir_client import FHIRClient


ENDPOINT = "http://example.org/fhir"


def transaction():
    return Bundle(
        type="transaction",
        entry=[BundleEntry(request=BundleEntryRequest(method="DELETE", url="RiskAssessment?patient=1"))],
    )


class TestGetBundle:
    """Tests for FHIRClient.get_bundle."""

    @pytest.mark.asyncio
    async def test_parses_search_bundle(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={
                "resourceType": "Bundle",
                "type": "searchset",
                "total": 1,
                "entry": [{"resource": {"resourceType": "Patient", "id": "1", "gender": "female"}}],
            })

        async with FHIRClient(transport=httpx.MockTransport(handler)) as client:
            bundle = await client.get_bundle(f"{ENDPOINT}/Patient?_id=1")

        assert str(seen[0].url) == f"{ENDPOINT}/Patient?_id=1"
        assert seen[0].headers["accept"] == "application/json"
        assert bundle.total == 1
        assert bundle.resources()[0].gender == "female"

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(500))

        async with FHIRClient(transport=transport) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.get_bundle(f"{ENDPOINT}/Patient?_id=1")


class TestPostTransaction:
    """Tests for FHIRClient.post_transaction."""

    @pytest.mark.asyncio
    async def test_posts_bundle_to_endpoint(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"resourceType": "Bundle", "type": "transaction-response"})

        async with FHIRClient(transport=httpx.MockTransport(handler)) as client:
            await client.post_transaction(ENDPOINT, transaction())

        assert seen[0].method == "POST"
        assert str(seen[0].url) == ENDPOINT
        body = json.loads(seen[0].content)
        assert body["type"] == "transaction"
        assert body["entry"][0]["request"] == {"method": "DELETE", "url": "RiskAssessment?patient=1"}

    @pytest.mark.asyncio
    async def test_rejected_transaction_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(400))

        async with FHIRClient(transport=transport) as client:
            with pytest.raises(RiskAssessmentPostError) as exc_info:
                await client.post_transaction(ENDPOINT, transaction())

        assert exc_info.value.status_code == 400
