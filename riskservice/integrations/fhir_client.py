"""
FHIR Server Client
==================

Async HTTP client for the FHIR servers the risk service reads patient
records from and publishes risk assessments to.

Each calculation request names its own FHIR endpoint, so requests are
made with absolute URLs rather than a fixed base URL.

Errors are not retried here: transport errors and rejected transactions
propagate to the caller.

Author: Risk Service Team
Version: 1.0.0
"""

import logging
from typing import Optional

import httpx

from shared.schemas.fhir import Bundle
from riskservice.config import settings
from riskservice.errors import RiskAssessmentPostError

logger = logging.getLogger(__name__)


class FHIRClient:
    """
    Async HTTP client for FHIR servers.

    Usage:
        async with FHIRClient() as fhir:
            bundle = await fhir.get_bundle(query_url)
            await fhir.post_transaction(endpoint, transaction_bundle)
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the FHIR client.

        Args:
            timeout: Request timeout in seconds (defaults to config)
            transport: Optional transport, e.g. httpx.MockTransport in tests
        """
        self.timeout = timeout or settings.fhir_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "Accept": "application/json",
                    "X-Source": "riskservice",
                    "X-Risk-Service-Version": settings.app_version,
                },
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def get_bundle(self, url: str) -> Bundle:
        """
        Fetch a search result bundle.

        Args:
            url: Absolute search URL

        Returns:
            Parsed Bundle

        Raises:
            httpx.HTTPStatusError: If the server answers with an error status
        """
        client = await self._get_client()
        response = await client.get(url)
        response.raise_for_status()
        bundle = Bundle.model_validate(response.json())
        logger.debug(f"Fetched bundle with {len(bundle.entry)} entries from {url}")
        return bundle

    async def post_transaction(self, fhir_endpoint_url: str, bundle: Bundle) -> None:
        """
        Submit a transaction bundle to the FHIR server's base endpoint.

        Raises:
            RiskAssessmentPostError: If the server does not answer 200
        """
        client = await self._get_client()
        response = await client.post(fhir_endpoint_url, json=bundle.to_fhir())
        if response.status_code != 200:
            logger.error(
                f"Risk assessment transaction rejected by {fhir_endpoint_url}: "
                f"{response.status_code}"
            )
            raise RiskAssessmentPostError(response.status_code)
        logger.info(
            f"Posted transaction with {len(bundle.entry)} entries to {fhir_endpoint_url}"
        )
