"""
Risk Service API Dependencies
=============================

Wires the service's collaborators together at startup and exposes them
to route handlers through FastAPI dependency injection.

The container is built by ``create_app`` and kept on ``app.state``;
nothing is registered globally.

Author: Risk Service Team
Version: 1.0.0
"""

import logging
from typing import Optional

from fastapi import Request

from riskservice.config import Settings
from riskservice.integrations.fhir_client import FHIRClient
from riskservice.plugins.registry import PluginRegistry, default_registry
from riskservice.scheduling.delayer import FunctionDelayer
from riskservice.service.risk_service import RiskService
from riskservice.service.synchronizer import RiskAssessmentSynchronizer
from riskservice.storage.pie_store import PieStore


logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Container for the shared services of one application instance.

    Manages the lifecycle of the pie store, FHIR client and delayer.
    """

    def __init__(
        self,
        settings: Settings,
        registry: Optional[PluginRegistry] = None,
        pie_store: Optional[PieStore] = None,
        fhir_client: Optional[FHIRClient] = None,
    ):
        self.settings = settings
        self.registry = registry or default_registry()
        self.pie_store = pie_store or PieStore(dsn=settings.pie_store_dsn)
        self.fhir_client = fhir_client or FHIRClient(timeout=settings.fhir_timeout_seconds)
        self.delayer = FunctionDelayer(duration=settings.debounce_seconds)
        self.risk_service = RiskService(
            registry=self.registry,
            fhir_client=self.fhir_client,
            synchronizer=RiskAssessmentSynchronizer(self.pie_store, self.fhir_client),
        )
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize services."""
        if self._initialized:
            return

        logger.info("Initializing service container...")
        await self.pie_store.initialize()
        self._initialized = True
        logger.info(
            f"Service container initialized with {len(self.registry)} plugins"
        )

    async def shutdown(self) -> None:
        """Flush pending recalculations, then close connections."""
        logger.info("Shutting down service container...")
        await self.delayer.shutdown(grace=self.settings.shutdown_grace_seconds)
        await self.fhir_client.close()
        await self.pie_store.close()
        self._initialized = False
        logger.info("Service container shutdown complete")


def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency for the application's service container."""
    return request.app.state.container


def get_pie_store(request: Request) -> PieStore:
    """FastAPI dependency for the pie store."""
    return get_container(request).pie_store
