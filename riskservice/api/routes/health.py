"""
Health Routes
=============

Endpoints:
    GET /health - Service status and pending recalculations

Author: Risk Service Team
Version: 1.0.0
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from riskservice.api.dependencies import ServiceContainer, get_container


router = APIRouter(tags=["Health"])


@router.get("/health", summary="Health Check")
async def health_check(
    container: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    return {
        "status": "healthy",
        "service": container.settings.app_name,
        "version": container.settings.app_version,
        "plugins": [p.config.name for p in container.registry],
        "pending_calculations": container.delayer.pending_keys(),
    }
