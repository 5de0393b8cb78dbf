"""
Risk Service API Routes Package
===============================

FastAPI route modules.

Author: Risk Service Team
Version: 1.0.0
"""

from riskservice.api.routes.pies import router as pies_router
from riskservice.api.routes.calculate import router as calculate_router
from riskservice.api.routes.health import router as health_router

__all__ = [
    "pies_router",
    "calculate_router",
    "health_router",
]
