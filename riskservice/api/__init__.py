"""
Risk Service API Package
========================

FastAPI application serving pies and accepting recalculation triggers.

Author: Risk Service Team
Version: 1.0.0
"""

from riskservice.api.main import app, create_app

__all__ = ["app", "create_app"]
