"""
Risk Service Orchestration Package
==================================

This package provides:
    - risk_service: Runs plugins for a patient and publishes the results
    - consolidation: One result per instant, oldest first
    - synchronizer: Replaces published assessments and stored pies

Flow:
    Records → Event stream → Plugin → Consolidate → Synchronize

Author: Risk Service Team
Version: 1.0.0
"""

from riskservice.service.consolidation import sort_and_consolidate
from riskservice.service.synchronizer import (
    RiskAssessmentSynchronizer,
    build_risk_assessment_bundle,
    risk_assessment_delete_url,
)
from riskservice.service.risk_service import RiskService

__all__ = [
    "sort_and_consolidate",
    "RiskAssessmentSynchronizer",
    "build_risk_assessment_bundle",
    "risk_assessment_delete_url",
    "RiskService",
]
