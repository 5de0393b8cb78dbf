"""
Risk Service Shared Schemas Package
===================================

Wire schemas shared between the risk service and its collaborators.

This package provides:
    - fhir: FHIR resources read from and written to the FHIR server

Author: Risk Service Team
Version: 1.0.0
"""

from shared.schemas.fhir import (
    Bundle,
    BundleEntry,
    BundleEntryRequest,
    CodeableConcept,
    Coding,
    Condition,
    MedicationStatement,
    Meta,
    Observation,
    Patient,
    Period,
    Quantity,
    Reference,
    Resource,
    RiskAssessment,
    RiskAssessmentPrediction,
    parse_resource,
)

__all__ = [
    # Data types
    "Coding",
    "CodeableConcept",
    "Period",
    "Quantity",
    "Reference",
    "Meta",
    # Resources read
    "Resource",
    "Patient",
    "Condition",
    "MedicationStatement",
    "Observation",
    "parse_resource",
    # Resources written
    "RiskAssessment",
    "RiskAssessmentPrediction",
    "Bundle",
    "BundleEntry",
    "BundleEntryRequest",
]
