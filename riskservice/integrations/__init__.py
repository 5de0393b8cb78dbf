"""
Risk Service Integrations Package
=================================

Clients for the external systems the risk service talks to.

This package provides:
    - fhir_client: Reads patient records, publishes risk assessments

Author: Risk Service Team
Version: 1.0.0
"""

from riskservice.integrations.fhir_client import FHIRClient

__all__ = [
    "FHIRClient",
]
