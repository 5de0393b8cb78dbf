"""
Risk Service Core Package
=========================

Turns a patient's clinical history into a time-ordered series of
risk-assessment scores and keeps the published scores in sync.

This package contains:
    - plugins/: Event streams, pies and the risk scoring plugins
    - service/: Calculation orchestration, consolidation, synchronization
    - scheduling/: Debounced recalculation scheduling
    - storage/: Pie (score snapshot) persistence
    - integrations/: FHIR server client
    - api/: FastAPI REST API layer

Author: Risk Service Team
Version: 1.0.0
"""

__version__ = "1.0.0"
