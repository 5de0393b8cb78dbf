"""
Calculation Routes
==================

Accepts recalculation triggers from the FHIR server and schedules them
through the delayer, so a burst of updates for one patient results in a
single recalculation.

Endpoints:
    POST /calculate - Schedule a patient's recalculation

Author: Risk Service Team
Version: 1.0.0
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends, Form

from riskservice.api.dependencies import ServiceContainer, get_container


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Calculation"])


def calculation_key(patient_id: str, fhir_endpoint_url: str) -> str:
    """Debounce key for one patient on one FHIR server."""
    return f"{patient_id}@{fhir_endpoint_url}"


@router.post(
    "/calculate",
    status_code=202,
    summary="Schedule Calculation",
    description="Recalculate a patient's risk assessments once updates settle.",
)
async def schedule_calculation(
    patient_id: str = Form(..., alias="patientId"),
    fhir_endpoint_url: str = Form(..., alias="fhirEndpointUrl"),
    container: ServiceContainer = Depends(get_container),
) -> Dict[str, str]:
    service = container.risk_service
    basis_pie_url = container.settings.basis_pie_url

    async def recalculate() -> None:
        try:
            await service.calculate(patient_id, fhir_endpoint_url, basis_pie_url)
        except Exception:
            logger.exception(f"Recalculation failed for patient {patient_id}")

    key = calculation_key(patient_id, fhir_endpoint_url)
    container.delayer.delay(key, recalculate)
    return {"status": "scheduled", "key": key}
