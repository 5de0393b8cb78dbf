"""
Risk Service
============

Orchestrates a patient's recalculation across all registered plugins.

Flow:
    FHIR query → Event stream → (per plugin) age milestones → Calculate
    → Consolidate → Synchronize pies and risk assessments

Usage:
    service = RiskService(default_registry(), fhir_client, synchronizer)
    await service.calculate("123", "http://fhir.example.org", basis_pie_url)

Author: Risk Service Team
Version: 1.0.0
"""

import logging
from datetime import datetime
from typing import Optional
from urllib.parse import urlencode

from riskservice.errors import PluginConfigurationError, UnsupportedResourceKindError
from riskservice.integrations.fhir_client import FHIRClient
from riskservice.plugins.base import NotApplicableError
from riskservice.plugins.events import add_significant_birthday_events, build_event_stream
from riskservice.plugins.registry import PluginRegistry
from riskservice.service.consolidation import sort_and_consolidate
from riskservice.service.synchronizer import RiskAssessmentSynchronizer


logger = logging.getLogger(__name__)


# Required record kinds the patient query can _revinclude
SUPPORTED_REQUIRED_RESOURCE_TYPES = ("Condition", "MedicationStatement")


class RiskService:
    """
    Runs the registered plugins for a patient and publishes the results.

    Attributes:
        registry: Plugins to run, in order
        fhir_client: Source of the patient's records
        synchronizer: Replaces published assessments and stored pies
    """

    def __init__(
        self,
        registry: PluginRegistry,
        fhir_client: FHIRClient,
        synchronizer: RiskAssessmentSynchronizer,
    ):
        self.registry = registry
        self.fhir_client = fhir_client
        self.synchronizer = synchronizer

    def required_data_query_url(self, patient_id: str, fhir_endpoint_url: str) -> str:
        """
        Query returning the patient plus every record any plugin needs.

        Raises:
            UnsupportedResourceKindError: If a plugin requires a record kind
                the query cannot include
        """
        params = [("_id", patient_id)]
        for kind in self.registry.required_resource_types():
            if kind not in SUPPORTED_REQUIRED_RESOURCE_TYPES:
                raise UnsupportedResourceKindError(
                    kind, f"Unsupported required resource type: {kind}"
                )
            params.append(("_revinclude", f"{kind}:patient"))
        return f"{fhir_endpoint_url}/Patient?{urlencode(params, safe=':')}"

    async def calculate(
        self,
        patient_id: str,
        fhir_endpoint_url: str,
        basis_pie_url: str,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Recalculate and republish every plugin's scores for a patient.

        Previously published assessments and pies for each plugin are
        replaced. Plugins that do not apply to the patient are skipped.

        Raises:
            EventStreamError: If the patient's records cannot be converted
            PluginConfigurationError: If a plugin has no method coding
            RiskAssessmentPostError: If publishing fails
        """
        query_url = self.required_data_query_url(patient_id, fhir_endpoint_url)
        bundle = await self.fhir_client.get_bundle(query_url)
        es = build_event_stream(bundle.resources())
        logger.info(f"Built event stream for patient {patient_id}: {len(es.events)} events")

        for p in self.registry:
            config = p.config
            if config.method_coding is None:
                raise PluginConfigurationError(
                    "Risk Assessment Plugins MUST provide a method with a coding"
                )

            # Milestones are plugin specific, so they go on a copy
            es_clone = es.clone()
            add_significant_birthday_events(es_clone, config.significant_birthdays, now=now)

            try:
                results = p.calculate(es_clone, fhir_endpoint_url, now=now)
            except NotApplicableError as e:
                logger.info(f"Skipping {config.name} for patient {patient_id}: {e}")
                continue

            results = sort_and_consolidate(results)
            logger.debug(f"{config.name}: {len(results)} consolidated results")

            await self.synchronizer.synchronize(
                fhir_endpoint_url, patient_id, results, basis_pie_url, config
            )
