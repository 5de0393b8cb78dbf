"""
Risk Assessment Synchronizer
============================

Replaces the published risk assessments and stored pies of one patient
and one plugin with a freshly calculated set.

Order of operations:
    1. Store the new pies
    2. Post a transaction bundle: delete the plugin's existing assessments
       for the patient, create one assessment per result
    3. Only after the post succeeded, remove the previous pies

A failed post leaves the previously published state untouched and the
newly stored pies are removed again.

Author: Risk Service Team
Version: 1.0.0
"""

import logging
from typing import List, Protocol, Sequence
from urllib.parse import urlencode

from shared.schemas.fhir import (
    Bundle,
    BundleEntry,
    BundleEntryRequest,
    CodeableConcept,
    Coding,
    Meta,
)
from riskservice.errors import PluginConfigurationError
from riskservice.plugins.base import CalculationResult, PluginConfig
from riskservice.storage.pie_store import PieStore


logger = logging.getLogger(__name__)


MOST_RECENT_TAG = Coding(system="http://interventionengine.org/tags/", code="MOST_RECENT")


class AssessmentPublisher(Protocol):
    """Anything that can submit a transaction bundle to a FHIR server."""

    async def post_transaction(self, fhir_endpoint_url: str, bundle: Bundle) -> None:
        ...


def risk_assessment_delete_url(method: CodeableConcept, patient_id: str) -> str:
    """
    Conditional delete URL matching a patient's assessments for a method.

    Used to delete the old set of assessments before adding the new set.
    """
    if not method.coding:
        raise PluginConfigurationError(
            "Risk Assessment Plugins MUST provide a method with a coding"
        )
    coding = method.coding[0]
    params = urlencode(
        sorted({"method": f"{coding.system}|{coding.code}", "patient": patient_id}.items())
    )
    return f"RiskAssessment?{params}"


def build_risk_assessment_bundle(
    patient_id: str,
    results: Sequence[CalculationResult],
    basis_pie_url: str,
    config: PluginConfig,
) -> Bundle:
    """
    Build the transaction that replaces a patient's assessments.

    The first entry deletes the existing assessments for the plugin's
    method; one POST follows per result, the last tagged MOST_RECENT.
    """
    entries = [
        BundleEntry(request=BundleEntryRequest(
            method="DELETE",
            url=risk_assessment_delete_url(config.method, patient_id),
        ))
    ]
    for i, result in enumerate(results):
        ra = result.to_risk_assessment(patient_id, basis_pie_url, config)
        if i + 1 == len(results):
            ra.meta = Meta(tag=[MOST_RECENT_TAG])
        entries.append(BundleEntry(
            request=BundleEntryRequest(method="POST", url="RiskAssessment"),
            resource=ra.to_fhir(),
        ))
    return Bundle(type="transaction", entry=entries)


class RiskAssessmentSynchronizer:
    """
    Keeps stored pies and published assessments in step with results.

    Running it twice with the same results leaves the same set of
    assessments and pies behind.
    """

    def __init__(self, pie_store: PieStore, publisher: AssessmentPublisher):
        self.pie_store = pie_store
        self.publisher = publisher

    async def synchronize(
        self,
        fhir_endpoint_url: str,
        patient_id: str,
        results: List[CalculationResult],
        basis_pie_url: str,
        config: PluginConfig,
    ) -> None:
        """
        Replace the patient's assessments and pies for one plugin.

        Args:
            fhir_endpoint_url: FHIR server base URL
            patient_id: Patient id on that server
            results: Consolidated results, oldest first
            basis_pie_url: Base URL assessments use to reference pies
            config: Configuration of the plugin that produced the results

        Raises:
            PluginConfigurationError: If the plugin's method has no coding
            RiskAssessmentPostError: If the FHIR server rejects the bundle
        """
        method = config.method_coding
        if method is None:
            raise PluginConfigurationError(
                "Risk Assessment Plugins MUST provide a method with a coding"
            )

        pies = [r.pie for r in results if r.pie is not None]
        new_ids = [pie.id for pie in pies]
        patient = f"{fhir_endpoint_url}/Patient/{patient_id}"

        # Pies are scoped by the requested patient so the removal below
        # finds them on the next run, whatever the records said.
        for pie in pies:
            pie.patient = patient

        await self.pie_store.insert_many(pies, method)
        logger.debug(f"Stored {len(pies)} pies for {patient} ({config.method_key})")

        bundle = build_risk_assessment_bundle(patient_id, results, basis_pie_url, config)
        try:
            await self.publisher.post_transaction(fhir_endpoint_url, bundle)
        except Exception:
            await self.pie_store.remove_ids(new_ids)
            raise

        removed = await self.pie_store.remove_scope(patient, method, exclude_ids=new_ids)
        logger.info(
            f"Synchronized {len(results)} assessments for {patient} "
            f"({config.method_key}); removed {removed} old pies"
        )
