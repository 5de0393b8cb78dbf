"""
Simple Plugin
=============

A simple, UNPROVEN risk calculation based on a patient's count of active
conditions and active medications. The idea is that the higher the count,
the more likely the patient is to experience a negative outcome.

PROOF-OF-CONCEPT only; NOT for use in any real clinical setting.

Author: Risk Service Team
Version: 1.0.0
"""

from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from shared.schemas.fhir import CodeableConcept, Coding
from riskservice.plugins.base import (
    CalculationResult,
    PluginConfig,
    RiskServicePlugin,
    patient_reference,
)
from riskservice.plugins.events import EventKind, EventStream
from riskservice.plugins.pie import Slice, new_pie


MAX_COUNT = 5


def _coding_key(concept: Optional[CodeableConcept]) -> Optional[str]:
    if concept is None or not concept.coding:
        return None
    coding = concept.coding[0]
    return f"{coding.system or ''}|{coding.code or ''}"


def _update_count(counts: Dict[str, int], key: str, end: bool) -> None:
    if not end:
        counts[key] += 1
    elif counts[key] > 0:
        counts[key] -= 1


def calculate_count(counts: Dict[str, int], limit: int = MAX_COUNT) -> int:
    """Number of distinct keys with a positive count, capped at ``limit``."""
    return min(sum(1 for v in counts.values() if v > 0), limit)


class SimplePlugin(RiskServicePlugin):
    """Counts distinct active conditions and medications."""

    def __init__(self):
        self._config = PluginConfig(
            name="Simple Conditions + Medications",
            method=CodeableConcept(
                coding=[Coding(
                    system="http://interventionengine.org/risk-assessments",
                    code="Simple",
                )],
                text="Simple Conditions + Medications",
            ),
            predicted_outcome=CodeableConcept(text="Negative Outcome"),
            default_pie_slices=(
                Slice("Conditions", 50, max_value=MAX_COUNT),
                Slice("Medications", 50, max_value=MAX_COUNT),
            ),
            required_resource_types=("Condition", "MedicationStatement"),
        )

    @property
    def config(self) -> PluginConfig:
        return self._config

    def calculate(
        self,
        es: EventStream,
        fhir_endpoint_url: str,
        now: Optional[datetime] = None,
    ) -> List[CalculationResult]:
        now = now or datetime.now(timezone.utc)
        results: List[CalculationResult] = []

        # Active counts keyed by "system|code" so duplicates count once
        conditions: Dict[str, int] = defaultdict(int)
        medications: Dict[str, int] = defaultdict(int)

        seed = new_pie(patient_reference(fhir_endpoint_url, es), list(self.config.default_pie_slices))
        pie = seed

        for event in es.events:
            if event.date > now:
                continue

            if event.kind == EventKind.CONDITION:
                key = _coding_key(event.value.code)
                counts, slice_name = conditions, "Conditions"
            elif event.kind == EventKind.MEDICATION_STATEMENT:
                key = _coding_key(event.value.medication_codeable_concept)
                counts, slice_name = medications, "Medications"
            else:
                continue
            if key is None:
                continue

            pie = pie.clone(True)
            _update_count(counts, key, event.end)
            pie.update_slice_value(slice_name, calculate_count(counts))
            results.append(CalculationResult(
                as_of=event.date,
                score=pie.total_values(),
                probability_decimal=None,
                pie=pie,
            ))

        # No factors at all: report a zero score as of now
        if not results:
            results.append(CalculationResult(
                as_of=now,
                score=0,
                probability_decimal=None,
                pie=seed,
            ))

        return results
