"""
CHA2DS2-VASc Plugin
===================

Risk calculation implementing the CHA2DS2-VASc score for stroke in
patients with atrial fibrillation:
https://en.wikipedia.org/wiki/CHA2DS2%E2%80%93VASc_score

Factors:
    - Congestive heart failure (ICD-9 428*):   1
    - Hypertension (ICD-9 401*):               1
    - Diabetes (ICD-9 250*):                   1
    - Stroke (ICD-9 434*):                     2
    - Vascular disease (ICD-9 443*):           1
    - Age 65-74 / 75+:                         1 / 2
    - Female:                                  1

Author: Risk Service Team
Version: 1.0.0
"""

import logging
from datetime import datetime, timezone
from types import MappingProxyType
from typing import List, Mapping, Optional

from shared.schemas.fhir import CodeableConcept, Coding, Condition
from riskservice.plugins.base import (
    CalculationResult,
    NotApplicableError,
    PluginConfig,
    RiskServicePlugin,
    patient_reference,
)
from riskservice.plugins.events import EventKind, EventStream
from riskservice.plugins.pie import Slice, new_pie


logger = logging.getLogger(__name__)


ICD9_SYSTEM = "http://hl7.org/fhir/sid/icd-9"
ATRIAL_FIBRILLATION_CODE = "427.31"

# Maps the CHA2DS2-VASc score to the annual stroke risk (percent).
# See: http://stroke.ahajournals.org/content/41/12/2731/T4.expansion.html
# The published table is not monotonic (score 8 is lower than 6 and 7).
SCORE_TO_STROKE_RISK: Mapping[int, float] = MappingProxyType({
    0: 0.0,
    1: 1.3,
    2: 2.2,
    3: 3.2,
    4: 4.0,
    5: 6.7,
    6: 9.8,
    7: 9.6,
    8: 6.7,
    9: 15.2,
})

# (ICD-9 code prefix, slice name, slice value), checked in order
CONDITION_FACTORS = (
    ("428", "Congestive Heart Failure", 1),
    ("401", "Hypertension", 1),
    ("250", "Diabetes", 1),
    ("434", "Stroke", 2),
    ("443", "Vascular Disease", 1),
)


def fuzzy_find_condition(code_start: str, code_system: str, condition: Condition) -> bool:
    """True if the confirmed condition has a coding in the system starting with the code."""
    if condition.verification_status != "confirmed" or condition.code is None:
        return False
    return any(
        coding.system == code_system
        and coding.code is not None
        and coding.code.startswith(code_start)
        for coding in condition.code.coding
    )


class CHA2DS2VAScPlugin(RiskServicePlugin):
    """
    CHA2DS2-VASc stroke risk score.

    Only applicable to patients with atrial fibrillation. Factors found
    before the atrial fibrillation diagnosis are counted but produce no
    results of their own.
    """

    def __init__(self, score_to_probability: Optional[Mapping[int, float]] = None):
        """
        Args:
            score_to_probability: Score to stroke risk table; defaults to
                SCORE_TO_STROKE_RISK
        """
        self.score_to_probability = (
            score_to_probability if score_to_probability is not None
            else SCORE_TO_STROKE_RISK
        )
        self._config = PluginConfig(
            name="CHA2DS2–VASc score",
            method=CodeableConcept(
                coding=[Coding(
                    system="http://interventionengine.org/risk-assessments",
                    code="CHADS",
                )],
                text="CHA2DS2–VASc score",
            ),
            predicted_outcome=CodeableConcept(text="Stroke"),
            default_pie_slices=(
                Slice("Congestive Heart Failure", 11, max_value=1),
                Slice("Hypertension", 11, max_value=1),
                Slice("Diabetes", 11, max_value=1),
                Slice("Stroke", 22, max_value=2),
                Slice("Vascular Disease", 11, max_value=1),
                Slice("Age", 22, max_value=2),
                Slice("Gender", 11, max_value=1),
            ),
            required_resource_types=("Condition",),
            significant_birthdays=(65, 75),
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

        if not self._has_atrial_fibrillation(es, now):
            raise NotApplicableError(
                "CHA2DS2-VASc is only applicable to patients with Atrial Fibrillation"
            )

        pie = new_pie(patient_reference(fhir_endpoint_url, es), list(self.config.default_pie_slices))
        gender = es.patient.gender if es.patient is not None else None
        if gender == "female":
            pie.update_slice_value("Gender", 1)
        elif gender == "male":
            pie.update_slice_value("Gender", 0)

        results: List[CalculationResult] = []
        has_afib = False
        for event in es.events:
            # History accumulates: end dates are not tracked for this score
            if event.end or event.date > now:
                continue

            is_factor = False
            pie = pie.clone(True)
            if event.kind == EventKind.CONDITION:
                condition = event.value
                if fuzzy_find_condition(ATRIAL_FIBRILLATION_CODE, ICD9_SYSTEM, condition):
                    has_afib = True
                    is_factor = True
                else:
                    for code_start, name, value in CONDITION_FACTORS:
                        if fuzzy_find_condition(code_start, ICD9_SYSTEM, condition):
                            pie.update_slice_value(name, value)
                            is_factor = True
                            break
            elif event.kind == EventKind.AGE:
                age = event.value
                if 65 <= age < 75:
                    pie.update_slice_value("Age", 1)
                    is_factor = True
                elif age >= 75:
                    pie.update_slice_value("Age", 2)
                    is_factor = True

            if has_afib and is_factor:
                score = pie.total_values()
                results.append(CalculationResult(
                    as_of=event.date,
                    score=score,
                    probability_decimal=self.score_to_probability[score],
                    pie=pie,
                ))

        return results

    @staticmethod
    def _has_atrial_fibrillation(es: EventStream, now: datetime) -> bool:
        return any(
            event.kind == EventKind.CONDITION
            and not event.end
            and event.date <= now
            and fuzzy_find_condition(ATRIAL_FIBRILLATION_CODE, ICD9_SYSTEM, event.value)
            for event in es.events
        )
