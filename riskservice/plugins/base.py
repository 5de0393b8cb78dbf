"""
Risk Service Plugin Contract
============================

Defines what a risk scoring plugin provides: a configuration describing
the score and its pie, and a calculation that turns an event stream into
an ordered series of results.

Author: Risk Service Team
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from shared.schemas.fhir import (
    CodeableConcept,
    Coding,
    Reference,
    RiskAssessment,
    RiskAssessmentPrediction,
)
from riskservice.plugins.events import EventStream
from riskservice.plugins.pie import Pie, Slice


class NotApplicableError(Exception):
    """
    Raised by a plugin that has nothing to say about a patient.

    This is not a failure: callers skip the plugin and carry on.
    """
    pass


@dataclass(frozen=True)
class PluginConfig:
    """
    Static configuration of a risk scoring plugin.

    Attributes:
        name: Human readable name of the score
        method: Coded method; its first coding identifies the plugin
        predicted_outcome: Outcome the score predicts
        default_pie_slices: Slices every new pie starts with
        required_resource_types: Record kinds the plugin reads
        significant_birthdays: Ages at which AGE events are added
    """
    name: str
    method: CodeableConcept
    predicted_outcome: CodeableConcept
    default_pie_slices: Tuple[Slice, ...] = ()
    required_resource_types: Tuple[str, ...] = ()
    significant_birthdays: Tuple[int, ...] = ()

    @property
    def method_coding(self) -> Optional[Coding]:
        """The coding that identifies the plugin, if any."""
        if not self.method.coding:
            return None
        return self.method.coding[0]

    @property
    def method_key(self) -> str:
        """Identifier of the plugin as ``system|code``."""
        coding = self.method_coding
        if coding is None:
            return ""
        return f"{coding.system}|{coding.code}"


@dataclass
class CalculationResult:
    """A score as of a point in time, with the pie that explains it."""
    as_of: datetime
    score: Optional[int]
    probability_decimal: Optional[float] = None
    pie: Optional[Pie] = field(default=None, compare=False)

    def probability_or_score(self) -> Optional[float]:
        """
        The probability when there is one, otherwise the score.

        Published assessments carry this as their probability.
        """
        if self.probability_decimal is not None:
            return self.probability_decimal
        if self.score is not None:
            return float(self.score)
        return None

    def to_risk_assessment(
        self,
        patient_id: str,
        basis_pie_url: str,
        config: PluginConfig,
    ) -> RiskAssessment:
        """Build the FHIR RiskAssessment published for this result."""
        basis = []
        if self.pie is not None:
            basis.append(Reference(reference=f"{basis_pie_url}/{self.pie.id}"))
        return RiskAssessment(
            subject=Reference(reference=f"Patient/{patient_id}"),
            method=config.method,
            date=self.as_of,
            prediction=[
                RiskAssessmentPrediction(
                    probability_decimal=self.probability_or_score(),
                    outcome=config.predicted_outcome,
                )
            ],
            basis=basis,
        )


class RiskServicePlugin(ABC):
    """
    A risk scoring algorithm.

    Implementations are pure: ``calculate`` depends only on the stream,
    the FHIR endpoint used to reference the patient, and ``now``.
    """

    @property
    @abstractmethod
    def config(self) -> PluginConfig:
        """The plugin's static configuration."""

    @abstractmethod
    def calculate(
        self,
        es: EventStream,
        fhir_endpoint_url: str,
        now: Optional[datetime] = None,
    ) -> List[CalculationResult]:
        """
        Calculate the score history for the stream's patient.

        Args:
            es: Event stream, already carrying any age milestones
            fhir_endpoint_url: FHIR base URL, used for the pie's patient
            now: Evaluation time; events after it are ignored

        Returns:
            Results in event order

        Raises:
            NotApplicableError: If the score does not apply to the patient
        """


def patient_reference(fhir_endpoint_url: str, es: EventStream) -> str:
    """Absolute reference to the stream's patient, as stored on pies."""
    patient_id = es.patient.id if es.patient is not None and es.patient.id else ""
    return f"{fhir_endpoint_url}/Patient/{patient_id}"
