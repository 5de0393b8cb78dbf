"""
FHIR Resource Schemas
=====================

Pydantic models for the subset of FHIR (DSTU2) resources the risk service
reads from a FHIR server and writes back to it.

Records read:
    - Patient: demographics used for gender and age milestones
    - Condition: coded diagnoses with onset / abatement dates
    - MedicationStatement: coded medications with effective periods
    - Observation: measurements with effective dates

Records written:
    - RiskAssessment: one per calculated score, pointing at its pie
    - Bundle: searchset bundles (read) and transaction bundles (written)

Field names are snake_case in Python and camelCase on the wire.

Usage:
    from shared.schemas.fhir import Bundle

    bundle = Bundle.model_validate(response.json())
    records = bundle.resources()

Author: Risk Service Team
Version: 1.0.0
"""

from datetime import date, datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _expand_partial_date(value: Any) -> Any:
    """Expand FHIR partial dates (YYYY, YYYY-MM, YYYY-MM-DD) to instants."""
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 4 and text.isdigit():
            return f"{text}-01-01T00:00:00"
        if len(text) == 7 and text[4] == "-":
            return f"{text}-01T00:00:00"
        if len(text) == 10 and text[4] == "-" and text[7] == "-":
            return f"{text}T00:00:00"
        return text
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    return value


def _ensure_utc(value: datetime) -> datetime:
    """Treat naive instants as UTC so all event dates are comparable."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


FHIRDateTime = Annotated[
    datetime,
    BeforeValidator(_expand_partial_date),
    AfterValidator(_ensure_utc),
]


class FHIRModel(BaseModel):
    """Base model: camelCase aliases, unknown elements ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_fhir(self) -> Dict[str, Any]:
        """Serialize to a FHIR JSON-compatible dictionary."""
        return _prune(self.model_dump(by_alias=True, exclude_none=True, mode="json"))


def _prune(value: Any) -> Any:
    # FHIR JSON forbids empty arrays and objects
    if isinstance(value, dict):
        pruned = {k: _prune(v) for k, v in value.items()}
        return {k: v for k, v in pruned.items() if v not in ([], {})}
    if isinstance(value, list):
        return [_prune(v) for v in value]
    return value


# =============================================================================
# Data Types
# =============================================================================


class Coding(FHIRModel):
    system: Optional[str] = None
    code: Optional[str] = None
    display: Optional[str] = None


class CodeableConcept(FHIRModel):
    coding: List[Coding] = Field(default_factory=list)
    text: Optional[str] = None


class Period(FHIRModel):
    start: Optional[FHIRDateTime] = None
    end: Optional[FHIRDateTime] = None


class Quantity(FHIRModel):
    value: Optional[float] = None
    unit: Optional[str] = None
    system: Optional[str] = None
    code: Optional[str] = None


class Reference(FHIRModel):
    reference: Optional[str] = None
    display: Optional[str] = None


class Meta(FHIRModel):
    tag: List[Coding] = Field(default_factory=list)


# =============================================================================
# Resources Read
# =============================================================================


class Resource(FHIRModel):
    """
    Any resource the service has no dedicated model for.

    Keeps the resource type, when present, so callers can report it by name.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    resource_type: Optional[str] = None
    id: Optional[str] = None


class Patient(FHIRModel):
    resource_type: Literal["Patient"] = "Patient"
    id: Optional[str] = None
    gender: Optional[str] = None
    birth_date: Optional[FHIRDateTime] = None


class Condition(FHIRModel):
    resource_type: Literal["Condition"] = "Condition"
    id: Optional[str] = None
    patient: Optional[Reference] = None
    code: Optional[CodeableConcept] = None
    verification_status: Optional[str] = None
    clinical_status: Optional[str] = None
    onset_date_time: Optional[FHIRDateTime] = None
    onset_period: Optional[Period] = None
    date_recorded: Optional[FHIRDateTime] = None
    abatement_date_time: Optional[FHIRDateTime] = None
    abatement_period: Optional[Period] = None


class MedicationStatement(FHIRModel):
    resource_type: Literal["MedicationStatement"] = "MedicationStatement"
    id: Optional[str] = None
    patient: Optional[Reference] = None
    status: Optional[str] = None
    medication_codeable_concept: Optional[CodeableConcept] = None
    effective_date_time: Optional[FHIRDateTime] = None
    effective_period: Optional[Period] = None
    date_asserted: Optional[FHIRDateTime] = None


class Observation(FHIRModel):
    resource_type: Literal["Observation"] = "Observation"
    id: Optional[str] = None
    subject: Optional[Reference] = None
    status: Optional[str] = None
    code: Optional[CodeableConcept] = None
    value_quantity: Optional[Quantity] = None
    effective_date_time: Optional[FHIRDateTime] = None
    effective_period: Optional[Period] = None
    issued: Optional[FHIRDateTime] = None


RESOURCE_MODELS = {
    "Patient": Patient,
    "Condition": Condition,
    "MedicationStatement": MedicationStatement,
    "Observation": Observation,
}


def parse_resource(data: Dict[str, Any]) -> FHIRModel:
    """
    Parse a FHIR resource dictionary into its model.

    Resource types without a dedicated model, including entries that carry
    no resourceType at all, become a generic Resource.
    """
    model = RESOURCE_MODELS.get(data.get("resourceType", ""))
    if model is None:
        return Resource.model_validate(data)
    return model.model_validate(data)


# =============================================================================
# Resources Written
# =============================================================================


class RiskAssessmentPrediction(FHIRModel):
    probability_decimal: Optional[float] = None
    outcome: Optional[CodeableConcept] = None


class RiskAssessment(FHIRModel):
    resource_type: Literal["RiskAssessment"] = "RiskAssessment"
    id: Optional[str] = None
    meta: Optional[Meta] = None
    subject: Optional[Reference] = None
    method: Optional[CodeableConcept] = None
    date: Optional[FHIRDateTime] = None
    prediction: List[RiskAssessmentPrediction] = Field(default_factory=list)
    basis: List[Reference] = Field(default_factory=list)


class BundleEntryRequest(FHIRModel):
    method: str
    url: str


class BundleEntry(FHIRModel):
    full_url: Optional[str] = None
    resource: Optional[Dict[str, Any]] = None
    request: Optional[BundleEntryRequest] = None


class Bundle(FHIRModel):
    resource_type: Literal["Bundle"] = "Bundle"
    type: Optional[str] = None
    total: Optional[int] = None
    entry: List[BundleEntry] = Field(default_factory=list)

    def resources(self) -> List[FHIRModel]:
        """Parse every entry's resource, preserving bundle order."""
        return [
            parse_resource(entry.resource)
            for entry in self.entry
            if entry.resource is not None
        ]
