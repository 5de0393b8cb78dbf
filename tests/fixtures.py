"""
Test Fixtures for Risk Plugins
==============================

Builders for patients, clinical records and the events they produce,
so plugin tests can lay out a patient's history directly.

Author: Risk Service Team
Version: 1.0.0
"""

from datetime import datetime, timezone
from typing import Optional, Tuple

from shared.schemas.fhir import (
    CodeableConcept,
    Coding,
    Condition,
    MedicationStatement,
    Observation,
    Patient,
    Period,
    Quantity,
)
from riskservice.plugins.events import Event, EventKind, EventStream


FHIR_ENDPOINT_URL = "http://example.org/fhir"
ICD9 = "http://hl7.org/fhir/sid/icd-9"
RXNORM = "http://www.nlm.nih.gov/research/umls/rxnorm/"
LOINC = "http://loinc.org"


def utc(*args) -> datetime:
    """Aware UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)


# Evaluation time used by the plugin tests
NOW = utc(2020, 1, 1)


def patient(
    gender: str = "female",
    birth_date: Optional[datetime] = None,
    patient_id: str = "1223",
) -> Patient:
    return Patient(id=patient_id, gender=gender, birth_date=birth_date or utc(1940, 7, 1))


def event_stream(*events: Event, pt: Optional[Patient] = None) -> EventStream:
    return EventStream(patient=pt or patient(), events=list(events))


# =============================================================================
# Records
# =============================================================================


def condition(
    record_id: str,
    name: str,
    icd9_code: str,
    onset: datetime,
    abatement: Optional[datetime] = None,
    verification_status: str = "confirmed",
) -> Condition:
    return Condition(
        id=record_id,
        code=CodeableConcept(
            coding=[Coding(system=ICD9, code=icd9_code, display=name)],
            text=name,
        ),
        verification_status=verification_status,
        onset_date_time=onset,
        abatement_date_time=abatement,
    )


def medication(
    record_id: str,
    name: str,
    rxnorm_code: str,
    active: datetime,
    inactive: Optional[datetime] = None,
    status: str = "active",
) -> MedicationStatement:
    return MedicationStatement(
        id=record_id,
        status=status,
        medication_codeable_concept=CodeableConcept(
            coding=[Coding(system=RXNORM, code=rxnorm_code, display=name)],
            text=name,
        ),
        effective_period=Period(start=active, end=inactive),
    )


def observation(
    record_id: str,
    name: str,
    loinc_code: str,
    value: float,
    unit: str,
    effective: datetime,
    status: str = "final",
) -> Observation:
    return Observation(
        id=record_id,
        status=status,
        code=CodeableConcept(coding=[Coding(system=LOINC, code=loinc_code)], text=name),
        value_quantity=Quantity(value=value, unit=unit),
        effective_date_time=effective,
    )


# =============================================================================
# Events
# =============================================================================


def age_event(age: int, date: datetime) -> Event:
    return Event(date=date, kind=EventKind.AGE, end=False, value=age)


def condition_event(record_id: str, name: str, icd9_code: str, onset: datetime) -> Event:
    return Event(
        date=onset,
        kind=EventKind.CONDITION,
        value=condition(record_id, name, icd9_code, onset),
    )


def condition_start_and_end_events(
    record_id: str,
    name: str,
    icd9_code: str,
    onset: datetime,
    abatement: datetime,
) -> Tuple[Event, Event]:
    record = condition(record_id, name, icd9_code, onset, abatement)
    return (
        Event(date=onset, kind=EventKind.CONDITION, value=record),
        Event(date=abatement, kind=EventKind.CONDITION, end=True, value=record),
    )


def medication_event(record_id: str, name: str, rxnorm_code: str, active: datetime) -> Event:
    return Event(
        date=active,
        kind=EventKind.MEDICATION_STATEMENT,
        value=medication(record_id, name, rxnorm_code, active),
    )


def medication_start_and_end_events(
    record_id: str,
    name: str,
    rxnorm_code: str,
    active: datetime,
    inactive: datetime,
) -> Tuple[Event, Event]:
    record = medication(record_id, name, rxnorm_code, active, inactive)
    return (
        Event(date=active, kind=EventKind.MEDICATION_STATEMENT, value=record),
        Event(date=inactive, kind=EventKind.MEDICATION_STATEMENT, end=True, value=record),
    )


def observation_event(
    record_id: str,
    name: str,
    loinc_code: str,
    value: float,
    unit: str,
    effective: datetime,
) -> Event:
    return Event(
        date=effective,
        kind=EventKind.OBSERVATION,
        value=observation(record_id, name, loinc_code, value, unit, effective),
    )


def slice_values(pie) -> list:
    """Slice values in slice order."""
    return [s.value for s in pie.slices]
