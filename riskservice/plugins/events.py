"""
Event Streams
=============

Converts a patient's clinical records into a chronological stream of
events that risk plugins walk through.

Each record contributes a start event and, when it carries an end date,
an end event of the same kind. Synthetic age milestone events are added
per plugin on a clone of the stream.

Usage:
    from riskservice.plugins.events import build_event_stream

    es = build_event_stream(bundle.resources())
    for event in es.events:
        ...

Author: Risk Service Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence

from shared.schemas.fhir import (
    Condition,
    MedicationStatement,
    Observation,
    Patient,
    Period,
)
from riskservice.errors import AmbiguousPatientError, UnsupportedResourceKindError


logger = logging.getLogger(__name__)


# Records outside these statuses contribute no events
CONFIRMED_CONDITION_STATUS = "confirmed"
ACTIVE_MEDICATION_STATUSES = frozenset({"active", "completed", "intended"})
FINAL_OBSERVATION_STATUSES = frozenset(
    {"final", "amended", "preliminary", "registered"}
)


class EventKind(str, Enum):
    """Kinds of events a stream can hold."""
    CONDITION = "Condition"
    MEDICATION_STATEMENT = "MedicationStatement"
    OBSERVATION = "Observation"
    AGE = "Age"


@dataclass
class Event:
    """
    A dated clinical fact of possible importance to a risk calculation.

    ``value`` is the originating record, or the age in years for
    AGE milestone events.
    """
    date: datetime
    kind: EventKind
    end: bool = False
    value: Any = None


@dataclass
class EventStream:
    """A patient and their events, sorted by date."""
    patient: Optional[Patient]
    events: List[Event] = field(default_factory=list)

    def add_event(self, event: Event) -> None:
        self.events.append(event)

    def clone(self) -> "EventStream":
        """
        Copy the stream so events can be added without touching this one.

        The event list and patient are copied; the records the events
        point to are shared.
        """
        patient = self.patient.model_copy() if self.patient is not None else None
        return EventStream(patient=patient, events=list(self.events))


def sort_events_by_date(events: List[Event]) -> None:
    """Sort events in place by date, keeping input order for ties."""
    events.sort(key=lambda e: e.date)


def find_date(use_period_end: bool, *dates_and_periods: Any) -> Optional[datetime]:
    """
    Return the first date found among the candidates.

    Periods contribute their start, or their end when ``use_period_end``
    is set. Missing candidates are skipped.
    """
    for candidate in dates_and_periods:
        if candidate is None:
            continue
        if isinstance(candidate, datetime):
            return candidate
        if isinstance(candidate, Period):
            if not use_period_end and candidate.start is not None:
                return candidate.start
            if use_period_end and candidate.end is not None:
                return candidate.end
    return None


def _record_events(
    kind: EventKind,
    record: Any,
    start: Optional[datetime],
    end: Optional[datetime],
) -> List[Event]:
    # TODO: records without any usable date are dropped; decide whether they
    # should surface as undated history instead.
    events = []
    if start is not None:
        events.append(Event(date=start, kind=kind, end=False, value=record))
    if end is not None:
        events.append(Event(date=end, kind=kind, end=True, value=record))
    return events


def build_event_stream(resources: Iterable[Any]) -> EventStream:
    """
    Convert clinical records into an EventStream.

    Args:
        resources: Records for one patient in any order; at most one Patient

    Returns:
        EventStream sorted by event date

    Raises:
        AmbiguousPatientError: If more than one Patient is present
        UnsupportedResourceKindError: If a record kind is not supported
    """
    patient: Optional[Patient] = None
    events: List[Event] = []

    for r in resources:
        if isinstance(r, Patient):
            if patient is not None:
                raise AmbiguousPatientError()
            patient = r
        elif isinstance(r, Condition):
            if r.verification_status != CONFIRMED_CONDITION_STATUS:
                continue
            events.extend(_record_events(
                EventKind.CONDITION,
                r,
                find_date(False, r.onset_date_time, r.onset_period, r.date_recorded),
                find_date(True, r.abatement_date_time, r.abatement_period),
            ))
        elif isinstance(r, MedicationStatement):
            if r.status not in ACTIVE_MEDICATION_STATUSES:
                continue
            events.extend(_record_events(
                EventKind.MEDICATION_STATEMENT,
                r,
                find_date(False, r.effective_date_time, r.effective_period, r.date_asserted),
                find_date(True, r.effective_period),
            ))
        elif isinstance(r, Observation):
            if r.status not in FINAL_OBSERVATION_STATUSES:
                continue
            events.extend(_record_events(
                EventKind.OBSERVATION,
                r,
                find_date(False, r.effective_date_time, r.effective_period, r.issued),
                find_date(True, r.effective_period),
            ))
        else:
            kind = getattr(r, "resource_type", type(r).__name__) or "unknown"
            raise UnsupportedResourceKindError(kind)

    sort_events_by_date(events)
    logger.debug(f"Built event stream with {len(events)} events")
    return EventStream(patient=patient, events=events)


def add_years(moment: datetime, years: int) -> datetime:
    """Add calendar years; Feb 29 rolls over to Mar 1 in non-leap years."""
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, month=3, day=1)


def add_significant_birthday_events(
    es: EventStream,
    ages: Sequence[int],
    now: Optional[datetime] = None,
) -> None:
    """
    Add AGE events for the patient's birthdays at the given ages.

    Birthdays that have not happened yet are skipped, as are patients
    without a birth date. The stream is re-sorted afterwards.
    """
    if not ages or es.patient is None or es.patient.birth_date is None:
        return

    now = now or datetime.now(timezone.utc)
    for age in ages:
        birthday = add_years(es.patient.birth_date, age)
        if birthday < now:
            es.add_event(Event(date=birthday, kind=EventKind.AGE, end=False, value=age))

    sort_events_by_date(es.events)
