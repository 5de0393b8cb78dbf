"""
Risk Pies
=========

A pie is the chart behind a risk assessment: an ordered list of named,
weighted slices whose values add up to the assessment's score. FHIR has
no resource for it, so risk assessments point at a stored pie through
their basis reference.

Pies are mutated through clone chains: a plugin clones the running pie
before each change so every emitted result keeps its own snapshot.

Author: Risk Service Team
Version: 1.0.0
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4


def new_pie_id() -> str:
    """Generate a new pie identity."""
    return uuid4().hex


@dataclass
class Slice:
    """
    One weighted factor of the risk assessment.

    In the chart, it appears as a slice in the pie.
    """
    name: str
    weight: int
    value: int = 0
    max_value: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"name": self.name, "weight": self.weight, "value": self.value}
        if self.max_value:
            data["maxValue"] = self.max_value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Slice":
        return cls(
            name=data["name"],
            weight=data["weight"],
            value=data.get("value", 0),
            max_value=data.get("maxValue"),
        )


@dataclass
class Pie:
    """
    Snapshot of a patient's weighted risk factors at one instant.

    The slice names are fixed when the pie is created from a plugin's
    default slices; clones only ever change slice values.
    """
    patient: str
    id: str = field(default_factory=new_pie_id)
    created: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    slices: List[Slice] = field(default_factory=list)

    def add_slice(
        self,
        name: str,
        weight: int,
        value: int = 0,
        max_value: Optional[int] = None,
    ) -> None:
        """Append a slice to the pie."""
        self.slices.append(Slice(name, weight, value, max_value))

    def update_slice_value(self, name: str, value: int) -> None:
        """
        Set the value of the first slice with the given name.

        Unknown names are ignored.
        """
        for s in self.slices:
            if s.name == name:
                s.value = value
                return

    def total_values(self) -> int:
        """Sum of all slice values; this is the score."""
        return sum(s.value for s in self.slices)

    def clone(self, generate_new_id: bool) -> "Pie":
        """
        Copy the pie so the clone's slices can change independently.

        Args:
            generate_new_id: Give the clone a fresh identity instead of
                sharing the original's.
        """
        cloned = replace(self, slices=[replace(s) for s in self.slices])
        if generate_new_id:
            cloned.id = new_pie_id()
        return cloned

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "slices": [s.to_dict() for s in self.slices],
            "patient": self.patient,
            "created": self.created.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pie":
        created = data["created"]
        if isinstance(created, str):
            created = datetime.fromisoformat(created)
        return cls(
            id=data["id"],
            patient=data["patient"],
            created=created,
            slices=[Slice.from_dict(s) for s in data.get("slices", [])],
        )


def new_pie(patient: str, default_slices: List[Slice]) -> Pie:
    """Create a pie for a patient seeded with copies of the default slices."""
    return Pie(patient=patient, slices=[replace(s) for s in default_slices])
