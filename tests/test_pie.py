"""
Tests for Risk Pies
===================
"""

from datetime import datetime

from riskservice.plugins.pie import Pie, Slice, new_pie


def sample_pie():
    pie = Pie(patient="http://example.org/fhir/Patient/1")
    pie.add_slice("Conditions", 50, value=2, max_value=5)
    pie.add_slice("Medications", 50, value=1, max_value=5)
    return pie


class TestPie:
    """Tests for Pie."""

    def test_total_values(self):
        assert sample_pie().total_values() == 3

    def test_update_slice_value(self):
        pie = sample_pie()
        pie.update_slice_value("Medications", 4)
        assert pie.slices[1].value == 4

    def test_update_unknown_slice_is_ignored(self):
        pie = sample_pie()
        pie.update_slice_value("Nope", 4)
        assert pie.total_values() == 3

    def test_clone_with_new_id(self):
        pie = sample_pie()
        cloned = pie.clone(True)

        assert cloned.id != pie.id
        assert len(cloned.id) == 32
        assert cloned.patient == pie.patient
        assert cloned.created == pie.created
        assert cloned.slices == pie.slices

    def test_clone_keeping_id(self):
        pie = sample_pie()
        assert pie.clone(False).id == pie.id

    def test_clone_slices_are_independent(self):
        pie = sample_pie()
        cloned = pie.clone(True)
        cloned.update_slice_value("Conditions", 5)

        assert pie.slices[0].value == 2
        assert cloned.slices[0].value == 5

    def test_new_pie_copies_defaults(self):
        defaults = [Slice("Conditions", 50, max_value=5)]
        pie = new_pie("http://example.org/fhir/Patient/1", defaults)
        pie.update_slice_value("Conditions", 3)

        assert defaults[0].value == 0
        assert pie.created.tzinfo is not None


class TestPieSerialization:
    """Tests for the pie JSON shape."""

    def test_to_dict(self):
        pie = sample_pie()
        data = pie.to_dict()

        assert data["id"] == pie.id
        assert data["patient"] == "http://example.org/fhir/Patient/1"
        assert data["slices"][0] == {
            "name": "Conditions", "weight": 50, "value": 2, "maxValue": 5,
        }
        assert datetime.fromisoformat(data["created"]) == pie.created

    def test_max_value_omitted_when_unset(self):
        assert Slice("Gender", 11).to_dict() == {"name": "Gender", "weight": 11, "value": 0}

    def test_from_dict(self):
        pie = sample_pie()
        restored = Pie.from_dict(pie.to_dict())

        assert restored == pie
