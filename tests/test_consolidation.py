"""
Tests for Result Consolidation
==============================
"""

from riskservice.plugins.base import CalculationResult
from riskservice.service.consolidation import sort_and_consolidate
from tests.fixtures import utc


def result(as_of, score):
    return CalculationResult(as_of=as_of, score=score)


class TestSortAndConsolidate:
    """Tests for sort_and_consolidate."""

    def test_sorts_by_time(self):
        results = [result(utc(2003, 1, 1), 3), result(utc(2001, 1, 1), 1), result(utc(2002, 1, 1), 2)]
        assert [r.score for r in sort_and_consolidate(results)] == [1, 2, 3]

    def test_last_result_for_an_instant_wins(self):
        results = [
            result(utc(2001, 1, 1), 1),
            result(utc(2005, 7, 1), 2),
            result(utc(2005, 7, 1), 3),
            result(utc(2006, 1, 1), 4),
        ]
        consolidated = sort_and_consolidate(results)

        assert [(r.as_of, r.score) for r in consolidated] == [
            (utc(2001, 1, 1), 1),
            (utc(2005, 7, 1), 3),
            (utc(2006, 1, 1), 4),
        ]

    def test_unsorted_duplicates(self):
        results = [result(utc(2005, 7, 1), 2), result(utc(2001, 1, 1), 1), result(utc(2005, 7, 1), 5)]
        assert [r.score for r in sort_and_consolidate(results)] == [1, 5]

    def test_strictly_increasing(self):
        results = [result(utc(2000 + i % 3, 1, 1), i) for i in range(9)]
        times = [r.as_of for r in sort_and_consolidate(results)]
        assert times == sorted(set(times))

    def test_idempotent(self):
        results = [result(utc(2005, 7, 1), 2), result(utc(2001, 1, 1), 1), result(utc(2005, 7, 1), 5)]
        once = sort_and_consolidate(results)
        assert sort_and_consolidate(once) == once

    def test_does_not_modify_input(self):
        results = [result(utc(2002, 1, 1), 2), result(utc(2001, 1, 1), 1)]
        sort_and_consolidate(results)
        assert [r.score for r in results] == [2, 1]

    def test_empty(self):
        assert sort_and_consolidate([]) == []
