"""
Result Consolidation
====================

Orders a plugin's results by time and keeps one result per instant.

An age milestone that lands on the same instant as a clinical event
would otherwise publish two assessments for one moment; the result that
came last in the plugin's output wins.

Author: Risk Service Team
Version: 1.0.0
"""

from typing import Iterable, List

from riskservice.plugins.base import CalculationResult


def sort_and_consolidate(results: Iterable[CalculationResult]) -> List[CalculationResult]:
    """
    Sort results by as-of time and collapse equal timestamps.

    The sort is stable, so among results sharing a timestamp the one
    that was last in the input is kept.

    Args:
        results: Results in any order

    Returns:
        New list with strictly increasing as-of times
    """
    consolidated: List[CalculationResult] = []
    for result in sorted(results, key=lambda r: r.as_of):
        if consolidated and consolidated[-1].as_of == result.as_of:
            consolidated[-1] = result
        else:
            consolidated.append(result)
    return consolidated
