"""
Risk Service Scheduling Package
===============================

Debounced scheduling of patient recalculations, so a burst of updates
for one patient produces a single recalculation.

Author: Risk Service Team
Version: 1.0.0
"""

from riskservice.scheduling.delayer import FunctionDelayer

__all__ = [
    "FunctionDelayer",
]
