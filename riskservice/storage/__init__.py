"""
Risk Service Storage Package
============================

Persistence for the pies behind published risk assessments.

Author: Risk Service Team
Version: 1.0.0
"""

from riskservice.storage.pie_store import PieStore

__all__ = [
    "PieStore",
]
