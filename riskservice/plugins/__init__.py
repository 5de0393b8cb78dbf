"""
Risk Service Plugins Package
============================

Event streams, pies and the risk scoring plugins.

This package provides:
    - events: Clinical records to chronological event streams
    - pie: Weighted factor snapshots behind each score
    - base: Plugin contract, results and NotApplicableError
    - cha2ds2_vasc: CHA2DS2-VASc stroke risk score
    - simple: Active conditions + medications count
    - registry: The set of plugins the service runs

Author: Risk Service Team
Version: 1.0.0
"""

from riskservice.plugins.base import (
    CalculationResult,
    NotApplicableError,
    PluginConfig,
    RiskServicePlugin,
)
from riskservice.plugins.events import (
    Event,
    EventKind,
    EventStream,
    add_significant_birthday_events,
    build_event_stream,
)
from riskservice.plugins.pie import Pie, Slice
from riskservice.plugins.cha2ds2_vasc import CHA2DS2VAScPlugin
from riskservice.plugins.simple import SimplePlugin
from riskservice.plugins.registry import PluginRegistry, default_registry

__all__ = [
    "CalculationResult",
    "NotApplicableError",
    "PluginConfig",
    "RiskServicePlugin",
    "Event",
    "EventKind",
    "EventStream",
    "add_significant_birthday_events",
    "build_event_stream",
    "Pie",
    "Slice",
    "CHA2DS2VAScPlugin",
    "SimplePlugin",
    "PluginRegistry",
    "default_registry",
]
