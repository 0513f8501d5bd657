"""Connectivity Monitor Schemas"""
from .connectivity import (
    ConnectivityState,
    ConnectivityClass,
    ConnectivityReading,
    Transition,
    classify_transition,
    OutageReport,
    DiagnosticsBundle,
)
from .state import ConnectivityMonitorState

__all__ = [
    "ConnectivityState",
    "ConnectivityClass",
    "ConnectivityReading",
    "Transition",
    "classify_transition",
    "OutageReport",
    "DiagnosticsBundle",
    "ConnectivityMonitorState",
]
