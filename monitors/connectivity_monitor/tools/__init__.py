"""Connectivity Monitor Tools"""
from .diagnostics import (
    DiagnosticsTrigger,
    NullDiagnostics,
    ContainerDiagnostics,
    get_diagnostics_trigger,
)

__all__ = [
    "DiagnosticsTrigger",
    "NullDiagnostics",
    "ContainerDiagnostics",
    "get_diagnostics_trigger",
]
