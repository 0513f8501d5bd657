"""Connectivity Monitor - outage detection and reporting on connectivity-change"""
from .workflow import ConnectivityMonitorWorkflow

__all__ = ["ConnectivityMonitorWorkflow"]
