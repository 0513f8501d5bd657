"""Dispatcher - entry point invoked by the network manager dispatcher"""
from .main import ReporterRunner
from .routing import route_event

__all__ = ["ReporterRunner", "route_event"]
