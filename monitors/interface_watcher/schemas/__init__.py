"""Interface Watcher Schemas"""
from .link import LinkReport
from .state import InterfaceWatcherState

__all__ = ["LinkReport", "InterfaceWatcherState"]
