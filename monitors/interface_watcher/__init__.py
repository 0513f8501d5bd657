"""Interface Watcher - down/up reporting for one watched interface"""
from .workflow import InterfaceWatcherWorkflow

__all__ = ["InterfaceWatcherWorkflow"]
