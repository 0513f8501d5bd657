"""
Reporter Template Package

Shared building blocks for connectivity monitors: configuration, logging,
durable state, the device tag client and the LangGraph workflow base.

Example:
    from reporter_template import BaseWorkflow, StateStore
    from reporter_template.schemas import NetworkEvent

    class MyMonitor(BaseWorkflow):
        def get_state_class(self):
            return WorkflowState

        def build_graph(self, graph: StateGraph):
            # Add your nodes and edges
            pass

    await MyMonitor("my_monitor", "1.0.0", StateStore("/mnt/data")).execute(event)
"""

from .workflow import BaseWorkflow
from .config_loader import load_config, get_config, Config
from .tools.state_store import StateStore
from .tools.tag_client import TagReporter

__version__ = "1.0.0"

__all__ = [
    "BaseWorkflow",
    "load_config",
    "get_config",
    "Config",
    "StateStore",
    "TagReporter",
]
