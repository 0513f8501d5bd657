"""Schema definitions shared by monitors"""

from .state import WorkflowState
from .tags import SetTagInput, SetTagOutput
from .events import (
    NetworkEvent,
    CONNECTIVITY_CHANGE,
    INTERFACE_UP,
    INTERFACE_DOWN,
)

__all__ = [
    "WorkflowState",
    "NetworkEvent",
    "CONNECTIVITY_CHANGE",
    "INTERFACE_UP",
    "INTERFACE_DOWN",
    "SetTagInput",
    "SetTagOutput",
]
