"""Network Event Schemas"""
import time
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

# Action names used by the network manager dispatcher
CONNECTIVITY_CHANGE = "connectivity-change"
INTERFACE_UP = "up"
INTERFACE_DOWN = "down"


class NetworkEvent(BaseModel):
    """One state-change notification from the network manager dispatcher"""
    interface: str = Field(default="", description="Interface name, empty or 'none' for global events")
    action: str = Field(..., description="Dispatcher action, e.g. connectivity-change, up, down")
    connectivity_state: Optional[str] = Field(
        default=None,
        description="Raw CONNECTIVITY_STATE value for connectivity-change events",
    )
    event_id: str = Field(default_factory=lambda: uuid4().hex)
    timestamp: int = Field(default_factory=lambda: int(time.time()), description="Epoch seconds")

    @property
    def is_connectivity_change(self) -> bool:
        return self.action == CONNECTIVITY_CHANGE

    @property
    def is_link_event(self) -> bool:
        return self.action in (INTERFACE_UP, INTERFACE_DOWN)
