"""Connectivity Data Schemas"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ConnectivityState(str, Enum):
    """Connectivity reported by the network manager"""
    FULL = "FULL"
    NONE = "NONE"
    LIMITED = "LIMITED"
    OTHER = "OTHER"  # anything else, raw value kept on the reading


class ConnectivityClass(str, Enum):
    """Coarse classification used by the outage state machine"""
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    UNEXPECTED = "unexpected"


class Transition(str, Enum):
    """What a (previous, incoming) pair means for the outage state machine"""
    SEED = "seed"                    # no previous record
    OUTAGE_OPEN = "outage_open"      # connected -> disconnected
    OUTAGE_CLOSE = "outage_close"    # disconnected -> connected
    STEADY = "steady"                # same class on both sides
    UNEXPECTED = "unexpected"        # unrecognized state on either side


class ConnectivityReading(BaseModel):
    """A connectivity state together with the raw string it was parsed from"""
    model_config = ConfigDict(frozen=True)

    state: ConnectivityState
    raw: str

    @classmethod
    def parse(cls, raw: Optional[str]) -> "ConnectivityReading":
        raw = (raw or "").strip() or "UNKNOWN"
        try:
            state = ConnectivityState(raw.upper())
        except ValueError:
            state = ConnectivityState.OTHER
        if state is ConnectivityState.OTHER:
            return cls(state=state, raw=raw)
        return cls(state=state, raw=state.value)

    @property
    def connectivity_class(self) -> ConnectivityClass:
        if self.state is ConnectivityState.FULL:
            return ConnectivityClass.CONNECTED
        if self.state in (ConnectivityState.NONE, ConnectivityState.LIMITED):
            return ConnectivityClass.DISCONNECTED
        return ConnectivityClass.UNEXPECTED


def classify_transition(
    previous: Optional[ConnectivityReading],
    incoming: ConnectivityReading,
) -> Transition:
    """Map a state pair onto the outage state machine"""
    if previous is None:
        return Transition.SEED

    before = previous.connectivity_class
    after = incoming.connectivity_class

    if ConnectivityClass.UNEXPECTED in (before, after):
        return Transition.UNEXPECTED
    if before is ConnectivityClass.CONNECTED and after is ConnectivityClass.DISCONNECTED:
        return Transition.OUTAGE_OPEN
    if before is ConnectivityClass.DISCONNECTED and after is ConnectivityClass.CONNECTED:
        return Transition.OUTAGE_CLOSE
    return Transition.STEADY


class OutageReport(BaseModel):
    """A closed outage, computed when connectivity returns"""
    start: int = Field(..., description="Drop time, epoch seconds")
    end: int = Field(..., description="Recovery time, epoch seconds")
    duration: int = Field(..., description="end - start in whole seconds")
    diagnostics_dir: Optional[str] = None

    @classmethod
    def between(cls, start: int, end: int) -> "OutageReport":
        return cls(start=start, end=end, duration=end - start)

    def format_value(self) -> str:
        return f"{self.start} - {self.end} ({self.duration} seconds)"


class DiagnosticsBundle(BaseModel):
    """Where an outage's diagnostics ended up"""
    directory: Optional[str] = None
    powerline_detected: Optional[bool] = None
