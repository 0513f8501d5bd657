"""Device Tag Schemas"""
from typing import Optional, Literal
from datetime import datetime
from pydantic import BaseModel, Field


class SetTagInput(BaseModel):
    """Input for a device tag upsert"""
    key: str = Field(..., min_length=1)
    value: str


class SetTagOutput(BaseModel):
    """
    Result of a device tag upsert.

    Best-effort: callers log it and carry on, it is never raised.
    """
    key: str
    outcome: Literal["created", "updated", "failed"]
    status_code: Optional[int] = None
    error: Optional[str] = None
    completed_at: datetime = Field(default_factory=datetime.now)

    @property
    def success(self) -> bool:
        return self.outcome != "failed"
