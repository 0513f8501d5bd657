"""Interface Link Schemas"""
from pydantic import BaseModel


class LinkReport(BaseModel):
    """A down/up pair observed on the watched interface"""
    interface: str
    down_at: int
    up_at: int
    duration: int

    @classmethod
    def between(cls, interface: str, down_at: int, up_at: int) -> "LinkReport":
        return cls(interface=interface, down_at=down_at, up_at=up_at, duration=up_at - down_at)

    def format_value(self) -> str:
        return f"{self.down_at} - {self.up_at} ({self.duration} seconds)"
