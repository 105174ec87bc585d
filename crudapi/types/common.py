"""
Response envelopes shared by every demo app.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    """Current time as an ISO-8601 string (UTC, millisecond precision)."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


class ErrorResponse(BaseModel):
    error: str
    message: str
    timestamp: str = Field(default_factory=utc_timestamp)
    issues: Optional[Dict[str, List[str]]] = None  # Field errors on validation failure


class MessageResponse(BaseModel):
    message: str
    id: Optional[int] = None


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: float
    environment: str
    version: str


class MemoryUsage(BaseModel):
    used: int
    total: int
    percentage: float


class CpuUsage(BaseModel):
    usage: float  # CPU seconds consumed by this process


class StatusResponse(HealthResponse):
    memory: MemoryUsage
    cpu: CpuUsage
    python_version: str


class RootResponse(BaseModel):
    message: str
    api: str
    version: str
    docs: str
    endpoints: List[str]
