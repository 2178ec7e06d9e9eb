"""
Common Pydantic models used across multiple endpoints.

Health checks and service info responses.
"""

from pydantic import BaseModel, Field


class TargetInfo(BaseModel):
    """Public view of a configured model target (no credential)."""

    id: str
    url: str


class ServiceInfoResponse(BaseModel):
    """Root endpoint response with service information."""

    service: str
    status: str = Field(default='running')
    version: str
    endpoints: list[str]
    targets: list[TargetInfo]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default='healthy', description='Service health status')
    num_targets: int = Field(..., description='Configured model targets')
    upstream_timeout: float | None = Field(None, description='Upstream timeout, None = default')
    memory_mb: float
    cpu_percent: float
    max_file_size_mb: int
