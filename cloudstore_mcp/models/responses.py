"""HTTP-only response models."""

from datetime import datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness check payload."""

    status: str = Field(default="healthy")
    version: str
    timestamp: datetime
    backend: str = Field(description="Store backend in use: memory or remote")
    tools: int = Field(ge=0, description="Number of registered tools")
