"""Health check schemas."""

from datetime import datetime
from typing import Dict

from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    """Health check response schema."""

    status: str
    timestamp: datetime
    app_config: Dict[str, str]
    services: Dict[str, str] = {}
