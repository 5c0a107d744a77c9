"""Common Pydantic schemas used across the API."""

from typing import Dict, List, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard API error response."""

    success: bool = False
    error: str
    message: Optional[str] = None
    platform: Optional[str] = None
    available_endpoints: Optional[List[str]] = None


class ServiceInfoResponse(BaseModel):
    """Root endpoint capability listing."""

    message: str
    endpoints: Dict[str, str]
    app_info: Dict[str, str]
