"""App info Pydantic schemas."""

from dataclasses import asdict
from typing import Optional

from pydantic import BaseModel

from reviewhub.scrapers.base import AppInfo


class AppInfoResponse(BaseModel):
    """App metadata; which fields are set depends on the extraction path."""

    platform: str
    source: str
    name: Optional[str] = None
    developer: Optional[str] = None
    rating: Optional[float] = None
    reviews_count: Optional[int] = None
    installs: Optional[str] = None
    version: Optional[str] = None
    price: Optional[str] = None
    category: Optional[str] = None
    updated: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    icon: Optional[str] = None

    @classmethod
    def from_app_info(cls, info: AppInfo) -> "AppInfoResponse":
        return cls.model_validate(asdict(info))


class PlatformAppInfo(BaseModel):
    success: bool
    info: Optional[AppInfoResponse] = None
    error: Optional[str] = None


class AppInfoOverviewResponse(BaseModel):
    """App metadata from both platforms."""

    success: bool = True
    android: PlatformAppInfo
    ios: PlatformAppInfo
