"""Pydantic schemas for the ReviewHub API.

All response models are defined here for easy import.
"""

from reviewhub.schemas.common import ErrorResponse, ServiceInfoResponse
from reviewhub.schemas.review import (
    CombinedReviewsResponse,
    PlatformReviews,
    PlatformReviewsResponse,
    ReviewResponse,
    to_review_responses,
)
from reviewhub.schemas.app_info import AppInfoOverviewResponse, AppInfoResponse, PlatformAppInfo
from reviewhub.schemas.stats import PlatformStats, ReviewStatsResponse, StatsResponse
from reviewhub.schemas.search import AppSearchResponse, AppSearchResultResponse
from reviewhub.schemas.health import HealthCheckResponse

__all__ = [
    # Common
    "ErrorResponse",
    "ServiceInfoResponse",
    # Review
    "ReviewResponse",
    "PlatformReviews",
    "PlatformReviewsResponse",
    "CombinedReviewsResponse",
    "to_review_responses",
    # App info
    "AppInfoResponse",
    "PlatformAppInfo",
    "AppInfoOverviewResponse",
    # Stats
    "ReviewStatsResponse",
    "PlatformStats",
    "StatsResponse",
    # Search
    "AppSearchResultResponse",
    "AppSearchResponse",
    # Health
    "HealthCheckResponse",
]
