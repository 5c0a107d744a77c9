"""Review statistics schemas."""

from typing import Dict, List, Optional

from pydantic import BaseModel

from reviewhub.schemas.review import ReviewResponse, to_review_responses
from reviewhub.services.review_service import ReviewStats


class ReviewStatsResponse(BaseModel):
    platform: str
    sample_size: int
    rating_distribution: Dict[str, int]
    recent_reviews: List[ReviewResponse] = []
    total_reviews: Optional[int] = None
    average_rating: Optional[float] = None

    @classmethod
    def from_stats(cls, stats: ReviewStats) -> "ReviewStatsResponse":
        return cls(
            platform=stats.platform,
            sample_size=stats.sample_size,
            rating_distribution=stats.rating_distribution,
            recent_reviews=to_review_responses(stats.recent_reviews),
            total_reviews=stats.total_reviews,
            average_rating=stats.average_rating,
        )


class PlatformStats(BaseModel):
    success: bool
    stats: Optional[ReviewStatsResponse] = None
    error: Optional[str] = None


class StatsResponse(BaseModel):
    """Review statistics for both platforms."""

    success: bool = True
    android: PlatformStats
    ios: PlatformStats
