"""Review Pydantic schemas for response serialization."""

from dataclasses import asdict
from typing import Dict, List, Optional

from pydantic import BaseModel

from reviewhub.scrapers.base import Review


class ReviewResponse(BaseModel):
    """A single normalized review."""

    id: str
    platform: str
    author: str
    rating: int
    content: str
    date: str
    language: str
    title: Optional[str] = None
    version: Optional[str] = None
    helpful: Optional[int] = None
    reply_content: Optional[str] = None
    reply_date: Optional[str] = None

    @classmethod
    def from_review(cls, review: Review) -> "ReviewResponse":
        return cls.model_validate(asdict(review))


def to_review_responses(reviews: List[Review]) -> List[ReviewResponse]:
    return [ReviewResponse.from_review(r) for r in reviews]


class PlatformReviews(BaseModel):
    """One platform's share of a combined review request."""

    success: bool
    count: int = 0
    reviews: List[ReviewResponse] = []
    error: Optional[str] = None


class CombinedReviewsResponse(BaseModel):
    """Reviews from both platforms, plus the merged list newest first."""

    success: bool = True
    total_reviews: int = 0
    platforms: Dict[str, PlatformReviews]
    combined_reviews: List[ReviewResponse] = []


class PlatformReviewsResponse(BaseModel):
    """Reviews from a single platform."""

    success: bool = True
    platform: str
    count: int = 0
    reviews: List[ReviewResponse] = []
