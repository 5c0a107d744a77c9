"""Review listing endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from reviewhub.config import settings
from reviewhub.dependencies import get_review_service
from reviewhub.schemas import (
    CombinedReviewsResponse,
    PlatformReviews,
    PlatformReviewsResponse,
    to_review_responses,
)
from reviewhub.services.review_service import ReviewService

router = APIRouter()


def _resolve_limit(limit: Optional[int]) -> int:
    return limit or settings.MAX_REVIEWS


@router.get("", response_model=CombinedReviewsResponse)
async def list_reviews(
    limit: Optional[int] = Query(None, ge=1, le=settings.MAX_LIMIT, description="Total reviews across both platforms"),
    service: ReviewService = Depends(get_review_service),
):
    """Get reviews from both platforms.

    The limit is split evenly between the platforms. A failing platform is
    reported with success=false instead of failing the request.
    """
    outcomes, combined = await service.fetch_all_reviews(_resolve_limit(limit))

    platforms = {
        platform: PlatformReviews(
            success=outcome.success,
            count=len(outcome.value or []),
            reviews=to_review_responses(outcome.value or []),
            error=outcome.error,
        )
        for platform, outcome in outcomes.items()
    }

    return CombinedReviewsResponse(
        success=True,
        total_reviews=len(combined),
        platforms=platforms,
        combined_reviews=to_review_responses(combined),
    )


async def _platform_reviews(service: ReviewService, platform: str, limit: Optional[int]) -> PlatformReviewsResponse:
    reviews = await service.fetch_platform_reviews(platform, _resolve_limit(limit))
    return PlatformReviewsResponse(
        success=True,
        platform=service.get_adapter(platform).platform_name,
        count=len(reviews),
        reviews=to_review_responses(reviews),
    )


@router.get("/android", response_model=PlatformReviewsResponse)
async def list_android_reviews(
    limit: Optional[int] = Query(None, ge=1, le=settings.MAX_LIMIT, description="Maximum reviews"),
    service: ReviewService = Depends(get_review_service),
):
    """Get Google Play reviews only."""
    return await _platform_reviews(service, "android", limit)


@router.get("/ios", response_model=PlatformReviewsResponse)
async def list_ios_reviews(
    limit: Optional[int] = Query(None, ge=1, le=settings.MAX_LIMIT, description="Maximum reviews"),
    service: ReviewService = Depends(get_review_service),
):
    """Get App Store reviews only."""
    return await _platform_reviews(service, "ios", limit)
