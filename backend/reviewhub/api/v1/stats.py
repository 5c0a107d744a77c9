"""Review statistics endpoint."""

from fastapi import APIRouter, Depends

from reviewhub.dependencies import get_review_service
from reviewhub.schemas import PlatformStats, ReviewStatsResponse, StatsResponse
from reviewhub.services.review_service import ReviewService

router = APIRouter()


@router.get("", response_model=StatsResponse)
async def get_stats(service: ReviewService = Depends(get_review_service)):
    """Get rating statistics computed from a recent review sample per platform."""
    outcomes = await service.fetch_stats()

    def _platform(platform: str) -> PlatformStats:
        outcome = outcomes[platform]
        return PlatformStats(
            success=outcome.success,
            stats=ReviewStatsResponse.from_stats(outcome.value) if outcome.success else None,
            error=outcome.error,
        )

    return StatsResponse(success=True, android=_platform("android"), ios=_platform("ios"))
