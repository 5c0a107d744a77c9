"""App info endpoint."""

from fastapi import APIRouter, Depends

from reviewhub.dependencies import get_review_service
from reviewhub.schemas import AppInfoOverviewResponse, AppInfoResponse, PlatformAppInfo
from reviewhub.services.review_service import ReviewService

router = APIRouter()


@router.get("", response_model=AppInfoOverviewResponse)
async def get_app_info(service: ReviewService = Depends(get_review_service)):
    """Get app metadata from both platforms."""
    outcomes = await service.fetch_app_info()

    def _platform(platform: str) -> PlatformAppInfo:
        outcome = outcomes[platform]
        return PlatformAppInfo(
            success=outcome.success,
            info=AppInfoResponse.from_app_info(outcome.value) if outcome.success else None,
            error=outcome.error,
        )

    return AppInfoOverviewResponse(success=True, android=_platform("android"), ios=_platform("ios"))
