"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from reviewhub.config import settings
from reviewhub.dependencies import get_review_service
from reviewhub.schemas import HealthCheckResponse
from reviewhub.services.review_service import ReviewService

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    deep: bool = Query(False, description="Also check that both storefronts can be scraped"),
    service: ReviewService = Depends(get_review_service),
):
    """Return service health status.

    With deep=true each adapter fetches app info from its storefront;
    any failure marks the service as degraded.
    """
    services = await service.check_health() if deep else {}
    overall_status = "ok" if all(s == "ok" for s in services.values()) else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        app_config={
            "android_package": settings.ANDROID_PACKAGE_ID,
            "ios_app_id": settings.IOS_APP_ID,
            "language": settings.LANGUAGE,
            "country": settings.COUNTRY,
        },
        services=services,
    )
