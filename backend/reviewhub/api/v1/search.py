"""App Store search endpoint."""

from fastapi import APIRouter, Depends, Query

from reviewhub.dependencies import get_review_service
from reviewhub.schemas import AppSearchResponse, AppSearchResultResponse
from reviewhub.services.review_service import ReviewService

router = APIRouter()


@router.get("", response_model=AppSearchResponse)
async def search_apps(
    term: str = Query(..., min_length=1, description="Search term"),
    limit: int = Query(10, ge=1, le=50, description="Maximum results"),
    service: ReviewService = Depends(get_review_service),
):
    """Search the App Store catalogue in the configured country."""
    results = await service.search_apps(term, limit)
    return AppSearchResponse(
        success=True,
        term=term,
        count=len(results),
        results=[AppSearchResultResponse.model_validate(r) for r in results],
    )
