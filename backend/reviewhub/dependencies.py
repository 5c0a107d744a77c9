"""FastAPI dependency injection providers."""

from reviewhub.scrapers.factory import get_adapter_factory
from reviewhub.scrapers.register_adapters import register_all_adapters
from reviewhub.services.review_service import ReviewService


def get_review_service() -> ReviewService:
    """Build a request-scoped ReviewService from the registered adapters.

    Usage:
        @router.get("/reviews")
        async def list_reviews(service: ReviewService = Depends(get_review_service)):
            outcomes, combined = await service.fetch_all_reviews(100)
    """
    factory = get_adapter_factory()
    if not (factory.has_adapter("android") and factory.has_adapter("ios")):
        register_all_adapters()

    return ReviewService(
        android=factory.create_adapter("android"),
        ios=factory.create_adapter("ios"),
    )
