"""Review aggregation service.

Fans requests out to both storefront adapters concurrently and merges the
results. One platform failing never fails the whole request: each platform
is reported with its own success flag and error message.
"""

import asyncio
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import structlog

from reviewhub.config import settings
from reviewhub.core.exceptions import NotFoundError, ScraperError
from reviewhub.scrapers.base import AppInfo, AppSearchResult, BaseStorefrontAdapter, Review
from reviewhub.scrapers.utils.normalizer import DateNormalizer

logger = structlog.get_logger(__name__)


@dataclass
class PlatformOutcome:
    """Result of one platform's part in an aggregate request."""

    success: bool
    value: Any = None
    error: Optional[str] = None


@dataclass
class ReviewStats:
    """Rating statistics computed from a recent review sample."""

    platform: str
    sample_size: int
    rating_distribution: Dict[str, int]
    recent_reviews: List[Review] = field(default_factory=list)
    total_reviews: Optional[int] = None
    average_rating: Optional[float] = None


class ReviewService:
    """Service for aggregating reviews across storefronts."""

    PLATFORMS = ("android", "ios")

    def __init__(self, android: BaseStorefrontAdapter, ios: BaseStorefrontAdapter):
        """Initialize review service.

        Args:
            android: Google Play adapter
            ios: App Store adapter
        """
        self.adapters: Dict[str, BaseStorefrontAdapter] = {"android": android, "ios": ios}
        self.logger = logger.bind(service="review_service")

    def get_adapter(self, platform: str) -> BaseStorefrontAdapter:
        adapter = self.adapters.get(platform)
        if adapter is None:
            raise NotFoundError("Platform", platform)
        return adapter

    @staticmethod
    def _settle(result: Any) -> PlatformOutcome:
        """Turn one asyncio.gather(..., return_exceptions=True) result into an outcome."""
        if isinstance(result, BaseException):
            message = result.message if isinstance(result, ScraperError) else str(result)
            return PlatformOutcome(success=False, error=message or result.__class__.__name__)
        return PlatformOutcome(success=True, value=result)

    @staticmethod
    def sort_newest_first(reviews: List[Review]) -> List[Review]:
        """Sort reviews by date, newest first; unparseable dates go last."""

        def _key(review: Review) -> Tuple[int, float]:
            parsed: Optional[datetime] = DateNormalizer.parse(review.date)
            if parsed is None:
                return (1, 0.0)
            return (0, -parsed.timestamp())

        return sorted(reviews, key=_key)

    async def fetch_all_reviews(self, limit: int) -> Tuple[Dict[str, PlatformOutcome], List[Review]]:
        """Fetch reviews from both platforms, limit split evenly between them.

        Args:
            limit: Total review budget; each platform gets ceil(limit / 2)

        Returns:
            Tuple of (per-platform outcomes, combined reviews newest first)
        """
        per_platform = math.ceil(limit / 2)
        self.logger.info("fetching_all_reviews", limit=limit, per_platform=per_platform)

        results = await asyncio.gather(
            *(self.adapters[p].fetch_reviews(per_platform) for p in self.PLATFORMS),
            return_exceptions=True,
        )

        outcomes: Dict[str, PlatformOutcome] = {}
        combined: List[Review] = []
        for platform, result in zip(self.PLATFORMS, results):
            outcome = self._settle(result)
            if outcome.success:
                combined.extend(outcome.value)
            else:
                outcome.value = []
                self.logger.error("platform_reviews_failed", platform=platform, error=outcome.error)
            outcomes[platform] = outcome

        return outcomes, self.sort_newest_first(combined)

    async def fetch_platform_reviews(self, platform: str, limit: int) -> List[Review]:
        """Fetch reviews from a single platform.

        Raises:
            NotFoundError: If the platform is unknown
            ScraperError: If the adapter fails
        """
        adapter = self.get_adapter(platform)
        try:
            return await adapter.fetch_reviews(limit)
        except ScraperError:
            raise
        except Exception as e:
            raise ScraperError(adapter.platform_name, str(e)) from e

    async def fetch_app_info(self) -> Dict[str, PlatformOutcome]:
        """Fetch app metadata from both platforms concurrently."""
        results = await asyncio.gather(
            *(self.adapters[p].get_app_info() for p in self.PLATFORMS),
            return_exceptions=True,
        )

        outcomes: Dict[str, PlatformOutcome] = {}
        for platform, result in zip(self.PLATFORMS, results):
            outcome = self._settle(result)
            if outcome.success and outcome.value is None:
                outcome = PlatformOutcome(success=False, error="App info could not be extracted")
            outcomes[platform] = outcome
        return outcomes

    async def fetch_stats(self) -> Dict[str, PlatformOutcome]:
        """Compute rating statistics for both platforms concurrently."""
        results = await asyncio.gather(
            *(self._platform_stats(self.adapters[p]) for p in self.PLATFORMS),
            return_exceptions=True,
        )
        return {platform: self._settle(result) for platform, result in zip(self.PLATFORMS, results)}

    async def _platform_stats(self, adapter: BaseStorefrontAdapter) -> ReviewStats:
        # Both calls run to completion before either error is surfaced
        results = await asyncio.gather(
            adapter.get_app_info(),
            adapter.fetch_reviews(settings.STATS_SAMPLE_SIZE),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        info, reviews = results
        return self.build_stats(adapter.platform_name, reviews, info)

    @staticmethod
    def build_stats(
        platform: str,
        reviews: List[Review],
        info: Optional[AppInfo] = None,
        recent_count: Optional[int] = None,
    ) -> ReviewStats:
        """Build ReviewStats from a review sample and optional app info.

        Reviews with an unknown (0) rating are left out of the distribution.
        """
        if recent_count is None:
            recent_count = settings.RECENT_REVIEWS_COUNT

        distribution = {str(star): 0 for star in range(1, 6)}
        for review in reviews:
            if 1 <= review.rating <= 5:
                distribution[str(review.rating)] += 1

        return ReviewStats(
            platform=platform,
            sample_size=len(reviews),
            rating_distribution=distribution,
            recent_reviews=reviews[:recent_count],
            total_reviews=info.reviews_count if info else None,
            average_rating=info.rating if info else None,
        )

    async def search_apps(self, term: str, limit: int = 10) -> List[AppSearchResult]:
        """Search the App Store catalogue."""
        adapter = self.get_adapter("ios")
        return await adapter.search_apps(term, limit)

    async def check_health(self) -> Dict[str, str]:
        """Run every adapter's health check concurrently.

        Returns:
            Mapping of platform to "ok" or an error description
        """
        results = await asyncio.gather(
            *(self.adapters[p].health_check() for p in self.PLATFORMS),
            return_exceptions=True,
        )

        services: Dict[str, str] = {}
        for platform, result in zip(self.PLATFORMS, results):
            if isinstance(result, BaseException):
                services[platform] = f"error: {result}"
            else:
                services[platform] = "ok" if result else "error: no data extracted"
        return services
