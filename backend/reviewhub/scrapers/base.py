"""Base storefront adapter interface.

All platform-specific adapters should inherit from BaseStorefrontAdapter
and implement the abstract methods defined here.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import httpx
import structlog

from reviewhub.config import settings
from reviewhub.scrapers.utils.user_agents import get_browser_headers


@dataclass
class Review:
    """Normalized review returned by all adapters."""

    id: str  # Best-effort generated id, not guaranteed unique or stable
    platform: str  # "App Store" or "Google Play"
    author: str
    rating: int  # 1-5, 0 = unknown
    content: str
    date: str  # ISO-8601 when parseable, otherwise the raw storefront text
    language: str
    title: Optional[str] = None
    version: Optional[str] = None
    helpful: Optional[int] = None
    reply_content: Optional[str] = None
    reply_date: Optional[str] = None

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.platform:
            raise ValueError("platform is required")
        if not self.content:
            raise ValueError("content is required")
        if not self.author:
            self.author = "Anonymous"
        if not isinstance(self.rating, int) or not 0 <= self.rating <= 5:
            self.rating = 0


@dataclass
class AppInfo:
    """App metadata. Field availability varies by extraction path."""

    platform: str
    source: str  # 'lookup', 'library' or 'html'
    name: Optional[str] = None
    developer: Optional[str] = None
    rating: Optional[float] = None
    reviews_count: Optional[int] = None
    installs: Optional[str] = None
    version: Optional[str] = None
    price: Optional[str] = None
    category: Optional[str] = None
    updated: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    icon: Optional[str] = None


@dataclass
class AppSearchResult:
    """A single storefront search hit."""

    id: str
    name: str
    developer: Optional[str] = None
    rating: Optional[float] = None
    category: Optional[str] = None
    price: Optional[str] = None
    url: Optional[str] = None


class BaseStorefrontAdapter(ABC):
    """Abstract base class for storefront adapters.

    Adapters never raise for an ordinary extraction failure: each strategy
    logs and degrades to an empty list or None. Only unexpected errors
    escape, wrapped in ScraperError.
    """

    platform_slug: str = ""  # Must be overridden in subclass ("ios", "android")
    platform_name: str = ""  # Must be overridden in subclass ("App Store", "Google Play")

    def __init__(self):
        """Initialize the adapter with dependency injection points."""
        self.http_client: Optional[httpx.AsyncClient] = None  # Injected in tests
        self.language = settings.LANGUAGE
        self.country = settings.COUNTRY
        self._timeout = settings.HTTP_TIMEOUT
        self.logger = structlog.get_logger(adapter=self.platform_slug)

    @abstractmethod
    async def fetch_reviews(self, limit: Optional[int] = None) -> List[Review]:
        """Fetch the most recent reviews.

        Args:
            limit: Maximum number of reviews (defaults to MAX_REVIEWS)

        Returns:
            List of Review objects, possibly empty

        Raises:
            ScraperError: If an unexpected error escapes the extraction strategies
        """
        pass

    @abstractmethod
    async def get_app_info(self) -> Optional[AppInfo]:
        """Fetch app metadata.

        Returns:
            AppInfo or None if no strategy could extract it
        """
        pass

    async def health_check(self) -> bool:
        """Check if this adapter can still extract data from its storefront.

        Returns:
            True if healthy, False otherwise
        """
        try:
            info = await self.get_app_info()
            return info is not None
        except Exception as e:
            self.logger.error("health_check_failed", error=str(e))
            return False

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send an HTTP request with browser-like headers.

        Uses the injected http_client when present, otherwise a short-lived
        client with the configured timeout.

        Raises:
            httpx.HTTPError: On transport failures
        """
        headers = get_browser_headers(self.language)
        headers.update(kwargs.pop("headers", None) or {})

        self.logger.debug("storefront_request", method=method, url=url)

        if self.http_client is not None:
            return await self.http_client.request(method, url, headers=headers, **kwargs)

        async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
            return await client.request(method, url, headers=headers, **kwargs)

    def _resolve_limit(self, limit: Optional[int]) -> int:
        if limit is None or limit < 1:
            return settings.MAX_REVIEWS
        return limit
