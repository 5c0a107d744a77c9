"""Apple App Store adapter.

Fetches reviews from the public iTunes customer reviews RSS feed (JSON
flavour) and app metadata from the iTunes lookup/search APIs.
No authentication required.
"""

import math
from typing import Any, Dict, List, Optional

import httpx
import structlog

from reviewhub.config import settings
from reviewhub.core.exceptions import ScraperError
from reviewhub.scrapers.base import AppInfo, AppSearchResult, BaseStorefrontAdapter, Review
from reviewhub.scrapers.utils.normalizer import (
    DateNormalizer,
    LanguageDetector,
    RatingNormalizer,
    clean_text,
    make_review_id,
    parse_count,
)


logger = structlog.get_logger()


def _label(entry: Dict[str, Any], *keys: str) -> str:
    """Read entry[k1][k2]...["label"], the RSS JSON way of wrapping values."""
    node: Any = entry
    for key in keys:
        if not isinstance(node, dict):
            return ""
        node = node.get(key)
    if isinstance(node, dict):
        node = node.get("label")
    return clean_text(node) if node is not None else ""


def _text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _rating(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        rating = float(value)
    except ValueError:
        return None
    return round(rating, 2) if math.isfinite(rating) else None


class AppStoreAdapter(BaseStorefrontAdapter):
    """App Store adapter backed by the iTunes RSS feed.

    The feed serves at most 50 reviews per page and 10 pages per app.
    """

    platform_slug = "ios"
    platform_name = "App Store"

    BASE_URL = "https://itunes.apple.com"
    REVIEWS_PER_PAGE = 50
    MAX_PAGES = 10

    def __init__(self, app_id: Optional[str] = None, country: Optional[str] = None):
        """Initialize App Store adapter."""
        super().__init__()
        self.app_id = app_id or settings.IOS_APP_ID
        if country:
            self.country = country.upper()
        self.logger = logger.bind(adapter=self.platform_slug)

    @property
    def storefront(self) -> str:
        return self.country.lower()

    async def fetch_reviews(self, limit: Optional[int] = None) -> List[Review]:
        """Fetch the most recent reviews, page by page.

        Stops when the limit is reached, the page cap is hit, or a page
        comes back without reviews.

        Args:
            limit: Maximum number of reviews

        Returns:
            List of Review objects (newest first)
        """
        limit = self._resolve_limit(limit)
        max_pages = min(self.MAX_PAGES, math.ceil(limit / self.REVIEWS_PER_PAGE))
        reviews: List[Review] = []

        self.logger.info(
            "fetching_app_store_reviews",
            app_id=self.app_id,
            country=self.storefront,
            limit=limit,
        )

        try:
            for page in range(1, max_pages + 1):
                page_reviews = await self.fetch_reviews_page(page)
                if not page_reviews:
                    break
                reviews.extend(page_reviews[: limit - len(reviews)])
                if len(reviews) >= limit:
                    break
        except Exception as e:
            self.logger.error("app_store_fetch_failed", error=str(e), exc_info=True)
            raise ScraperError(self.platform_name, str(e)) from e

        self.logger.info("app_store_fetch_complete", total_reviews=len(reviews))
        return reviews

    async def fetch_reviews_page(self, page: int) -> List[Review]:
        """Fetch and parse one RSS page. Any failure yields an empty page."""
        url = (
            f"{self.BASE_URL}/{self.storefront}/rss/customerreviews/"
            f"page={page}/id={self.app_id}/sortby=mostrecent/json"
        )

        try:
            response = await self._request("GET", url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                self.logger.info("app_store_page_not_found", page=page)
            else:
                self.logger.error(
                    "app_store_page_http_error",
                    page=page,
                    status_code=e.response.status_code,
                )
            return []
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error("app_store_page_failed", page=page, error=str(e))
            return []

        reviews = self.parse_reviews_page(data)
        self.logger.debug("app_store_page_fetched", page=page, count=len(reviews))
        return reviews

    def parse_reviews_page(self, data: Any) -> List[Review]:
        """Convert one RSS JSON document into reviews.

        The leading entry of each page describes the app itself and is skipped.
        """
        feed = data.get("feed") if isinstance(data, dict) else None
        entries = feed.get("entry") if isinstance(feed, dict) else None
        if not entries:
            return []
        if isinstance(entries, dict):
            entries = [entries]

        reviews: List[Review] = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                continue
            if index == 0 and self._is_app_entry(entry):
                continue

            try:
                review = self._normalize_entry(entry)
            except ValueError as e:
                self.logger.debug("app_store_entry_skipped", error=str(e))
                continue

            if LanguageDetector.should_keep(review.content, self.language, self.storefront):
                reviews.append(review)

        return reviews

    @staticmethod
    def _is_app_entry(entry: Dict[str, Any]) -> bool:
        return "im:name" in entry or "im:rating" not in entry

    def _normalize_entry(self, entry: Dict[str, Any]) -> Review:
        content = _label(entry, "content")
        author = _label(entry, "author", "name")
        entry_id = _label(entry, "id")
        date = DateNormalizer.to_iso(_label(entry, "updated"))

        return Review(
            id=f"as_{entry_id}" if entry_id else make_review_id("as", author, date, content),
            platform=self.platform_name,
            author=author or "Anonymous",
            rating=RatingNormalizer.parse(_label(entry, "im:rating")),
            title=_label(entry, "title") or None,
            content=content,
            date=date,
            version=_label(entry, "im:version") or None,
            helpful=parse_count(_label(entry, "im:voteSum")),
            language=self.storefront,
        )

    async def get_app_info(self) -> Optional[AppInfo]:
        """Fetch app metadata from the iTunes lookup API.

        Returns:
            AppInfo or None if the app is unknown or the call fails
        """
        try:
            response = await self._request(
                "GET",
                f"{self.BASE_URL}/lookup",
                params={"id": self.app_id, "country": self.storefront},
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error("app_store_lookup_failed", app_id=self.app_id, error=str(e))
            return None

        results = data.get("results") if isinstance(data, dict) else None
        if not results or not isinstance(results, list) or not isinstance(results[0], dict):
            self.logger.warning("app_store_app_not_found", app_id=self.app_id)
            return None

        return self.parse_app_info(results[0])

    def parse_app_info(self, app: Dict[str, Any]) -> AppInfo:
        """Map a lookup result to AppInfo. Values of an unexpected type become None."""
        return AppInfo(
            platform=self.platform_name,
            source="lookup",
            name=_text(app.get("trackName")),
            developer=_text(app.get("artistName")),
            rating=_rating(app.get("averageUserRating")),
            reviews_count=parse_count(app.get("userRatingCount")),
            version=_text(app.get("version")),
            price=_text(app.get("formattedPrice")) or "Free",
            category=_text(app.get("primaryGenreName")),
            updated=_text(app.get("currentVersionReleaseDate")),
            description=_text(app.get("description")),
            url=_text(app.get("trackViewUrl")) or settings.app_store_url,
            icon=_text(app.get("artworkUrl512")) or _text(app.get("artworkUrl100")),
        )

    async def search_apps(self, term: str, limit: int = 10) -> List[AppSearchResult]:
        """Search the App Store catalogue.

        Args:
            term: Search term
            limit: Maximum number of results

        Returns:
            List of AppSearchResult, empty on failure
        """
        try:
            response = await self._request(
                "GET",
                f"{self.BASE_URL}/search",
                params={
                    "term": term,
                    "country": self.storefront,
                    "media": "software",
                    "limit": limit,
                },
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error("app_store_search_failed", term=term, error=str(e))
            return []

        raw_results = data.get("results") if isinstance(data, dict) else None

        results = []
        for app in (raw_results or [])[:limit]:
            if not isinstance(app, dict):
                continue
            track_id = app.get("trackId")
            if not track_id or not isinstance(track_id, (int, str)) or not _text(app.get("trackName")):
                continue
            results.append(
                AppSearchResult(
                    id=str(track_id),
                    name=_text(app["trackName"]),
                    developer=_text(app.get("artistName")),
                    rating=_rating(app.get("averageUserRating")),
                    category=_text(app.get("primaryGenreName")),
                    price=_text(app.get("formattedPrice")) or "Free",
                    url=_text(app.get("trackViewUrl")),
                )
            )

        self.logger.info("app_store_search_complete", term=term, count=len(results))
        return results
