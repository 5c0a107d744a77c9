"""Google Play adapter.

Google Play has no public review API, so reviews come from a fallback
chain, first non-empty result wins:

1. google-play-scraper (maintained third-party library)
2. The Play Store's internal batchexecute RPC, unwrapped by hand
3. The public details page: CSS selectors, then embedded JS data

Every tier logs and swallows its own failures.
"""

import asyncio
import json
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import httpx
import structlog
from bs4 import BeautifulSoup
from google_play_scraper import Sort, app as gplay_app, reviews as gplay_reviews

from reviewhub.config import settings
from reviewhub.core.exceptions import ScraperError
from reviewhub.scrapers.base import AppInfo, BaseStorefrontAdapter, Review
from reviewhub.scrapers.utils.extraction import (
    extract_callback_data,
    extract_json_ld,
    find_nested,
    get_path,
    parse_batchexecute,
    search_patterns,
    select_all,
    select_attr,
    select_text,
    unwrap_xssi,
)
from reviewhub.scrapers.utils.normalizer import (
    DateNormalizer,
    RatingNormalizer,
    clean_text,
    make_review_id,
    parse_count,
)


logger = structlog.get_logger()


def looks_like_review_array(node: Any) -> bool:
    """Shape check for a positional review record: [id, [user, ...], score, _, text, [ts, ...], ...]."""
    return (
        isinstance(node, list)
        and len(node) > 5
        and isinstance(node[0], str)
        and bool(node[0])
        and isinstance(node[1], list)
        and isinstance(node[2], int)
        and not isinstance(node[2], bool)
        and 1 <= node[2] <= 5
        and isinstance(node[4], str)
        and (node[5] is None or isinstance(node[5], list))
    )


def as_text(value: Any, keys: Tuple[str, ...] = ("name",)) -> Optional[str]:
    """Read a metadata value that may be text, a JSON-LD object or a list of either.

    Objects yield the first of ``keys`` holding a string. Anything else is None.
    """
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = next((value[k] for k in keys if isinstance(value.get(k), str)), None)
    if isinstance(value, str):
        return clean_text(value) or None
    return None


def ld_types(obj: Dict[str, Any]) -> List[str]:
    types = obj.get("@type")
    if not isinstance(types, list):
        types = [types]
    return [t for t in types if isinstance(t, str)]


class GooglePlayAdapter(BaseStorefrontAdapter):
    """Google Play adapter with a three-tier review extraction chain."""

    platform_slug = "android"
    platform_name = "Google Play"

    DETAILS_URL = "https://play.google.com/store/apps/details"
    BATCHEXECUTE_URL = "https://play.google.com/_/PlayStoreUi/data/batchexecute"
    REVIEWS_RPC_ID = "UsvDTd"
    SORT_NEWEST = 2

    MIN_REVIEW_LENGTH = 3

    # Review card markup, newest known layout first
    REVIEW_CONTAINER_SELECTORS = [
        "div.RHo1pe",
        "div[jscontroller='H6eRGb']",
        "div[data-review-id]",
        "div[itemprop='review']",
    ]
    AUTHOR_SELECTORS = [".X5PpBb", "span.X43Kjb", "[itemprop='author'] [itemprop='name']", "[itemprop='author']"]
    RATING_SELECTORS = [".iXRFPc", "div[role='img'][aria-label]", "[itemprop='ratingValue']"]
    DATE_SELECTORS = [".bp9Aid", "span.p2TkOb", "[itemprop='datePublished']"]
    CONTENT_SELECTORS = [".h3YV2d", "span[jsname='fbQN7e']", "span[jsname='bN97Pc']", "[itemprop='reviewBody']"]
    HELPFUL_SELECTORS = [".AJTPZc", "div[jsname='J0e8Dc']"]
    REPLY_SELECTORS = [".ras4vb", ".LVQB0b"]

    # App info markup
    NAME_SELECTORS = ["h1[itemprop='name']", "h1 span", "h1"]
    DEVELOPER_SELECTORS = [".Vbfug a span", ".Vbfug a", "a[href*='/store/apps/dev']"]
    RATING_VALUE_SELECTORS = [".TT9eCd", "div[itemprop='starRating'] div"]
    # Stat labels share one class; the reviews stat is the one whose label names reviews
    STAT_LABEL_SELECTORS = [".g1rdde"]
    REVIEWS_COUNT_SELECTORS = [".AYi5wd.TBRnV", "[itemprop='ratingCount']"]
    REVIEWS_LABEL_PATTERN = re.compile(r"\b(?:reviews?|ratings?|yorum|değerlendirme)", re.IGNORECASE)
    UPDATED_SELECTORS = [".xg1aie"]

    INSTALLS_PATTERNS = [
        re.compile(r"([\d.,]+\s*(?:[KMB]|Mn|Mr|B)?\s*\+)\s*(?:downloads|installs|[İi]ndirme)", re.IGNORECASE),
        re.compile(r"(?:downloads|installs|[İi]ndirme)\s*:?\s*([\d.,]+\s*(?:[KMB]|Mn|Mr|B)?\s*\+)", re.IGNORECASE),
    ]
    VERSION_PATTERNS = [
        re.compile(r"(?:current version|version|sürüm)\s*:?\s*(\d[\w.\-]*)", re.IGNORECASE),
    ]
    UPDATED_PATTERNS = [
        re.compile(r"(?:updated on|güncellenme tarihi)\s*:?\s*(.+?\d{4})", re.IGNORECASE),
    ]

    def __init__(self, package_id: Optional[str] = None, language: Optional[str] = None):
        """Initialize Google Play adapter."""
        super().__init__()
        self.package_id = package_id or settings.ANDROID_PACKAGE_ID
        if language:
            self.language = language.lower()
        self.use_library = settings.USE_SCRAPER_LIBRARY
        self.logger = logger.bind(adapter=self.platform_slug)

    @property
    def storefront(self) -> str:
        return self.country.lower()

    async def fetch_reviews(self, limit: Optional[int] = None) -> List[Review]:
        """Fetch the most recent reviews through the fallback chain.

        Args:
            limit: Maximum number of reviews

        Returns:
            Reviews from the first tier that produced any, or an empty list
        """
        limit = self._resolve_limit(limit)

        strategies: List[Tuple[str, Callable[[int], Awaitable[List[Review]]]]] = [
            ("internal_api", self._fetch_from_internal_api),
            ("html", self._scrape_reviews_page),
        ]
        if self.use_library:
            strategies.insert(0, ("library", self._fetch_with_library))

        self.logger.info(
            "fetching_google_play_reviews",
            package_id=self.package_id,
            language=self.language,
            limit=limit,
        )

        try:
            for tier, strategy in strategies:
                reviews = self._finalize(await strategy(limit), limit)
                if reviews:
                    self.logger.info("google_play_fetch_complete", tier=tier, total_reviews=len(reviews))
                    return reviews
                self.logger.info("google_play_tier_empty", tier=tier)
        except Exception as e:
            self.logger.error("google_play_fetch_failed", error=str(e), exc_info=True)
            raise ScraperError(self.platform_name, str(e)) from e

        self.logger.warning("google_play_all_tiers_empty", package_id=self.package_id)
        return []

    def _finalize(self, reviews: List[Review], limit: int) -> List[Review]:
        """Drop records failing the shape check and duplicates, then cap at limit."""
        kept: List[Review] = []
        seen = set()
        for review in reviews:
            if review.id in seen or not self._is_valid(review):
                continue
            seen.add(review.id)
            kept.append(review)
            if len(kept) >= limit:
                break
        return kept

    def _is_valid(self, review: Review) -> bool:
        # Empty authors are rejected while building the Review
        return len(clean_text(review.content)) >= self.MIN_REVIEW_LENGTH

    # ------------------------------------------------------------------
    # Tier 1: google-play-scraper
    # ------------------------------------------------------------------

    async def _fetch_with_library(self, limit: int) -> List[Review]:
        try:
            result, _ = await asyncio.to_thread(
                gplay_reviews,
                self.package_id,
                lang=self.language,
                country=self.storefront,
                sort=Sort.NEWEST,
                count=limit,
            )
        except Exception as e:
            self.logger.warning("google_play_library_failed", error=str(e))
            return []

        reviews = []
        for raw in result or []:
            try:
                reviews.append(self._review_from_library(raw))
            except (ValueError, TypeError, AttributeError) as e:
                self.logger.debug("google_play_library_review_skipped", error=str(e))
        return reviews

    def _review_from_library(self, raw: Dict[str, Any]) -> Review:
        author = clean_text(raw.get("userName"))
        if not author:
            raise ValueError("author is required")
        content = clean_text(raw.get("content"))
        date = DateNormalizer.to_iso(raw.get("at"))
        review_id = raw.get("reviewId")

        return Review(
            id=f"gp_{review_id}" if review_id else make_review_id("gp", author, date, content),
            platform=self.platform_name,
            author=author,
            rating=RatingNormalizer.parse(raw.get("score")),
            content=content,
            date=date,
            version=raw.get("reviewCreatedVersion") or raw.get("appVersion"),
            helpful=parse_count(raw.get("thumbsUpCount")),
            reply_content=clean_text(raw.get("replyContent")) or None,
            reply_date=DateNormalizer.to_iso(raw.get("repliedAt")) or None,
            language=self.language,
        )

    # ------------------------------------------------------------------
    # Tier 2: internal batchexecute endpoint
    # ------------------------------------------------------------------

    def _build_reviews_request(self, limit: int) -> str:
        inner = json.dumps(
            [None, None, [2, self.SORT_NEWEST, [limit, None, None], None, []], [self.package_id, 7]],
            separators=(",", ":"),
        )
        return json.dumps([[[self.REVIEWS_RPC_ID, inner, None, "generic"]]], separators=(",", ":"))

    async def _fetch_from_internal_api(self, limit: int) -> List[Review]:
        try:
            response = await self._request(
                "POST",
                self.BATCHEXECUTE_URL,
                params={"rpcids": self.REVIEWS_RPC_ID, "hl": self.language, "gl": self.storefront},
                data={"f.req": self._build_reviews_request(limit)},
                headers={
                    "Content-Type": "application/x-www-form-urlencoded;charset=UTF-8",
                    "X-Requested-With": "XMLHttpRequest",
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.logger.warning("google_play_internal_api_failed", error=str(e))
            return []

        return self.parse_internal_response(response.text, limit)

    def parse_internal_response(self, text: str, limit: int) -> List[Review]:
        """Unwrap an internal endpoint response into reviews.

        Handles the batchexecute envelope and the older getreviews format,
        where data[0][2] holds an HTML fragment of review cards.
        """
        payload = parse_batchexecute(text, self.REVIEWS_RPC_ID)

        if payload is None:
            try:
                legacy = json.loads(unwrap_xssi(text or ""))
            except ValueError:
                return []
            fragment = get_path(legacy, [0, 2])
            if isinstance(fragment, str):
                return self.parse_review_html(fragment, limit)
            return []

        return self._reviews_from_arrays(find_nested(payload, looks_like_review_array))

    def _reviews_from_arrays(self, arrays: List[List[Any]]) -> List[Review]:
        reviews = []
        for array in arrays:
            try:
                reviews.append(self._review_from_array(array))
            except (ValueError, TypeError) as e:
                self.logger.debug("google_play_array_review_skipped", error=str(e))
        return reviews

    def _review_from_array(self, array: List[Any]) -> Review:
        author = clean_text(get_path(array, [1, 0]))
        if not author:
            raise ValueError("author is required")
        content = clean_text(get_path(array, [4]))
        date = DateNormalizer.to_iso(get_path(array, [5, 0]))
        reply_ts = get_path(array, [7, 2, 0])

        return Review(
            id=f"gp_{array[0]}",
            platform=self.platform_name,
            author=author,
            rating=RatingNormalizer.parse(get_path(array, [2])),
            content=content,
            date=date,
            version=get_path(array, [10]) if isinstance(get_path(array, [10]), str) else None,
            helpful=parse_count(get_path(array, [6])),
            reply_content=clean_text(get_path(array, [7, 1])) or None,
            reply_date=DateNormalizer.to_iso(reply_ts) or None,
            language=self.language,
        )

    # ------------------------------------------------------------------
    # Tier 3: details page HTML
    # ------------------------------------------------------------------

    async def _fetch_details_page(self, **extra_params) -> Optional[str]:
        params = {"id": self.package_id, "hl": self.language, "gl": self.country}
        params.update(extra_params)
        try:
            response = await self._request("GET", self.DETAILS_URL, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.logger.warning("google_play_page_failed", error=str(e))
            return None
        return response.text

    async def _scrape_reviews_page(self, limit: int) -> List[Review]:
        html = await self._fetch_details_page(showAllReviews="true")
        if not html:
            return []
        return self.parse_review_html(html, limit)

    def parse_review_html(self, html: str, limit: int) -> List[Review]:
        """Extract reviews from page markup, trying selectors before embedded data."""
        soup = BeautifulSoup(html, "html.parser")

        reviews = self._finalize(self._extract_reviews_by_selectors(soup), limit)
        if reviews:
            self.logger.debug("google_play_html_strategy", strategy="selectors", count=len(reviews))
            return reviews

        reviews = self._finalize(self._extract_reviews_from_scripts(html), limit)
        self.logger.debug("google_play_html_strategy", strategy="embedded_data", count=len(reviews))
        return reviews

    def _extract_reviews_by_selectors(self, soup: BeautifulSoup) -> List[Review]:
        cards = select_all(soup, self.REVIEW_CONTAINER_SELECTORS)
        self.logger.debug("found_review_cards", count=len(cards))

        reviews = []
        for card in cards:
            try:
                review = self._parse_review_card(card)
            except ValueError as e:
                self.logger.debug("failed_to_parse_review_card", error=str(e))
                continue
            if review:
                reviews.append(review)
        return reviews

    def _parse_review_card(self, card) -> Optional[Review]:
        author = select_text(card, self.AUTHOR_SELECTORS)
        content = select_text(card, self.CONTENT_SELECTORS)
        if not author or not content:
            return None

        rating_label = (
            select_attr(card, self.RATING_SELECTORS, "aria-label")
            or select_attr(card, self.RATING_SELECTORS, "content")
            or select_text(card, self.RATING_SELECTORS)
        )
        raw_date = select_text(card, self.DATE_SELECTORS) or select_attr(card, self.DATE_SELECTORS, "content")
        date = DateNormalizer.to_iso(raw_date)
        review_id = card.get("data-review-id")

        return Review(
            id=f"gp_{review_id}" if review_id else make_review_id("gp", author, date, content),
            platform=self.platform_name,
            author=author,
            rating=RatingNormalizer.parse(rating_label),
            content=content,
            date=date,
            helpful=parse_count(select_text(card, self.HELPFUL_SELECTORS)),
            reply_content=select_text(card, self.REPLY_SELECTORS) or None,
            language=self.language,
        )

    def _extract_reviews_from_scripts(self, html: str) -> List[Review]:
        reviews: List[Review] = []
        for key, data in extract_callback_data(html).items():
            arrays = find_nested(data, looks_like_review_array)
            if arrays:
                self.logger.debug("review_arrays_found", block=key, count=len(arrays))
                reviews.extend(self._reviews_from_arrays(arrays))
        return reviews

    # ------------------------------------------------------------------
    # App info
    # ------------------------------------------------------------------

    async def get_app_info(self) -> Optional[AppInfo]:
        """Fetch app metadata via the library, falling back to the details page.

        Returns:
            AppInfo or None if neither path yields at least a name
        """
        strategies: List[Tuple[str, Callable[[], Awaitable[Optional[AppInfo]]]]] = [
            ("html", self._app_info_from_page),
        ]
        if self.use_library:
            strategies.insert(0, ("library", self._app_info_from_library))

        for tier, strategy in strategies:
            try:
                info = await strategy()
            except (ValueError, TypeError, AttributeError, KeyError, IndexError) as e:
                self.logger.warning("google_play_app_info_tier_failed", tier=tier, error=str(e))
                continue
            if info and info.name:
                self.logger.info("google_play_app_info_fetched", tier=tier)
                return info

        self.logger.warning("google_play_app_info_unavailable", package_id=self.package_id)
        return None

    async def _app_info_from_library(self) -> Optional[AppInfo]:
        try:
            details = await asyncio.to_thread(
                gplay_app, self.package_id, lang=self.language, country=self.storefront
            )
        except Exception as e:
            self.logger.warning("google_play_library_app_failed", error=str(e))
            return None

        return AppInfo(
            platform=self.platform_name,
            source="library",
            name=as_text(details.get("title")),
            developer=as_text(details.get("developer")),
            rating=self._parse_float(details.get("score")),
            reviews_count=parse_count(details.get("ratings")) or parse_count(details.get("reviews")),
            installs=as_text(details.get("installs")),
            version=as_text(details.get("version")),
            price="Free" if details.get("free") else clean_text(details.get("price")) or None,
            category=as_text(details.get("genre")),
            updated=DateNormalizer.to_iso(details.get("updated")) or None,
            description=as_text(details.get("description")),
            url=as_text(details.get("url")) or settings.play_store_url,
            icon=as_text(details.get("icon"), keys=("url",)),
        )

    async def _app_info_from_page(self) -> Optional[AppInfo]:
        html = await self._fetch_details_page()
        if not html:
            return None
        return self.parse_app_info_html(html)

    def parse_app_info_html(self, html: str) -> Optional[AppInfo]:
        """Extract app metadata from the details page.

        JSON-LD first, then CSS selectors, then label regexes over page text.
        """
        soup = BeautifulSoup(html, "html.parser")
        info = AppInfo(platform=self.platform_name, source="html", url=settings.play_store_url)

        for obj in extract_json_ld(soup):
            if not {"SoftwareApplication", "MobileApplication"} & set(ld_types(obj)):
                continue
            rating = obj.get("aggregateRating")
            if isinstance(rating, list):
                rating = rating[0] if rating else None
            if not isinstance(rating, dict):
                rating = {}
            info.name = as_text(obj.get("name"))
            info.developer = as_text(obj.get("author"))
            info.rating = self._parse_float(rating.get("ratingValue"))
            info.reviews_count = parse_count(rating.get("ratingCount"))
            info.category = as_text(obj.get("applicationCategory"))
            info.description = as_text(obj.get("description"))
            info.icon = as_text(obj.get("image"), keys=("url", "contentUrl"))
            offers = obj.get("offers")
            if isinstance(offers, list):
                offers = offers[0] if offers else None
            if isinstance(offers, dict) and isinstance(offers.get("price", ""), (str, int, float)):
                price = str(offers.get("price", ""))
                info.price = "Free" if price in ("0", "0.0", "") else price
            info.url = as_text(obj.get("url"), keys=("url", "@id")) or info.url
            break

        info.name = info.name or select_text(soup, self.NAME_SELECTORS) or None
        info.developer = info.developer or select_text(soup, self.DEVELOPER_SELECTORS) or None
        if info.rating is None:
            info.rating = self._parse_float(select_text(soup, self.RATING_VALUE_SELECTORS))
        if info.reviews_count is None:
            info.reviews_count = self._parse_reviews_count(soup)

        page_text = soup.get_text(" ", strip=True)
        info.installs = search_patterns(page_text, self.INSTALLS_PATTERNS)
        info.version = search_patterns(page_text, self.VERSION_PATTERNS)
        updated = select_text(soup, self.UPDATED_SELECTORS) or search_patterns(page_text, self.UPDATED_PATTERNS)
        info.updated = DateNormalizer.to_iso(updated) or None

        if not info.name:
            return None
        return info

    def _parse_reviews_count(self, soup: BeautifulSoup) -> Optional[int]:
        for label in select_all(soup, self.STAT_LABEL_SELECTORS):
            text = label.get_text(" ", strip=True)
            count = parse_count(text) if self.REVIEWS_LABEL_PATTERN.search(text) else None
            if count is not None:
                return count
        return parse_count(select_text(soup, self.REVIEWS_COUNT_SELECTORS))

    @staticmethod
    def _parse_float(value: Any) -> Optional[float]:
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return None
        match = re.search(r"\d+(?:[.,]\d+)?", str(value))
        if not match:
            return None
        return round(float(match.group(0).replace(",", ".")), 2)
