"""Tests for the Google Play adapter's three-tier review chain and app info extraction."""

import json
from datetime import datetime
from unittest.mock import patch
from urllib.parse import parse_qs

import httpx
import pytest

from reviewhub.core.exceptions import ScraperError
from reviewhub.scrapers.adapters.google_play import GooglePlayAdapter, looks_like_review_array
from tests.helpers import batchexecute_body, load_fixture, make_client, review_array

GPLAY_MODULE = "reviewhub.scrapers.adapters.google_play"


def _adapter(handler=None, use_library=False) -> GooglePlayAdapter:
    adapter = GooglePlayAdapter(package_id="com.koton.app", language="tr")
    adapter.use_library = use_library
    if handler is not None:
        adapter.http_client = make_client(handler)
    return adapter


def _library_review(review_id="lib1", content="Çok güzel bir uygulama"):
    return {
        "reviewId": review_id,
        "userName": "Ayşe",
        "content": content,
        "score": 5,
        "thumbsUpCount": 3,
        "reviewCreatedVersion": "8.4.1",
        "at": datetime(2024, 1, 2, 10, 0),
        "replyContent": None,
        "repliedAt": None,
    }


def _route(internal=None, page=None):
    """Build a handler answering the RPC endpoint and the details page."""

    def handler(request: httpx.Request) -> httpx.Response:
        if "batchexecute" in request.url.path:
            if internal is None:
                return httpx.Response(500)
            return httpx.Response(200, text=internal)
        if request.url.path.endswith("/details"):
            if page is None:
                return httpx.Response(404)
            return httpx.Response(200, text=page)
        return httpx.Response(404)

    return handler


# ============================================================================
# SHAPE CHECK
# ============================================================================

class TestLooksLikeReviewArray:

    def test_accepts_positional_review(self):
        assert looks_like_review_array(review_array("gp:1", "Elif", 4, "Güzel"))

    def test_rejects_out_of_range_score(self):
        assert not looks_like_review_array(review_array("gp:1", "Elif", 7, "Güzel"))

    def test_rejects_boolean_score(self):
        record = review_array("gp:1", "Elif", 1, "Güzel")
        record[2] = True
        assert not looks_like_review_array(record)

    def test_rejects_short_and_non_list_values(self):
        assert not looks_like_review_array(["gp:1", ["x"], 4])
        assert not looks_like_review_array("gp:1")
        assert not looks_like_review_array(None)

    def test_rejects_empty_id(self):
        assert not looks_like_review_array(review_array("", "Elif", 4, "Güzel"))


# ============================================================================
# TIER 1: LIBRARY
# ============================================================================

class TestLibraryTier:

    async def test_library_reviews_are_normalized(self):
        adapter = _adapter(_route(), use_library=True)

        with patch(f"{GPLAY_MODULE}.gplay_reviews", return_value=([_library_review()], None)) as mock_reviews:
            reviews = await adapter.fetch_reviews(limit=10)

        assert mock_reviews.call_count == 1
        assert mock_reviews.call_args.kwargs["count"] == 10
        assert mock_reviews.call_args.kwargs["lang"] == "tr"
        assert mock_reviews.call_args.kwargs["country"] == "tr"

        assert len(reviews) == 1
        review = reviews[0]
        assert review.id == "gp_lib1"
        assert review.platform == "Google Play"
        assert review.author == "Ayşe"
        assert review.rating == 5
        assert review.date == "2024-01-02T10:00:00+00:00"
        assert review.version == "8.4.1"
        assert review.helpful == 3
        assert review.reply_content is None
        assert review.language == "tr"

    async def test_library_failure_falls_through_to_internal_api(self):
        body = batchexecute_body([review_array("gp:AAA", "Elif", 4, "Kargo çok hızlıydı")])
        adapter = _adapter(_route(internal=body), use_library=True)

        with patch(f"{GPLAY_MODULE}.gplay_reviews", side_effect=RuntimeError("blocked")):
            reviews = await adapter.fetch_reviews(limit=10)

        assert [r.id for r in reviews] == ["gp_gp:AAA"]

    async def test_library_review_without_author_is_skipped(self):
        nameless = _library_review(review_id="lib2", content="Sipariş hiç gelmedi")
        nameless["userName"] = "  "
        adapter = _adapter(_route(), use_library=True)

        with patch(f"{GPLAY_MODULE}.gplay_reviews", return_value=([nameless, _library_review()], None)):
            reviews = await adapter.fetch_reviews(limit=10)

        assert [r.id for r in reviews] == ["gp_lib1"]

    async def test_library_skipped_when_disabled(self):
        body = batchexecute_body([review_array("gp:AAA", "Elif", 4, "Kargo çok hızlıydı")])
        adapter = _adapter(_route(internal=body), use_library=False)

        with patch(f"{GPLAY_MODULE}.gplay_reviews") as mock_reviews:
            reviews = await adapter.fetch_reviews(limit=10)

        mock_reviews.assert_not_called()
        assert len(reviews) == 1


# ============================================================================
# TIER 2: INTERNAL ENDPOINT
# ============================================================================

class TestInternalApiTier:

    async def test_request_carries_rpc_id_and_package(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(200, text=batchexecute_body([review_array("gp:1", "Elif", 5, "Harika uygulama")]))

        adapter = _adapter(handler)
        await adapter.fetch_reviews(limit=20)

        request = captured["request"]
        assert request.method == "POST"
        assert request.url.params["rpcids"] == "UsvDTd"
        assert request.url.params["hl"] == "tr"

        form = parse_qs(request.content.decode())
        outer = json.loads(form["f.req"][0])
        assert outer[0][0][0] == "UsvDTd"
        inner = json.loads(outer[0][0][1])
        assert inner[3] == ["com.koton.app", 7]
        assert inner[2][2][0] == 20

    def test_parse_batchexecute_reviews(self):
        adapter = _adapter()
        record = review_array("gp:AAA", "Elif Demir", 5, "Harika bir uygulama")
        record[7] = [None, "Teşekkürler!", [1704153600, 0]]
        text = batchexecute_body([record, review_array("gp:BBB", "Can", 2, "Giriş yapamıyorum", ts=1703980800)])

        reviews = adapter.parse_internal_response(text, limit=10)

        assert [r.id for r in reviews] == ["gp_gp:AAA", "gp_gp:BBB"]
        first = reviews[0]
        assert first.author == "Elif Demir"
        assert first.rating == 5
        assert first.date == "2024-01-01T00:00:00+00:00"
        assert first.helpful == 7
        assert first.version == "8.4.1"
        assert first.reply_content == "Teşekkürler!"
        assert first.reply_date == "2024-01-02T00:00:00+00:00"

    def test_parse_legacy_html_fragment(self):
        adapter = _adapter()
        fragment = load_fixture("play_reviews.html")
        text = ")]}'\n" + json.dumps([["ecr", None, fragment]])

        reviews = adapter.parse_internal_response(text, limit=10)

        assert [r.author for r in reviews] == ["Mehmet K.", "Zeynep"]

    def test_review_without_author_is_dropped(self):
        adapter = _adapter()
        text = batchexecute_body([review_array("gp:1", "", 4, "Kargo çok hızlıydı")])

        assert adapter.parse_internal_response(text, limit=10) == []

    def test_anonymous_review_does_not_displace_named_ones(self):
        adapter = _adapter()
        text = batchexecute_body([
            review_array("gp:1", "", 4, "Kargo çok hızlıydı"),
            review_array("gp:2", "Elif", 5, "Harika bir uygulama"),
        ])

        reviews = adapter.parse_internal_response(text, limit=10)

        assert [r.author for r in reviews] == ["Elif"]

    def test_unrecognized_body_yields_nothing(self):
        adapter = _adapter()
        assert adapter.parse_internal_response("<html>captcha</html>", limit=10) == []
        assert adapter.parse_internal_response(")]}'\n[[\"di\",12]]", limit=10) == []

    async def test_dedupes_and_caps_at_limit(self):
        arrays = [review_array(f"gp:{i}", f"user{i}", 4, f"Yorum numara {i}") for i in range(5)]
        arrays.append(review_array("gp:0", "user0", 4, "Yorum numara 0"))
        adapter = _adapter(_route(internal=batchexecute_body(arrays)))

        reviews = await adapter.fetch_reviews(limit=3)

        assert [r.id for r in reviews] == ["gp_gp:0", "gp_gp:1", "gp_gp:2"]


# ============================================================================
# TIER 3: DETAILS PAGE
# ============================================================================

class TestHtmlTier:

    def test_parse_review_cards(self):
        adapter = _adapter()
        reviews = adapter.parse_review_html(load_fixture("play_reviews.html"), limit=10)

        # The "ok" review is too short and dropped
        assert len(reviews) == 2
        first, second = reviews
        assert first.author == "Mehmet K."
        assert first.rating == 4
        assert first.content == "Kargo hızlı geldi, uygulama güzel."
        assert first.date == "2024-01-12T00:00:00+00:00"
        assert first.helpful == 15
        assert first.id.startswith("gp_")
        assert second.rating == 1
        assert second.date == "2024-02-03T00:00:00+00:00"
        assert second.helpful is None

    def test_parse_embedded_callback_data(self):
        adapter = _adapter()
        reviews = adapter.parse_review_html(load_fixture("play_embedded.html"), limit=10)

        assert [r.id for r in reviews] == ["gp_gp:AOqpTOE1", "gp_gp:AOqpTOE2"]
        assert reviews[0].author == "Elif Demir"
        assert reviews[0].reply_content == "Teşekkür ederiz!"
        assert reviews[0].version == "8.4.1"
        assert reviews[1].rating == 2
        assert reviews[1].date == "2023-12-31T00:00:00+00:00"

    async def test_falls_back_to_page_when_rpc_fails(self):
        adapter = _adapter(_route(internal=None, page=load_fixture("play_reviews.html")))

        reviews = await adapter.fetch_reviews(limit=10)

        assert [r.author for r in reviews] == ["Mehmet K.", "Zeynep"]

    async def test_all_tiers_empty_returns_empty_list(self):
        adapter = _adapter(_route(internal=")]}'\n[]", page="<html><body></body></html>"))

        assert await adapter.fetch_reviews(limit=10) == []

    async def test_unexpected_error_raises_scraper_error(self):
        adapter = _adapter(_route())

        with patch.object(adapter, "_fetch_from_internal_api", side_effect=RuntimeError("boom")):
            with pytest.raises(ScraperError) as exc_info:
                await adapter.fetch_reviews(limit=10)

        assert exc_info.value.platform == "Google Play"
        assert "boom" in exc_info.value.message


# ============================================================================
# APP INFO
# ============================================================================

class TestGooglePlayAppInfo:

    async def test_app_info_from_library(self):
        details = {
            "title": "Koton",
            "developer": "Koton Mağazacılık",
            "score": 4.4567,
            "ratings": 123456,
            "installs": "10,000,000+",
            "version": "8.4.1",
            "free": True,
            "price": 0,
            "genre": "Alışveriş",
            "updated": 1709683200,
            "description": "Koton ile moda cebinde.",
            "url": "https://play.google.com/store/apps/details?id=com.koton.app",
            "icon": "https://play-lh.googleusercontent.com/icon.png",
        }
        adapter = _adapter(_route(), use_library=True)

        with patch(f"{GPLAY_MODULE}.gplay_app", return_value=details):
            info = await adapter.get_app_info()

        assert info.source == "library"
        assert info.name == "Koton"
        assert info.rating == 4.46
        assert info.reviews_count == 123456
        assert info.price == "Free"
        assert info.updated == "2024-03-05T00:00:00+00:00"

    async def test_library_failure_falls_back_to_page(self):
        adapter = _adapter(_route(page=load_fixture("play_details.html")), use_library=True)

        with patch(f"{GPLAY_MODULE}.gplay_app", side_effect=RuntimeError("not found")):
            info = await adapter.get_app_info()

        assert info.source == "html"
        assert info.name == "Koton"

    async def test_malformed_library_details_fall_back_to_page(self):
        adapter = _adapter(_route(page=load_fixture("play_details.html")), use_library=True)

        with patch(f"{GPLAY_MODULE}.gplay_app", return_value=["not", "a", "mapping"]):
            info = await adapter.get_app_info()

        assert info.source == "html"
        assert info.name == "Koton"

    async def test_library_values_of_unexpected_types_are_dropped(self):
        details = {
            "title": "Koton",
            "score": "n/a",
            "ratings": {"count": 5},
            "genre": ["Alışveriş"],
            "icon": {"url": "https://play-lh.googleusercontent.com/icon.png"},
            "description": None,
        }
        adapter = _adapter(_route(), use_library=True)

        with patch(f"{GPLAY_MODULE}.gplay_app", return_value=details):
            info = await adapter.get_app_info()

        assert info.source == "library"
        assert info.rating is None
        assert info.reviews_count is None
        assert info.category == "Alışveriş"
        assert info.icon == "https://play-lh.googleusercontent.com/icon.png"
        assert info.description is None

    def test_parse_structured_json_ld_values(self):
        info = _adapter().parse_app_info_html(load_fixture("play_details_structured.html"))

        assert info.name == "Koton"
        assert info.icon == "https://play-lh.googleusercontent.com/icon.png"
        assert info.developer == "Koton Mağazacılık"
        assert info.description == "Koton ile moda cebinde."
        assert info.url == "https://play.google.com/store/apps/details?id=com.koton.app"
        assert info.category is None
        assert info.price is None
        # A non-object aggregateRating defers to the page markup
        assert info.rating == 4.3

    def test_reviews_count_comes_from_the_reviews_label(self):
        info = _adapter().parse_app_info_html(load_fixture("play_details_structured.html"))

        assert info.reviews_count == 98700
        assert info.installs == "1M+"

    def test_reviews_count_without_reviews_label(self):
        html = """
        <h1>Koton</h1>
        <div class="g1rdde">Downloads</div>
        <div class="g1rdde">Content rating</div>
        <div class="g1rdde">Rated for 3+</div>
        """

        assert _adapter().parse_app_info_html(html).reviews_count is None

    @pytest.mark.parametrize(
        "ld",
        [
            {"@type": "SoftwareApplication", "name": "Koton", "aggregateRating": ["4.5"]},
            {"@type": "SoftwareApplication", "name": "Koton", "aggregateRating": 4.5, "author": 42},
            {"@type": "SoftwareApplication", "name": {"@value": "Koton"}, "image": [None]},
        ],
    )
    def test_irregular_json_ld_never_raises(self, ld):
        html = f'<script type="application/ld+json">{json.dumps(ld)}</script><h1>Koton</h1>'

        info = _adapter().parse_app_info_html(html)

        assert info.name == "Koton"
        assert info.developer is None
        assert info.icon is None

    def test_parse_json_ld_details(self):
        info = _adapter().parse_app_info_html(load_fixture("play_details.html"))

        assert info.name == "Koton"
        assert info.developer == "Koton Mağazacılık"
        assert info.rating == 4.5
        assert info.reviews_count == 123456
        assert info.category == "SHOPPING"
        assert info.price == "Free"
        assert info.installs == "10 Mn+"
        assert info.version == "8.4.1"
        assert info.updated == "2024-03-05T00:00:00+00:00"
        assert info.icon == "https://play-lh.googleusercontent.com/icon.png"

    def test_parse_selector_details(self):
        info = _adapter().parse_app_info_html(load_fixture("play_details_plain.html"))

        assert info.name == "Koton"
        assert info.developer == "Koton Magazacilik"
        assert info.rating == 4.3
        assert info.reviews_count == 98700
        assert info.installs == "1M+"
        assert info.updated == "2024-03-05T00:00:00+00:00"
        assert info.price is None

    def test_page_without_name_yields_none(self):
        assert _adapter().parse_app_info_html("<html><body><p>Hata</p></body></html>") is None

    async def test_unavailable_everywhere_returns_none(self):
        adapter = _adapter(_route(page=None), use_library=False)

        assert await adapter.get_app_info() is None
        assert await adapter.health_check() is False
