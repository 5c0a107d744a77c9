"""Shared builders and fakes for the test suite."""

import json
from pathlib import Path
from typing import Callable, Dict, List, Optional

import httpx

from reviewhub.scrapers.base import AppInfo, AppSearchResult, BaseStorefrontAdapter, Review

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """An httpx client whose requests are answered by handler instead of the network."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ============================================================================
# App Store RSS builders
# ============================================================================

APP_ENTRY = {
    "im:name": {"label": "Koton"},
    "im:artist": {"label": "Koton Magazacilik"},
    "id": {"label": "https://apps.apple.com/tr/app/koton/id1436987707"},
}


def rss_entry(index: int, content: Optional[str] = None, rating: int = 5) -> Dict:
    return {
        "author": {"name": {"label": f"kullanici{index}"}, "uri": {"label": "https://itunes.apple.com"}},
        "updated": {"label": f"2024-01-{(index % 28) + 1:02d}T10:00:00-07:00"},
        "im:rating": {"label": str(rating)},
        "im:version": {"label": "8.4.1"},
        "id": {"label": str(10000 + index)},
        "title": {"label": f"Başlık {index}"},
        "content": {"label": content or f"Güzel uygulama numara {index}", "attributes": {"type": "text"}},
        "im:voteSum": {"label": "3"},
        "im:voteCount": {"label": "4"},
    }


def rss_page(entries: List[Dict], include_app_entry: bool = True) -> Dict:
    all_entries = ([APP_ENTRY] if include_app_entry else []) + entries
    return {"feed": {"author": {"name": {"label": "iTunes Store"}}, "entry": all_entries}}


# ============================================================================
# Google Play builders
# ============================================================================

def review_array(review_id: str, author: str, score: int, text: str, ts: int = 1704067200) -> List:
    """Positional review record as returned by the Play Store RPC."""
    return [
        review_id,
        [author, [None, 2, None, [None, None, "https://play-lh.googleusercontent.com/a/x"]]],
        score,
        None,
        text,
        [ts, 0],
        7,
        None,
        None,
        None,
        "8.4.1",
    ]


def batchexecute_body(arrays: List[List], rpc_id: str = "UsvDTd") -> str:
    payload = json.dumps([arrays, [None, "CAESBggDEOgH"]])
    envelope = json.dumps([
        ["wrb.fr", rpc_id, payload, None, None, None, "generic"],
        ["di", 98],
        ["af.httprm", 97, "-123456789", 12],
    ])
    return f")]}}'\n\n{len(envelope)}\n{envelope}\n25\n[[\"e\",4,null,null,{len(envelope)}]]\n"


# ============================================================================
# Fake adapters for service and API tests
# ============================================================================

def make_review(platform: str, index: int, date: str, rating: int = 5) -> Review:
    return Review(
        id=f"{platform[:2].lower()}_{index}",
        platform=platform,
        author=f"user{index}",
        rating=rating,
        content=f"Review number {index}",
        date=date,
        language="tr",
    )


class FakeAdapter(BaseStorefrontAdapter):
    """Adapter returning canned data, or raising the configured error."""

    def __init__(
        self,
        slug: str,
        name: str,
        reviews: Optional[List[Review]] = None,
        info: Optional[AppInfo] = None,
        error: Optional[Exception] = None,
    ):
        super().__init__()
        self.platform_slug = slug
        self.platform_name = name
        self.reviews = reviews or []
        self.info = info
        self.error = error
        self.requested_limits: List[int] = []

    async def fetch_reviews(self, limit=None):
        self.requested_limits.append(limit)
        if self.error:
            raise self.error
        return self.reviews[:limit] if limit else list(self.reviews)

    async def get_app_info(self):
        if self.error:
            raise self.error
        return self.info

    async def search_apps(self, term, limit=10):
        return [AppSearchResult(id="1436987707", name="Koton", developer="Koton", price="Free")][:limit]

