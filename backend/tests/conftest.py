"""Pytest configuration and shared fixtures."""

from typing import List

import pytest

from reviewhub.scrapers.base import AppInfo, Review
from tests.helpers import make_review


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


@pytest.fixture
def android_reviews() -> List[Review]:
    return [
        make_review("Google Play", 1, "2024-01-05T00:00:00+00:00", rating=4),
        make_review("Google Play", 2, "12 Ocak 2024", rating=1),
        make_review("Google Play", 3, "", rating=0),
    ]


@pytest.fixture
def ios_reviews() -> List[Review]:
    return [
        make_review("App Store", 4, "2024-01-10T10:00:00-07:00", rating=5),
        make_review("App Store", 5, "2024-01-01T10:00:00-07:00", rating=4),
    ]


@pytest.fixture
def android_info() -> AppInfo:
    return AppInfo(platform="Google Play", source="library", name="Koton", rating=4.5, reviews_count=1200)


@pytest.fixture
def ios_info() -> AppInfo:
    return AppInfo(platform="App Store", source="lookup", name="Koton", rating=4.7, reviews_count=830)
