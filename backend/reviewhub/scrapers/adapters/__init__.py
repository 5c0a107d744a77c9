"""Storefront adapters."""

from .app_store import AppStoreAdapter
from .google_play import GooglePlayAdapter

__all__ = [
    "AppStoreAdapter",
    "GooglePlayAdapter",
]
