"""Storefront scraping for app reviews and metadata.

This package provides:
- The Review/AppInfo records and the base adapter class
- App Store and Google Play adapters
- Utility modules for extraction and normalization
- Factory for creating and managing adapter instances
"""

from .base import (
    AppInfo,
    AppSearchResult,
    BaseStorefrontAdapter,
    Review,
)
from .factory import AdapterFactory, adapter_factory, get_adapter_factory

__all__ = [
    # Base classes
    "BaseStorefrontAdapter",
    # Data structures
    "Review",
    "AppInfo",
    "AppSearchResult",
    # Factory
    "AdapterFactory",
    "adapter_factory",
    "get_adapter_factory",
]
