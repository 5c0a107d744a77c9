"""Factory for creating and managing storefront adapter instances."""

from typing import Dict, List, Optional, Type

import structlog

from reviewhub.scrapers.base import BaseStorefrontAdapter


logger = structlog.get_logger(__name__)


class AdapterFactory:
    """Factory for creating adapter instances by platform slug."""

    def __init__(self):
        self._adapter_registry: Dict[str, Type[BaseStorefrontAdapter]] = {}

    def register_adapter(self, platform_slug: str, adapter_class: Type[BaseStorefrontAdapter]) -> None:
        """Register an adapter class for a platform.

        Args:
            platform_slug: Platform identifier ("ios" or "android")
            adapter_class: Adapter class (must inherit from BaseStorefrontAdapter)
        """
        if not issubclass(adapter_class, BaseStorefrontAdapter):
            raise ValueError(f"Adapter class must inherit from BaseStorefrontAdapter: {adapter_class}")

        self._adapter_registry[platform_slug] = adapter_class
        logger.debug("adapter_registered", platform=platform_slug, adapter_class=adapter_class.__name__)

    def create_adapter(self, platform_slug: str) -> Optional[BaseStorefrontAdapter]:
        """Create and configure an adapter instance.

        Returns:
            Configured adapter instance, or None if not registered
        """
        adapter_class = self._adapter_registry.get(platform_slug)
        if not adapter_class:
            logger.warning("adapter_not_found", platform=platform_slug)
            return None

        return adapter_class()

    def get_registered_platforms(self) -> List[str]:
        return list(self._adapter_registry.keys())

    def has_adapter(self, platform_slug: str) -> bool:
        return platform_slug in self._adapter_registry


# Global factory instance
adapter_factory = AdapterFactory()


def get_adapter_factory() -> AdapterFactory:
    """Get the global adapter factory instance."""
    return adapter_factory
