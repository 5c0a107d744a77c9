"""Register all storefront adapters with the factory.

This module should be imported during application startup to register
all available adapters with the adapter factory.
"""

import structlog

from reviewhub.scrapers.factory import get_adapter_factory
from reviewhub.scrapers.adapters import AppStoreAdapter, GooglePlayAdapter

logger = structlog.get_logger(__name__)


def register_all_adapters() -> None:
    """Register all available adapters with the factory.

    Safe to call more than once; later calls overwrite the same slugs.
    """
    factory = get_adapter_factory()

    adapters = [
        ("android", GooglePlayAdapter),
        ("ios", AppStoreAdapter),
    ]

    for platform_slug, adapter_class in adapters:
        try:
            factory.register_adapter(platform_slug, adapter_class)
        except Exception as e:
            logger.error(
                "adapter_registration_failed",
                platform=platform_slug,
                error=str(e),
                exc_info=True,
            )

    logger.info("all_adapters_registered", platforms=factory.get_registered_platforms())
