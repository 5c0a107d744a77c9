"""Services module for review aggregation.

Services orchestrate the storefront adapters; they hold no state between
requests.
"""

from reviewhub.services.review_service import PlatformOutcome, ReviewService, ReviewStats

__all__ = [
    "PlatformOutcome",
    "ReviewService",
    "ReviewStats",
]
