"""Custom exception classes for the application."""


class ReviewHubException(Exception):
    """Base exception for all ReviewHub errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(ReviewHubException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} with identifier '{identifier}' not found")


class ScraperError(ReviewHubException):
    """Raised when a storefront adapter fails outside its fallback tiers."""

    def __init__(self, platform: str, message: str):
        self.platform = platform
        super().__init__(f"Failed to fetch {platform} data: {message}")
