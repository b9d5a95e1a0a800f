"""Error classification for the webhook pipeline."""

from __future__ import annotations


class WebhookError(Exception):
    """Base exception for failures after the signature gate."""

    def __init__(self, message: str, original_exception: Exception | None = None):
        super().__init__(message)
        self.original_exception = original_exception


class MalformedOrderError(WebhookError):
    """Body is not a JSON order object."""


class CollectorUnavailableError(WebhookError):
    """The GA4 collector could not be reached."""
