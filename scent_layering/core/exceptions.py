"""Custom exception hierarchy for the layering toolkit."""

from __future__ import annotations


class ScentLayeringError(Exception):
    """Base error for the fragrance layering toolkit."""


class ConfigurationError(ScentLayeringError):
    """Raised when a required credential or setting is missing."""


class UpstreamError(ScentLayeringError):
    """Raised when a remote dependency fails or returns a malformed payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_server_error(self) -> bool:
        return self.status_code is not None and self.status_code >= 500


class NotFoundError(ScentLayeringError):
    """Raised when a search or lookup yields no usable match."""
