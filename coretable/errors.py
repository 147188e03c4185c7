"""Exceptions raised by the grid controller's collaborators."""

from typing import Optional


class ConfigurationError(ValueError):
    """Options or column definitions that cannot produce a working grid."""


class TransportError(Exception):
    """A request that did not yield a decoded response body."""

    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.url = url
