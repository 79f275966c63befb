"""Exceptions raised while talking to Confluence.

``SyncError`` is the root of every error this package raises, including the
local tree, remote tree and publisher errors defined elsewhere, so callers
such as the CLI can catch one type. HTTP failures are translated into the
``ConfluenceError`` subclasses below by ``APIWrapper``.
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for all confluence-publish errors."""
    pass


class ConfluenceError(SyncError):
    """A request to the Confluence content API failed."""
    pass


class InvalidCredentialsError(ConfluenceError):
    """Raised on 401, or when user name or API token are missing."""

    def __init__(self, user: str, endpoint: str):
        super().__init__(f"Confluence rejected the credentials of {user} at {endpoint}")
        self.user = user
        self.endpoint = endpoint


class PageNotFoundError(ConfluenceError):
    """Raised on 404 for a content id.

    The reconciler treats this as a stale id and falls back to a title search.
    """

    def __init__(self, page_id: str):
        super().__init__(f"Content {page_id} does not exist or is not visible")
        self.page_id = page_id


class VersionConflictError(ConfluenceError):
    """Raised on 409 when the version sent is not current + 1."""

    def __init__(self, page_id: str, version: Optional[int] = None):
        message = f"Confluence refused the update of page {page_id}"
        if version is not None:
            message += f" at version {version}"
        super().__init__(message + "; someone else published in between")
        self.page_id = page_id
        self.version = version


class RateLimitError(ConfluenceError):
    """Raised on 429. Retried with jitter by ``retry_on_rate_limit``."""

    def __init__(self, operation: str):
        super().__init__(f"Too many requests to Confluence during {operation}")
        self.operation = operation


class APIUnreachableError(ConfluenceError):
    """Raised on timeouts and connection failures."""

    def __init__(self, endpoint: str):
        super().__init__(f"Cannot reach Confluence at {endpoint}")
        self.endpoint = endpoint


class APIAccessError(ConfluenceError):
    """Raised for any other API failure, and when retries are exhausted."""
    pass


class ConversionError(ConfluenceError):
    """Raised when a page body cannot be converted or rendered."""
    pass
