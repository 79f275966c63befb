"""Confluence client library for the markdown publisher.

This package provides Python abstractions over the Confluence Cloud content
REST API, exchanging page bodies in atlas_doc_format (ADF).
"""

from .api_wrapper import APIWrapper
from .auth import Authenticator, Credentials
from .errors import (
    SyncError,
    ConfluenceError,
    InvalidCredentialsError,
    PageNotFoundError,
    VersionConflictError,
    RateLimitError,
    APIUnreachableError,
    APIAccessError,
    ConversionError,
)
from .retry_logic import retry_on_rate_limit, retry_on_transient_error

__all__ = [
    "APIWrapper",
    "Authenticator",
    "Credentials",
    "SyncError",
    "ConfluenceError",
    "InvalidCredentialsError",
    "PageNotFoundError",
    "VersionConflictError",
    "RateLimitError",
    "APIUnreachableError",
    "APIAccessError",
    "ConversionError",
    "retry_on_rate_limit",
    "retry_on_transient_error",
]
