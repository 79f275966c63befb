"""Exceptions raised while mapping local documents to Confluence pages.

These are tree-integrity errors: they fail the affected document and its
subtree, never the whole run.
"""

from typing import Optional

from src.confluence_client.errors import SyncError


class RemoteTreeError(SyncError):
    """Base exception for all remote tree errors."""
    pass


class OutsidePageTreeError(RemoteTreeError):
    """Raised when a resolved page does not live below the configured root page."""

    def __init__(self, title: str, page_id: str, root_id: str):
        super().__init__(
            f'"{title}" (page {page_id}) is outside the page tree of the '
            f'configured parent page {root_id}'
        )
        self.title = title
        self.page_id = page_id
        self.root_id = root_id


class AmbiguousPageError(RemoteTreeError):
    """Raised when a title search cannot identify exactly one page."""

    def __init__(self, title: str, page_ids, declared_id: Optional[str] = None):
        ids = ", ".join(page_ids)
        message = f'Several pages are titled "{title}" ({ids})'
        if declared_id:
            message += f"; frontmatter declares page {declared_id}"
        super().__init__(message)
        self.title = title
        self.page_ids = list(page_ids)
        self.declared_id = declared_id


class MissingSpaceKeyError(RemoteTreeError):
    """Raised when Confluence returns content without its space."""

    def __init__(self, page_id: str):
        super().__init__(f"Page {page_id} was returned without a space key")
        self.page_id = page_id


class UnresolvedParentError(RemoteTreeError):
    """Raised for documents whose parent page could not be resolved."""

    def __init__(self, title: str, parent_title: str):
        super().__init__(
            f'"{title}" was skipped because its parent page "{parent_title}" could not be resolved'
        )
        self.title = title
        self.parent_title = parent_title
