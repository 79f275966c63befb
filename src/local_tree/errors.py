"""Typed exception hierarchy for local document and tree errors.

Everything here is a structural error: it is raised while the local tree
is loaded or built, before any network call is made.
"""

from typing import Optional

from src.confluence_client.errors import SyncError


class LocalTreeError(SyncError):
    """Base exception for all local tree errors."""
    pass


class FilesystemError(LocalTreeError):
    """Raised when filesystem operations fail (read, write, permissions, etc)."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class FrontmatterError(LocalTreeError):
    """Raised when YAML frontmatter parsing or validation fails."""

    def __init__(self, file_path: str, message: str):
        super().__init__(
            f"Frontmatter error in {file_path}: {message}"
        )
        self.file_path = file_path
        self.message = message


class DuplicatePageTitleError(LocalTreeError):
    """Raised when two documents in the tree resolve to the same page title."""

    def __init__(self, title: str):
        super().__init__(
            f'Page title "{title}" is not unique across all files.'
        )
        self.title = title


class EmptyDocumentSetError(LocalTreeError):
    """Raised when a tree is requested for zero documents."""

    def __init__(self):
        super().__init__("No documents to build a page tree from")
