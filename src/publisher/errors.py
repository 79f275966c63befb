"""Typed exception hierarchy for publish errors."""

from src.confluence_client.errors import SyncError


class PublishError(SyncError):
    """Base exception for failures while publishing one document."""
    pass


class PublishConflictError(PublishError):
    """Raised when someone else edited a page this run would overwrite."""

    def __init__(self, title: str, my_account_id: str, last_editor_id: str):
        super().__init__(
            f"Page '{title}' was last updated by another user. "
            f"Won't publish over their changes. "
            f"MyAccountId: {my_account_id}, Last Updated By: {last_editor_id}"
        )
        self.title = title
        self.my_account_id = my_account_id
        self.last_editor_id = last_editor_id


class ContentTypeChangeError(PublishError):
    """Raised when a document would turn a page into a blog post or back."""

    def __init__(self, title: str, from_type: str, to_type: str):
        super().__init__(
            f"Cannot convert '{title}' between content types. From {from_type} to {to_type}"
        )
        self.title = title
        self.from_type = from_type
        self.to_type = to_type
