"""Data models for publish results."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.local_tree.models import LocalDocument


class PublishStatus(Enum):
    """Terminal state of one document in a publish run."""
    CREATED = "created"
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    FAILED = "failed"


# Per-aspect outcomes of an update
SAME = "same"
UPDATED = "updated"


@dataclass(frozen=True)
class PublishResult:
    """Outcome of publishing one document.

    Attributes:
        document: The document that was published
        status: Terminal state
        page_id: Confluence id of the page, when one was resolved
        content_result: ``same`` or ``updated`` (body or page details)
        image_result: ``same`` or ``updated`` (attachments uploaded)
        label_result: ``same`` or ``updated`` (labels added or removed)
        reason: Error message of a failed document

    Example:
        >>> result = PublishResult(document, PublishStatus.UPDATED, "123", content_result="updated")
        >>> result.succeeded
        True
    """
    document: LocalDocument
    status: PublishStatus
    page_id: Optional[str] = None
    content_result: str = SAME
    image_result: str = SAME
    label_result: str = SAME
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status != PublishStatus.FAILED
