"""Data models for reconciled Confluence pages."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from src.local_tree.models import LocalDocument


@dataclass(frozen=True)
class ExistingPage:
    """Snapshot of a page as Confluence holds it before this run's update.

    Attributes:
        adf: Current body
        title: Current title
        ancestor_ids: Ids of every ancestor, from the space root down
        content_type: "page" or "blogpost"
    """
    adf: Dict[str, Any]
    title: str
    ancestor_ids: Tuple[str, ...]
    content_type: str

    @property
    def parent_id(self) -> Optional[str]:
        return self.ancestor_ids[-1] if self.ancestor_ids else None


@dataclass(frozen=True)
class RemoteNode:
    """A local document paired with the Confluence page it publishes to.

    Attributes:
        document: The document, carrying the resolved remote_id
        remote_id: Confluence content id
        space_key: Space holding the page
        version: Version number Confluence reported when resolving
        last_editor_id: Account id of the last editor
        existing: Remote snapshot used for diffing
        ancestor_chain: Ids from the configured parent page down to this
            node's parent
        declared_remote_id: Id declared in frontmatter and confirmed by a
            fetch; None for new, title-matched or stale-id documents
        created: The page was created during this run
    """
    document: LocalDocument
    remote_id: str
    space_key: str
    version: int
    last_editor_id: str
    existing: ExistingPage
    ancestor_chain: Tuple[str, ...] = ()
    declared_remote_id: Optional[str] = None
    created: bool = False

    @property
    def parent_id(self) -> Optional[str]:
        return self.ancestor_chain[-1] if self.ancestor_chain else None


@dataclass(frozen=True)
class UnresolvedNode:
    """A document that could not be mapped to a Confluence page."""
    document: LocalDocument
    error: Exception
    ancestor_chain: Tuple[str, ...] = ()
