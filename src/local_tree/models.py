"""Data models for local documents and the local page tree.

All models use dataclasses. LocalDocument is frozen: the reconciler never
edits one in place, it builds a copy carrying the resolved remote id.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ContentKind(str, Enum):
    """Confluence content type a document is published as."""
    PAGE = "page"
    BLOGPOST = "blogpost"


@dataclass
class MarkdownFile:
    """A markdown file as read from disk.

    Attributes:
        folder_name: Name of the directory holding the file
        absolute_file_path: Absolute path of the file
        file_name: File name including the .md extension
        contents: Markdown body with the frontmatter removed
        page_title: Title from frontmatter, else derived from the file name
        frontmatter: Parsed YAML frontmatter (empty dict when absent)
    """
    folder_name: str
    absolute_file_path: str
    file_name: str
    contents: str
    page_title: str
    frontmatter: Dict[str, Any] = field(default_factory=dict)


@dataclass
class BinaryFile:
    """A binary file referenced from a markdown file (usually an image)."""
    filename: str
    file_path: str
    mime_type: str
    contents: bytes


@dataclass(frozen=True)
class LocalDocument:
    """One local content unit, already transcoded to ADF.

    Attributes:
        absolute_path: Absolute path of the source file
        file_name: File name including the .md extension
        folder_name: Name of the directory holding the file
        transcoded_content: ADF document of the body
        title: Page title (unique across the tree)
        tags: Labels to keep on the page
        remote_id: Previously known Confluence content id
        content_kind: Page or blog post
        retain_parent: Leave the remote parent alone on update
        post_date: Blog post date (YYYY-MM-DD)
        space_key: Space recorded by a previous pull
        synthesized: Placeholder for a directory without an index file
    """
    absolute_path: str
    file_name: str
    folder_name: str
    transcoded_content: Dict[str, Any]
    title: str
    tags: Tuple[str, ...] = ()
    remote_id: Optional[str] = None
    content_kind: ContentKind = ContentKind.PAGE
    retain_parent: bool = False
    post_date: Optional[str] = None
    space_key: Optional[str] = None
    synthesized: bool = False


@dataclass
class LocalNode:
    """A node in the local hierarchy.

    Attributes:
        name: Path segment, unique among siblings
        children: Child nodes
        document: Document published for this node; every node has one once
            the tree is built
    """
    name: str
    children: List['LocalNode'] = field(default_factory=list)
    document: Optional[LocalDocument] = None

    def walk(self):
        """Yield this node and every descendant, pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()
