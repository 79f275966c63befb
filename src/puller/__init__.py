"""Pulling Confluence pages into local markdown files."""

from .content_fetcher import ContentFetcher
from .puller import PullResult, Puller, page_frontmatter, page_to_markdown, sanitize_file_name

__all__ = [
    "ContentFetcher",
    "PullResult",
    "Puller",
    "page_frontmatter",
    "page_to_markdown",
    "sanitize_file_name",
]
