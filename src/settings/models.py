"""Data models for publisher settings."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """Run-wide settings, read-only once loaded.

    Attributes:
        confluence_base_url: Site URL, e.g. https://example.atlassian.net
        confluence_parent_id: Id of the page every published page hangs under
        atlassian_user_name: User email for basic auth
        atlassian_api_token: API token for basic auth
        folder_to_publish: Folder (relative to content_root) whose files
            publish unless they opt out
        content_root: Directory that holds the markdown tree
        first_heading_page_title: Use the first heading as the page title
            when no title is set in front-matter
        default_space_key: Space used for cross-reference URLs when a
            document has no recorded space
        max_workers: Size of the thread pools used for fan-out
    """
    confluence_base_url: str
    confluence_parent_id: str
    atlassian_user_name: str
    atlassian_api_token: str
    folder_to_publish: str = "."
    content_root: str = "."
    first_heading_page_title: bool = False
    default_space_key: Optional[str] = None
    max_workers: int = 4
