"""Read-only access to Confluence page trees."""

import logging
from collections import deque
from typing import Any, Dict, List, Optional

from src.confluence_client.api_wrapper import APIWrapper
from src.confluence_client.errors import PageNotFoundError

logger = logging.getLogger(__name__)

PAGE_EXPAND = ["body.atlas_doc_format", "version", "ancestors", "space"]
CHILD_EXPAND = ["version", "space"]
DEFAULT_MAX_DEPTH = 10


class ContentFetcher:
    """Fetches pages, their children and whole page trees.

    Transient failures are retried by the APIWrapper.

    Example:
        >>> fetcher = ContentFetcher(api)
        >>> pages = fetcher.fetch_page_tree("123", max_depth=2)
    """

    def __init__(self, api: APIWrapper):
        self.api = api

    def fetch_page(self, page_id: str, expand: Optional[List[str]] = None) -> Dict[str, Any]:
        """Fetch one page with body, version, ancestors and space."""
        return self.api.get_content_by_id(page_id, expand or PAGE_EXPAND)

    def fetch_children(self, page_id: str) -> List[Dict[str, Any]]:
        """Fetch every direct child page (without bodies)."""
        return self.api.get_child_pages(page_id, CHILD_EXPAND)

    def fetch_page_tree(self, root_id: str, max_depth: int = DEFAULT_MAX_DEPTH) -> List[Dict[str, Any]]:
        """Fetch a page and its descendants breadth-first.

        Args:
            root_id: Page to start from (depth 0)
            max_depth: Deepest level to fetch

        Returns:
            Full page dicts, root first, each page before its children
        """
        pages: List[Dict[str, Any]] = []
        visited = set()
        queue = deque([(str(root_id), 0)])

        while queue:
            page_id, depth = queue.popleft()
            if page_id in visited or depth > max_depth:
                continue
            visited.add(page_id)

            pages.append(self.fetch_page(page_id))
            if depth < max_depth:
                for child in self.fetch_children(page_id):
                    child_id = str(child["id"])
                    if child_id not in visited:
                        queue.append((child_id, depth + 1))

        logger.info(f"Fetched {len(pages)} pages below {root_id}")
        return pages

    def page_exists(self, page_id: str) -> bool:
        try:
            self.api.get_content_by_id(page_id, ["version"])
        except PageNotFoundError:
            return False
        return True
