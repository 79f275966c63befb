"""Pulling Confluence pages down to markdown files.

Pulled files land below the adaptor's content root. In a page tree, every
page is placed in the folders named after its pulled ancestors, and a page
with children becomes ``<title>/index.md`` so that publishing the folder
rebuilds the same hierarchy.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from src.adf.adf_to_markdown import adf_to_markdown
from src.confluence_client.api_wrapper import APIWrapper
from src.local_tree.filesystem_adaptor import FileSystemAdaptor

from .content_fetcher import DEFAULT_MAX_DEPTH, ContentFetcher

logger = logging.getLogger(__name__)

INDEX_FILE_NAME = "index.md"


@dataclass(frozen=True)
class PullResult:
    """Outcome of pulling one page."""
    page_id: str
    page_title: str = ""
    file_path: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


def sanitize_file_name(name: str) -> str:
    """Turn a page title into a lower-case file or folder name.

    Example:
        >>> sanitize_file_name("Release Notes: 2024")
        'release_notes_2024'
    """
    cleaned = re.sub(r'[<>:"/\\|?*]', '_', name)
    cleaned = re.sub(r'\s+', '_', cleaned)
    cleaned = re.sub(r'_+', '_', cleaned).strip('_')
    return cleaned.lower() or "untitled"


def page_frontmatter(page: Dict[str, Any]) -> Dict[str, Any]:
    """Frontmatter that lets a later publish update the pulled page."""
    frontmatter: Dict[str, Any] = {
        "connie-page-id": str(page["id"]),
        "connie-publish": True,
        "title": page.get("title", ""),
    }
    space_key = (page.get("space") or {}).get("key")
    if space_key:
        frontmatter["spaceKey"] = space_key
    version = (page.get("version") or {}).get("number")
    if version is not None:
        frontmatter["version"] = version
    ancestors = page.get("ancestors") or []
    if ancestors:
        frontmatter["parentId"] = str(ancestors[-1]["id"])
    return frontmatter


def page_to_markdown(page: Dict[str, Any]) -> str:
    """Render a page body; a page without body becomes a title heading."""
    title = page.get("title", "")
    if not (page.get("body") or {}).get("atlas_doc_format", {}).get("value"):
        return f"# {title}\n"
    return adf_to_markdown(APIWrapper.parse_adf_body(page), title)


class Puller:
    """Writes Confluence pages as markdown files with publish frontmatter.

    Example:
        >>> puller = Puller(api, FileSystemAdaptor(settings))
        >>> results = puller.pull("123", include_children=True)
    """

    def __init__(self, api: APIWrapper, adaptor: FileSystemAdaptor):
        self.fetcher = ContentFetcher(api)
        self.adaptor = adaptor

    def pull(
        self,
        page_id: str,
        include_children: bool = False,
        max_depth: Optional[int] = None,
        overwrite: bool = False
    ) -> List[PullResult]:
        """Pull one page, or a page tree when children or a depth are asked for."""
        if include_children or max_depth is not None:
            return self.pull_page_tree(
                page_id,
                max_depth=DEFAULT_MAX_DEPTH if max_depth is None else max_depth,
                overwrite=overwrite,
            )
        return [self.pull_single_page(page_id, overwrite=overwrite)]

    def pull_single_page(self, page_id: str, overwrite: bool = False) -> PullResult:
        try:
            page = self.fetcher.fetch_page(page_id)
        except Exception as e:
            logger.error(f"Failed to fetch page {page_id}: {e}")
            return PullResult(page_id=page_id, error=str(e))
        return self._write_page(page, f"{sanitize_file_name(page.get('title', ''))}.md", overwrite)

    def pull_page_tree(
        self,
        root_id: str,
        max_depth: int = DEFAULT_MAX_DEPTH,
        overwrite: bool = False
    ) -> List[PullResult]:
        """Pull a page and its descendants down to max_depth.

        Returns:
            One PullResult per page, root first
        """
        try:
            if not self.fetcher.page_exists(root_id):
                return [PullResult(page_id=root_id, error="Root page not found or access denied")]
            pages = self.fetcher.fetch_page_tree(root_id, max_depth)
        except Exception as e:
            logger.error(f"Failed to fetch page tree {root_id}: {e}")
            return [PullResult(page_id=root_id, error=str(e))]

        titles = {str(page["id"]): page.get("title", "") for page in pages}
        with_children: Set[str] = set()
        for page in pages:
            ancestors = page.get("ancestors") or []
            if ancestors and str(page["id"]) != str(root_id):
                with_children.add(str(ancestors[-1]["id"]))

        results = []
        for page in pages:
            path = self._tree_path(page, titles, str(page["id"]) in with_children)
            results.append(self._write_page(page, path, overwrite))
        return results

    def _tree_path(self, page: Dict[str, Any], titles: Dict[str, str], has_children: bool) -> str:
        folders = [
            sanitize_file_name(titles[str(a["id"])])
            for a in page.get("ancestors") or []
            if str(a["id"]) in titles
        ]
        name = sanitize_file_name(page.get("title", ""))
        if has_children:
            return os.path.join(*folders, name, INDEX_FILE_NAME)
        return os.path.join(*folders, f"{name}.md")

    def _write_page(self, page: Dict[str, Any], relative_path: str, overwrite: bool) -> PullResult:
        page_id = str(page.get("id", ""))
        title = page.get("title", "")
        try:
            markdown = page_to_markdown(page)
            file_path = self.adaptor.write_markdown_file(
                relative_path, page_frontmatter(page), markdown, overwrite=overwrite
            )
        except Exception as e:
            logger.error(f"Failed to pull page {page_id} ({title}): {e}")
            return PullResult(page_id=page_id, page_title=title, error=str(e))

        logger.info(f"Pulled {title} to {file_path}")
        return PullResult(page_id=page_id, page_title=title, file_path=file_path)
