"""Remote tree reconciliation.

Maps every node of the local tree to a Confluence page, creating missing
pages, and flattens the result pre-order. A document is resolved by its
frontmatter id first, then by title, and created as a blank page when
neither finds it. Pages found by id or title must live below the configured
root page so a stale id or a common title never overwrites unrelated
content.

The tree is walked level by level: all siblings of a level are resolved in
parallel, and a level starts only once every parent id is known.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple, Union

from src.confluence_client.api_wrapper import APIWrapper
from src.confluence_client.errors import PageNotFoundError, SyncError
from src.confluence_client.retry_logic import retry_on_rate_limit
from src.local_tree.filesystem_adaptor import FileSystemAdaptor
from src.local_tree.models import ContentKind, LocalDocument, LocalNode

from .errors import (
    AmbiguousPageError,
    MissingSpaceKeyError,
    OutsidePageTreeError,
    UnresolvedParentError,
)
from .models import ExistingPage, RemoteNode, UnresolvedNode

logger = logging.getLogger(__name__)

BLANK_PAGE_ADF = {
    "type": "doc",
    "version": 1,
    "content": [
        {"type": "paragraph", "content": [{"type": "text", "text": "Page not published yet"}]}
    ],
}

FETCH_EXPAND = ["version", "body.atlas_doc_format", "ancestors", "space"]
SEARCH_EXPAND = ["version", "body.atlas_doc_format", "ancestors"]

ReconciledNode = Union[RemoteNode, UnresolvedNode]


class RemoteTreeReconciler:
    """Resolves or creates the Confluence page of every local tree node.

    Example:
        >>> reconciler = RemoteTreeReconciler(api, adaptor, max_workers=4)
        >>> nodes = reconciler.ensure_remote_tree(root, "TEAM", "123", "123")
    """

    def __init__(self, api: APIWrapper, adaptor: FileSystemAdaptor, max_workers: int = 4):
        self._api = api
        self._adaptor = adaptor
        self._max_workers = max_workers

    def ensure_remote_tree(
        self,
        local_root: LocalNode,
        space_key: str,
        parent_id: str,
        root_id: str
    ) -> List[ReconciledNode]:
        """Resolve every node of the local tree.

        Args:
            local_root: Root of the local tree (every node has a document)
            space_key: Space to search and create pages in
            parent_id: Page the local root hangs under
            root_id: Page every resolved page must live below

        Returns:
            One entry per local node, pre-order. A node that failed, and every
            node below it, is an UnresolvedNode carrying the error.
        """
        resolved: Dict[int, ReconciledNode] = {}
        level: List[Tuple[LocalNode, Tuple[str, ...], Optional[ReconciledNode]]] = [
            (local_root, (parent_id,), None)
        ]

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            while level:
                futures = {}
                for node, chain, parent in level:
                    if isinstance(parent, UnresolvedNode):
                        resolved[id(node)] = UnresolvedNode(
                            document=node.document,
                            error=UnresolvedParentError(node.document.title, parent.document.title),
                            ancestor_chain=chain,
                        )
                        continue
                    future = executor.submit(
                        retry_on_rate_limit,
                        self.ensure_page_exists,
                        node.document,
                        space_key,
                        chain[-1],
                        root_id,
                        chain,
                    )
                    futures[future] = (node, chain)

                for future in as_completed(futures):
                    node, chain = futures[future]
                    try:
                        resolved[id(node)] = future.result()
                    except SyncError as e:
                        logger.error(f"Could not resolve {node.document.title}: {e}")
                        resolved[id(node)] = UnresolvedNode(
                            document=node.document, error=e, ancestor_chain=chain
                        )

                next_level = []
                for node, chain, _ in level:
                    outcome = resolved[id(node)]
                    child_chain = chain + (outcome.remote_id,) if isinstance(outcome, RemoteNode) else chain
                    next_level.extend((child, child_chain, outcome) for child in node.children)
                level = next_level

        return [resolved[id(node)] for node in local_root.walk()]

    def ensure_page_exists(
        self,
        document: LocalDocument,
        space_key: str,
        parent_id: str,
        root_id: str,
        ancestor_chain: Tuple[str, ...] = ()
    ) -> RemoteNode:
        """Resolve one document to a Confluence page, creating it if needed.

        Raises:
            OutsidePageTreeError: If the page found lives outside root_id
            AmbiguousPageError: If several pages carry the document's title
            MissingSpaceKeyError: If a fetched page has no space
        """
        if document.remote_id:
            try:
                content = self._api.get_content_by_id(document.remote_id, FETCH_EXPAND)
            except PageNotFoundError:
                logger.warning(
                    f"Page {document.remote_id} of {document.file_name} no longer exists, "
                    f"searching by title instead"
                )
                self._write_back(document, {"publish": False, "pageId": None})
                document = replace(document, remote_id=None)
            else:
                space = (content.get("space") or {}).get("key")
                if not space:
                    raise MissingSpaceKeyError(document.remote_id)
                if str(document.remote_id) != str(root_id):
                    self._check_in_tree(document, content, root_id)
                return self._resolved(
                    document, content, space, ancestor_chain, declared=True
                )

        matches = self._api.search_content(
            document.content_kind.value, space_key, document.title, SEARCH_EXPAND
        )
        if len(matches) > 1:
            raise AmbiguousPageError(document.title, [str(m["id"]) for m in matches])
        if matches:
            content = matches[0]
            self._check_in_tree(document, content, root_id)
            return self._resolved(document, content, space_key, ancestor_chain)

        logger.info(f"Creating page {document.title}")
        content = self._api.create_content(
            space_key,
            document.title,
            document.content_kind.value,
            BLANK_PAGE_ADF,
            parent_id if document.content_kind == ContentKind.PAGE else None,
        )
        content.setdefault("body", {})
        if not content["body"].get("atlas_doc_format"):
            content["body"]["atlas_doc_format"] = {"value": BLANK_PAGE_ADF}
        return self._resolved(document, content, space_key, ancestor_chain, created=True)

    def _check_in_tree(self, document: LocalDocument, content: Dict[str, Any], root_id: str) -> None:
        if document.content_kind != ContentKind.PAGE:
            return
        page_id = str(content["id"])
        ancestor_ids = [str(a["id"]) for a in content.get("ancestors") or []]
        if page_id != str(root_id) and str(root_id) not in ancestor_ids:
            raise OutsidePageTreeError(document.title, page_id, root_id)

    def _write_back(self, document: LocalDocument, values: Dict[str, Any]) -> None:
        if document.synthesized:
            return
        self._adaptor.update_markdown_values(document.absolute_path, values)

    def _resolved(
        self,
        document: LocalDocument,
        content: Dict[str, Any],
        space_key: str,
        ancestor_chain: Tuple[str, ...],
        declared: bool = False,
        created: bool = False
    ) -> RemoteNode:
        remote_id = str(content["id"])
        if document.remote_id != remote_id:
            self._write_back(document, {"publish": True, "pageId": remote_id})

        version = content.get("version") or {}
        existing = ExistingPage(
            adf=APIWrapper.parse_adf_body(content),
            title=content.get("title", document.title),
            ancestor_ids=tuple(str(a["id"]) for a in content.get("ancestors") or []),
            content_type=content.get("type", document.content_kind.value),
        )
        return RemoteNode(
            document=replace(document, remote_id=remote_id),
            remote_id=remote_id,
            space_key=space_key,
            version=int(version.get("number", 1)),
            last_editor_id=(version.get("by") or {}).get("accountId", ""),
            existing=existing,
            ancestor_chain=tuple(ancestor_chain),
            declared_remote_id=remote_id if declared else None,
            created=created,
        )
