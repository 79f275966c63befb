"""Local page tree construction.

Documents are grouped by directory relative to their common root. Every
directory becomes a node; a directory's page is the child document named
after the directory, else its ``index``/``README`` file, else a synthesized
placeholder that lists its children. Page titles must be unique across the
whole tree.
"""

import logging
import os
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .cross_reference import find_common_path
from .errors import DuplicatePageTitleError, EmptyDocumentSetError
from .models import ContentKind, LocalDocument, LocalNode

logger = logging.getLogger(__name__)

INDEX_NAMES = ("index", "readme")

# Body of a placeholder page: the Children Display macro
FOLDER_PLACEHOLDER_ADF = {
    "type": "doc",
    "version": 1,
    "content": [
        {
            "type": "extension",
            "attrs": {
                "layout": "default",
                "extensionType": "com.atlassian.confluence.macro.core",
                "extensionKey": "children",
                "parameters": {
                    "macroParams": {"all": {"value": "true"}},
                    "macroMetadata": {
                        "schemaVersion": {"value": "2"},
                        "title": "Children Display",
                    },
                },
            },
        }
    ],
}


def build_local_tree(
    documents: Sequence[LocalDocument],
    common_path: Optional[str] = None
) -> LocalNode:
    """Build the local page tree.

    Args:
        documents: Transcoded documents to place in the tree
        common_path: Root directory of the tree; defaults to the deepest
            directory shared by all documents. Pass the root computed from
            the unfiltered file set to keep the tree shape stable when
            publishing a subset.

    Returns:
        Root LocalNode; every node carries a document

    Raises:
        EmptyDocumentSetError: If no documents are given
        DuplicatePageTitleError: If two nodes share a title
    """
    if not documents:
        raise EmptyDocumentSetError()

    if len(documents) == 1 and common_path is None:
        document = documents[0]
        root = LocalNode(name=document.file_name, document=document)
        logger.debug(f"Single document tree rooted at {document.file_name}")
        return root

    if common_path is None:
        common_path = find_common_path(document.absolute_path for document in documents)

    root = LocalNode(name=os.path.basename(common_path) or common_path)
    for document in documents:
        relative = os.path.relpath(document.absolute_path, common_path)
        _add_document(root, document, relative.split(os.sep))

    _assign_folder_pages(root, common_path)
    ensure_unique_titles(root)
    return root


def _add_document(node: LocalNode, document: LocalDocument, segments: List[str]) -> None:
    head, rest = segments[0], segments[1:]
    if not rest:
        node.children.append(LocalNode(name=head, document=document))
        return

    child = next((c for c in node.children if c.name == head and c.document is None), None)
    if child is None:
        child = LocalNode(name=head)
        node.children.append(child)
    _add_document(child, document, rest)


def _stem(name: str) -> str:
    return os.path.splitext(name)[0]


def _find_folder_page(node: LocalNode) -> Optional[LocalNode]:
    candidates = [c for c in node.children if c.document is not None and not c.children]
    named_after_folder = next((c for c in candidates if _stem(c.name) == node.name), None)
    if named_after_folder is not None:
        return named_after_folder
    return next((c for c in candidates if _stem(c.name).lower() in INDEX_NAMES), None)


def folder_page_paths(paths: Iterable[str], selected: Iterable[str], common_path: str) -> Set[str]:
    """Files that act as the page of a folder above a selected file.

    Publishing a subset must still place each selected file under the same
    folder pages as a full publish, so those pages are kept in the tree.

    Args:
        paths: Every publishable file
        selected: Files chosen for this publish
        common_path: Root directory of the full tree

    Returns:
        Absolute paths of the folder pages, from the folder itself up to
        common_path
    """
    by_folder: Dict[str, List[str]] = {}
    for path in paths:
        by_folder.setdefault(os.path.dirname(path), []).append(path)

    root = os.path.normpath(common_path)
    pages: Set[str] = set()
    for path in selected:
        folder = os.path.dirname(path)
        while True:
            files = by_folder.get(folder, [])
            name = os.path.basename(folder)
            page = next((f for f in files if _stem(os.path.basename(f)) == name), None)
            if page is None:
                page = next((f for f in files if _stem(os.path.basename(f)).lower() in INDEX_NAMES), None)
            if page is not None:
                pages.add(page)
            if os.path.normpath(folder) == root or os.path.dirname(folder) == folder:
                break
            folder = os.path.dirname(folder)
    return pages


def _placeholder(name: str, folder_path: str) -> LocalDocument:
    return LocalDocument(
        absolute_path=folder_path,
        file_name=f"{name}.md",
        folder_name=name,
        transcoded_content=FOLDER_PLACEHOLDER_ADF,
        title=name,
        content_kind=ContentKind.PAGE,
        synthesized=True,
    )


def _assign_folder_pages(node: LocalNode, folder_path: str) -> None:
    if node.document is None:
        folder_page = _find_folder_page(node)
        if folder_page is not None:
            node.document = folder_page.document
            node.children = [c for c in node.children if c is not folder_page]
        else:
            logger.debug(f"Synthesizing placeholder page for folder {folder_path}")
            node.document = _placeholder(node.name, folder_path)

    for child in node.children:
        _assign_folder_pages(child, os.path.join(folder_path, child.name))


def collect_titles(root: LocalNode) -> List[str]:
    """Return the title of every node, pre-order."""
    return [node.document.title if node.document else "" for node in root.walk()]


def ensure_unique_titles(root: LocalNode) -> None:
    """Reject trees in which two pages share a title.

    Raises:
        DuplicatePageTitleError: Naming the first repeated title
    """
    seen = Counter()
    for title in collect_titles(root):
        seen[title] += 1
        if seen[title] > 1:
            raise DuplicatePageTitleError(title)
