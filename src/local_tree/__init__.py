"""Local markdown documents and the page tree built from them."""

from .cross_reference import CrossReference, CrossReferenceMap, find_common_path, normalize_reference
from .errors import (
    LocalTreeError,
    FilesystemError,
    FrontmatterError,
    DuplicatePageTitleError,
    EmptyDocumentSetError,
)
from .filesystem_adaptor import FileSystemAdaptor
from .frontmatter_handler import FrontmatterHandler
from .models import BinaryFile, ContentKind, LocalDocument, LocalNode, MarkdownFile
from .page_config import PageValues, read_page_values, to_local_document
from .tree_builder import build_local_tree, collect_titles, ensure_unique_titles, folder_page_paths

__all__ = [
    "CrossReference",
    "CrossReferenceMap",
    "find_common_path",
    "normalize_reference",
    "LocalTreeError",
    "FilesystemError",
    "FrontmatterError",
    "DuplicatePageTitleError",
    "EmptyDocumentSetError",
    "FileSystemAdaptor",
    "FrontmatterHandler",
    "BinaryFile",
    "ContentKind",
    "LocalDocument",
    "LocalNode",
    "MarkdownFile",
    "PageValues",
    "read_page_values",
    "to_local_document",
    "build_local_tree",
    "collect_titles",
    "ensure_unique_titles",
    "folder_page_paths",
]
