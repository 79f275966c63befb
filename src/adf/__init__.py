"""Conversion between markdown and ADF (Atlassian Document Format)."""

from .adf_equal import adf_equal, order_marks
from .adf_models import AdfNodeType, get_text_content
from .adf_to_markdown import adf_to_markdown, remove_duplicate_title_headings
from .markdown_to_adf import (
    MENTION_PREFIX,
    WIKILINK_PREFIX,
    LinkResolver,
    markdown_to_adf,
    resolve_link_target,
)
from .traverse import ParentRef, find_nodes, traverse
from .url_utils import (
    clean_up_url_if_confluence,
    convert_relative_url_to_full,
    is_safe_url,
    page_url,
)

__all__ = [
    "adf_equal",
    "order_marks",
    "AdfNodeType",
    "get_text_content",
    "adf_to_markdown",
    "remove_duplicate_title_headings",
    "MENTION_PREFIX",
    "WIKILINK_PREFIX",
    "LinkResolver",
    "markdown_to_adf",
    "resolve_link_target",
    "ParentRef",
    "find_nodes",
    "traverse",
    "clean_up_url_if_confluence",
    "convert_relative_url_to_full",
    "is_safe_url",
    "page_url",
]
