"""Node vocabulary and builders for ADF (Atlassian Document Format).

ADF documents are exchanged with Confluence as JSON, so the transcoder works
on plain dictionaries. This module names the node types it produces and
offers small builders that keep the dictionaries in the shape Confluence
expects (no empty ``marks``, ``attrs`` only where the schema needs them).
"""

from enum import Enum
from typing import Any, Dict, List, Optional


AdfDict = Dict[str, Any]


class AdfNodeType(Enum):
    """Types of ADF nodes."""

    # Document root
    DOC = "doc"

    # Block nodes
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    LIST_ITEM = "listItem"
    TABLE = "table"
    TABLE_ROW = "tableRow"
    TABLE_HEADER = "tableHeader"
    TABLE_CELL = "tableCell"
    CODE_BLOCK = "codeBlock"
    BLOCKQUOTE = "blockquote"
    RULE = "rule"
    MEDIA_SINGLE = "mediaSingle"
    MEDIA = "media"
    PANEL = "panel"
    EXPAND = "expand"

    # Inline nodes
    TEXT = "text"
    HARD_BREAK = "hardBreak"
    MENTION = "mention"
    EMOJI = "emoji"
    INLINE_CARD = "inlineCard"
    STATUS = "status"
    DATE = "date"

    # Extensions (macros)
    EXTENSION = "extension"
    INLINE_EXTENSION = "inlineExtension"
    BODIED_EXTENSION = "bodiedExtension"

    # Other
    UNKNOWN = "unknown"


def node_type(node: AdfDict) -> AdfNodeType:
    """Get the AdfNodeType of a node dict, UNKNOWN for anything unrecognized."""
    try:
        return AdfNodeType(node.get("type"))
    except ValueError:
        return AdfNodeType.UNKNOWN


def doc(content: Optional[List[AdfDict]] = None) -> AdfDict:
    return {"type": AdfNodeType.DOC.value, "version": 1, "content": content or []}


def paragraph(content: Optional[List[AdfDict]] = None) -> AdfDict:
    return {"type": AdfNodeType.PARAGRAPH.value, "content": content or []}


def text(value: str, marks: Optional[List[AdfDict]] = None) -> AdfDict:
    node: AdfDict = {"type": AdfNodeType.TEXT.value, "text": value}
    if marks:
        node["marks"] = [dict(mark) for mark in marks]
    return node


def heading(level: int, content: Optional[List[AdfDict]] = None) -> AdfDict:
    return {
        "type": AdfNodeType.HEADING.value,
        "attrs": {"level": level},
        "content": content or [],
    }


def code_block(value: str, language: Optional[str] = None) -> AdfDict:
    node: AdfDict = {"type": AdfNodeType.CODE_BLOCK.value, "attrs": {}}
    if language:
        node["attrs"]["language"] = language
    if value:
        node["content"] = [text(value)]
    return node


def media_single(media: AdfDict, layout: str = "center") -> AdfDict:
    return {
        "type": AdfNodeType.MEDIA_SINGLE.value,
        "attrs": {"layout": layout},
        "content": [media],
    }


def table_cell(cell_type: str, content: List[AdfDict]) -> AdfDict:
    return {"type": cell_type, "attrs": {}, "content": content}


def get_text_content(node: AdfDict) -> str:
    """Extract all text content from a node and its children.

    Block-level children are joined with a space so that words from
    adjacent paragraphs or list items do not run together.

    Returns:
        Concatenated text from all text nodes in the subtree.
    """
    if node.get("type") == AdfNodeType.TEXT.value:
        return node.get("text", "")

    children = node.get("content") or []
    texts = [get_text_content(child) for child in children]
    texts = [t for t in texts if t]
    if children and children[0].get("type") != AdfNodeType.TEXT.value:
        return " ".join(texts)
    return "".join(texts)
