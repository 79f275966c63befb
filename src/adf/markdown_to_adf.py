"""Markdown to ADF conversion.

Markdown is tokenized with markdown-it-py (CommonMark plus tables and
strikethrough) and the token stream is folded into an ADF document. A
second pass rewrites the tree into the shape Confluence accepts: link
targets are made safe, bare URLs become inline cards, tables and ordered
lists get the attributes the schema requires, code block languages are
mapped and ``adf`` code blocks are spliced in as raw ADF.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Protocol

from markdown_it import MarkdownIt
from markdown_it.token import Token

from .adf_models import (
    AdfDict,
    AdfNodeType,
    code_block,
    doc,
    heading,
    media_single,
    paragraph,
    table_cell,
)
from .code_languages import MARKDOWN_TO_CONFLUENCE_LANGUAGE
from .traverse import ParentRef, traverse
from .url_utils import clean_up_url_if_confluence, convert_relative_url_to_full, is_safe_url

logger = logging.getLogger(__name__)

WIKILINK_PREFIX = "wikilinks:"
MENTION_PREFIX = "mention:"

WIKILINK_PATTERN = re.compile(r'\[\[([^\[\]|#]+)(#[^\[\]|]*)?(?:\|([^\[\]]+))?\]\]')

CHECKLIST_GLYPHS = (
    (re.compile(r'^\[[xX]\]'), "✅"),
    (re.compile(r'^\[ \]'), "\U0001F532"),
    (re.compile(r'^\[\*\]'), "⭐️"),
)

TABLE_CELL_ATTRS = {"colspan": 1, "rowspan": 1, "colwidth": [340]}

_MARK_TOKENS = {
    "strong": "strong",
    "em": "em",
    "s": "strike",
}

_parser = MarkdownIt("commonmark").enable(["table", "strikethrough"])


class LinkResolver(Protocol):
    """Resolves a link target that names another local document."""

    def resolve(self, target: str) -> Optional[str]:
        ...


def markdown_to_adf(
    markdown: str,
    base_url: str,
    cross_references: Optional[LinkResolver] = None
) -> AdfDict:
    """Convert a markdown body (front-matter already removed) to ADF.

    Args:
        markdown: Markdown source
        base_url: Confluence site URL used to absolutize relative links
        cross_references: Optional resolver for links to other local documents

    Returns:
        ADF ``doc`` dictionary

    Example:
        >>> markdown_to_adf("# Hi", "https://example.atlassian.net")["content"][0]["type"]
        'heading'
    """
    builder = _TokenFolder()
    raw = builder.fold(_parser.parse(markdown))
    return _post_process(raw, base_url, cross_references)


class _TokenFolder:
    """Folds a flat markdown-it token stream into nested ADF nodes."""

    def __init__(self):
        self.root = doc()
        self.stack: List[AdfDict] = [self.root]
        self.pending_media: List[AdfDict] = []

    def fold(self, tokens: List[Token]) -> AdfDict:
        for token in tokens:
            handler = getattr(self, f"_on_{token.type}", None)
            if handler is None:
                logger.debug(f"Skipping unsupported markdown token: {token.type}")
                continue
            handler(token)
        return self.root

    @property
    def top(self) -> AdfDict:
        return self.stack[-1]

    def _push(self, node: AdfDict) -> None:
        self.top.setdefault("content", []).append(node)
        self.stack.append(node)

    def _pop(self) -> AdfDict:
        return self.stack.pop()

    def _close_textblock(self) -> None:
        node = self._pop()
        container = self.top
        if not node.get("content") and self.pending_media and node["type"] == "paragraph":
            container["content"].remove(node)
        container.setdefault("content", []).extend(self.pending_media)
        self.pending_media = []

    # Block tokens

    def _on_heading_open(self, token: Token) -> None:
        self._push(heading(int(token.tag[1])))

    def _on_heading_close(self, token: Token) -> None:
        self._close_textblock()

    def _on_paragraph_open(self, token: Token) -> None:
        self._push(paragraph())

    def _on_paragraph_close(self, token: Token) -> None:
        self._close_textblock()

    def _on_bullet_list_open(self, token: Token) -> None:
        self._push({"type": AdfNodeType.BULLET_LIST.value, "content": []})

    def _on_bullet_list_close(self, token: Token) -> None:
        self._pop()

    def _on_ordered_list_open(self, token: Token) -> None:
        start = token.attrGet("start")
        self._push({
            "type": AdfNodeType.ORDERED_LIST.value,
            "attrs": {"order": int(start) if start else 1},
            "content": [],
        })

    def _on_ordered_list_close(self, token: Token) -> None:
        self._pop()

    def _on_list_item_open(self, token: Token) -> None:
        self._push({"type": AdfNodeType.LIST_ITEM.value, "content": []})

    def _on_list_item_close(self, token: Token) -> None:
        item = self._pop()
        if not item["content"]:
            item["content"].append(paragraph())

    def _on_blockquote_open(self, token: Token) -> None:
        self._push({"type": AdfNodeType.BLOCKQUOTE.value, "content": []})

    def _on_blockquote_close(self, token: Token) -> None:
        self._pop()

    def _on_fence(self, token: Token) -> None:
        info = token.info.strip().split()
        language = info[0] if info else None
        self.top.setdefault("content", []).append(
            code_block(token.content.rstrip("\n"), language)
        )

    def _on_code_block(self, token: Token) -> None:
        self.top.setdefault("content", []).append(code_block(token.content.rstrip("\n")))

    def _on_hr(self, token: Token) -> None:
        self.top.setdefault("content", []).append({"type": AdfNodeType.RULE.value})

    def _on_html_block(self, token: Token) -> None:
        literal = token.content.strip()
        if literal:
            self.top.setdefault("content", []).append(paragraph([_text(literal, [])]))

    def _on_table_open(self, token: Token) -> None:
        self._push({
            "type": AdfNodeType.TABLE.value,
            "attrs": {"isNumberColumnEnabled": False, "layout": "default"},
            "content": [],
        })

    def _on_table_close(self, token: Token) -> None:
        self._pop()

    def _on_tr_open(self, token: Token) -> None:
        self._push({"type": AdfNodeType.TABLE_ROW.value, "content": []})

    def _on_tr_close(self, token: Token) -> None:
        self._pop()

    def _on_th_open(self, token: Token) -> None:
        self._push(table_cell(AdfNodeType.TABLE_HEADER.value, []))
        self._push(paragraph())

    def _on_td_open(self, token: Token) -> None:
        self._push(table_cell(AdfNodeType.TABLE_CELL.value, []))
        self._push(paragraph())

    def _on_th_close(self, token: Token) -> None:
        self._close_cell()

    def _on_td_close(self, token: Token) -> None:
        self._close_cell()

    def _close_cell(self) -> None:
        self._close_textblock()
        cell = self._pop()
        if not cell["content"]:
            cell["content"].append(paragraph())

    # Inline tokens

    def _on_inline(self, token: Token) -> None:
        target = self.top.setdefault("content", [])
        marks: List[Dict[str, Any]] = []
        buffered = ""

        def flush() -> None:
            nonlocal buffered
            if buffered:
                _append_text_with_wikilinks(target, buffered, marks)
                buffered = ""

        for child in token.children or []:
            kind = child.type
            if kind == "text":
                buffered += child.content
                continue
            flush()
            if kind == "softbreak":
                _append_text(target, " ", marks)
            elif kind == "hardbreak":
                target.append({"type": AdfNodeType.HARD_BREAK.value})
            elif kind == "code_inline":
                _append_text(target, child.content, marks + [{"type": "code"}])
            elif kind == "html_inline":
                _append_text(target, child.content, marks)
            elif kind == "link_open":
                marks.append({"type": "link", "attrs": {"href": child.attrGet("href") or ""}})
            elif kind == "image":
                self.pending_media.append(_media_for_image(child))
            elif kind.endswith("_open") and kind[:-5] in _MARK_TOKENS:
                marks.append({"type": _MARK_TOKENS[kind[:-5]]})
            elif kind.endswith("_close"):
                mark_type = "link" if kind == "link_close" else _MARK_TOKENS.get(kind[:-6])
                _remove_last_mark(marks, mark_type)
            else:
                logger.debug(f"Skipping unsupported inline token: {kind}")
        flush()


def _text(value: str, marks: List[Dict[str, Any]]) -> AdfDict:
    node: AdfDict = {"type": AdfNodeType.TEXT.value, "text": value}
    if marks:
        node["marks"] = [json.loads(json.dumps(mark)) for mark in marks]
    return node


def _append_text(target: List[AdfDict], value: str, marks: List[Dict[str, Any]]) -> None:
    if not value:
        return
    if target:
        last = target[-1]
        if last.get("type") == AdfNodeType.TEXT.value and last.get("marks", []) == marks:
            last["text"] += value
            return
    target.append(_text(value, marks))


def _append_text_with_wikilinks(target: List[AdfDict], value: str, marks: List[Dict[str, Any]]) -> None:
    position = 0
    for match in WIKILINK_PATTERN.finditer(value):
        _append_text(target, value[position:match.start()], marks)
        page, section, alias = match.group(1).strip(), match.group(2) or "", match.group(3)
        link = {"type": "link", "attrs": {"href": f"{WIKILINK_PREFIX}{page}{section}"}}
        _append_text(target, (alias or page).strip(), marks + [link])
        position = match.end()
    _append_text(target, value[position:], marks)


def _remove_last_mark(marks: List[Dict[str, Any]], mark_type: Optional[str]) -> None:
    for index in range(len(marks) - 1, -1, -1):
        if marks[index]["type"] == mark_type:
            del marks[index]
            return


def _media_for_image(token: Token) -> AdfDict:
    src = token.attrGet("src") or ""
    alt = token.content or ""
    if re.match(r'^https?://', src, re.IGNORECASE):
        media = {"type": AdfNodeType.MEDIA.value, "attrs": {"type": "external", "url": src}}
    else:
        media = {
            "type": AdfNodeType.MEDIA.value,
            "attrs": {"type": "file", "id": "", "collection": "", "__fileName": src},
        }
    if alt:
        media["attrs"]["alt"] = alt
    return media_single(media)


def resolve_link_target(
    href: str,
    base_url: str,
    cross_references: Optional[LinkResolver] = None
) -> str:
    """Turn a markdown link target into one Confluence will accept.

    Safe targets pass through untouched. Empty or unsafe targets are
    resolved through the cross-reference map, then as relative URLs, and
    otherwise replaced with ``#``. Wiki links resolve through the
    cross-reference map when possible and otherwise stay as they are for
    the post-reconciliation pass.
    """
    if href.startswith(MENTION_PREFIX):
        return href

    if href.startswith(WIKILINK_PREFIX):
        if cross_references is not None:
            target = href[len(WIKILINK_PREFIX):]
            page, _, section = target.partition("#")
            resolved = cross_references.resolve(page)
            if resolved:
                return f"{resolved}#{section}" if section else resolved
        return href

    if href.strip() and is_safe_url(href):
        return href

    if cross_references is not None and href.strip():
        resolved = cross_references.resolve(href)
        if resolved:
            return resolved

    full_url = convert_relative_url_to_full(href, base_url)
    if full_url and full_url != href:
        return full_url
    return "#"


def _post_process(
    adf: AdfDict,
    base_url: str,
    cross_references: Optional[LinkResolver]
) -> AdfDict:

    def on_text(node: AdfDict, parent: ParentRef):
        grandparent = parent.parent.node if parent.parent else None
        if grandparent is not None and grandparent.get("type") == AdfNodeType.LIST_ITEM.value:
            for pattern, glyph in CHECKLIST_GLYPHS:
                node["text"] = pattern.sub(glyph, node["text"])

        marks = node.get("marks") or []
        link = next((mark for mark in marks if mark.get("type") == "link"), None)
        if link is None or "href" not in link.get("attrs", {}):
            return None

        href = resolve_link_target(link["attrs"]["href"], base_url, cross_references)
        link["attrs"]["href"] = href

        if href.startswith(MENTION_PREFIX):
            return {
                "type": AdfNodeType.MENTION.value,
                "attrs": {"id": href[len(MENTION_PREFIX):], "text": node["text"]},
            }

        if href == node["text"] and href != "#":
            cleaned = clean_up_url_if_confluence(href, base_url)
            if cleaned != "#":
                return {"type": AdfNodeType.INLINE_CARD.value, "attrs": {"url": cleaned}}
        return None

    def on_table(node: AdfDict, parent: ParentRef):
        attrs = node.get("attrs") or {}
        if attrs.get("isNumberColumnEnabled") is False:
            del attrs["isNumberColumnEnabled"]
        return None

    def on_cell(node: AdfDict, parent: ParentRef):
        node["attrs"] = dict(TABLE_CELL_ATTRS, colwidth=list(TABLE_CELL_ATTRS["colwidth"]))
        return None

    def on_ordered_list(node: AdfDict, parent: ParentRef):
        node["attrs"] = {"order": 1}
        return None

    def on_code_block(node: AdfDict, parent: ParentRef):
        attrs = node.get("attrs")
        if not attrs:
            node.pop("attrs", None)
            return None

        language = attrs.get("language")
        if language in MARKDOWN_TO_CONFLUENCE_LANGUAGE:
            attrs["language"] = MARKDOWN_TO_CONFLUENCE_LANGUAGE[language]

        if language == "adf":
            return _embedded_adf(node)
        return None

    return traverse(adf, {
        AdfNodeType.TEXT.value: on_text,
        AdfNodeType.TABLE.value: on_table,
        AdfNodeType.TABLE_HEADER.value: on_cell,
        AdfNodeType.TABLE_CELL.value: on_cell,
        AdfNodeType.ORDERED_LIST.value: on_ordered_list,
        AdfNodeType.CODE_BLOCK.value: on_code_block,
    })


def _embedded_adf(node: AdfDict):
    content = node.get("content") or []
    payload = content[0].get("text") if content else None
    if not payload:
        return None
    try:
        parsed = json.loads(payload)
    except ValueError:
        logger.debug("Leaving adf code block as-is: payload is not valid JSON")
        return None
    if isinstance(parsed, dict) and parsed.get("type") == AdfNodeType.DOC.value:
        return list(parsed.get("content") or [])
    if isinstance(parsed, dict) and isinstance(parsed.get("type"), str):
        return parsed
    if isinstance(parsed, list) and all(isinstance(item, dict) and "type" in item for item in parsed):
        return parsed
    logger.debug("Leaving adf code block as-is: payload is not an ADF node")
    return None
