"""ADF to markdown conversion.

The ADF tree is rendered to simple HTML and handed to a markdownify
converter tuned for clean output (ATX headings, ``-`` bullets, pipe
tables, fenced code with the Confluence language). Headings that only
repeat the page title, or repeat the heading right before them, are
stripped afterwards.
"""

import html
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from markdownify import MarkdownConverter as BaseMarkdownConverter

from ..confluence_client.errors import ConversionError
from .adf_models import AdfDict, AdfNodeType, node_type

HEADING_PATTERN = re.compile(r'^(#{1,6})\s+(.*?)\s*#*\s*$')
FENCE_PATTERN = re.compile(r'^\s*(```|~~~)')


class _CustomMarkdownConverter(BaseMarkdownConverter):
    """Custom markdownify converter with Confluence-friendly settings."""

    def __init__(self, **options):
        options.setdefault('heading_style', 'atx')
        options.setdefault('bullets', '-')
        options.setdefault('strong_em_symbol', '*')
        options.setdefault('escape_misc', False)
        options.setdefault('code_language_callback', _code_language)
        super().__init__(**options)

    def _is_in_table_cell(self, parent_tags):
        return 'td' in parent_tags or 'th' in parent_tags

    def convert_p(self, el, text, parent_tags):
        """Convert paragraph, keeping paragraph breaks inside table cells."""
        text = text.strip()
        if not text:
            return ''

        if self._is_in_table_cell(parent_tags):
            return text + '\n'

        if '_inline' in parent_tags:
            return ' ' + text + ' '
        return '\n\n%s\n\n' % text

    def _convert_cell(self, el, text):
        colspan = 1
        if 'colspan' in el.attrs and el['colspan'].isdigit():
            colspan = max(1, min(1000, int(el['colspan'])))
        cell_text = text.strip().replace('\n', '<br>')
        while '<br><br>' in cell_text:
            cell_text = cell_text.replace('<br><br>', '<br>')
        while cell_text.endswith('<br>'):
            cell_text = cell_text.removesuffix('<br>')
        return ' ' + cell_text + ' |' * colspan

    def convert_td(self, el, text, parent_tags):
        return self._convert_cell(el, text)

    def convert_th(self, el, text, parent_tags):
        return self._convert_cell(el, text)

    def convert_br(self, el, text, parent_tags):
        """Convert <br> tags, preserving them in table cells."""
        if self._is_in_table_cell(parent_tags):
            return '<br>'
        if '_inline' in parent_tags:
            return ' '
        return '  \n'


def _code_language(el) -> Optional[str]:
    return el.get('data-language') or None


def adf_to_markdown(adf: AdfDict, title: Optional[str] = None) -> str:
    """Convert an ADF document to markdown.

    Args:
        adf: ADF ``doc`` dictionary
        title: Page title; headings equal to it are removed

    Returns:
        Markdown text ending with a single newline (empty for empty input)

    Raises:
        ConversionError: If the input is not an ADF document
    """
    if not isinstance(adf, dict) or adf.get("type") != AdfNodeType.DOC.value:
        raise ConversionError("Expected an ADF document with type 'doc'")

    markup = _CustomMarkdownConverter().convert(_render_children(adf))
    markup = re.sub(r'\n{3,}', '\n\n', markup).strip()
    if title is not None:
        markup = remove_duplicate_title_headings(markup, title)
    return markup + '\n' if markup else ''


def _normalize_heading(text: str) -> str:
    normalized = text.lower().replace('_', ' ')
    normalized = re.sub(r'[^a-z0-9\s]', '', normalized)
    return re.sub(r'\s+', ' ', normalized).strip()


def remove_duplicate_title_headings(markdown: str, title: str) -> str:
    """Drop headings that duplicate the page title or the previous heading.

    Headings are compared case-insensitively with punctuation removed and
    whitespace collapsed. A heading is a repeat of the previous one only
    when nothing but blank lines separates them and the level matches.
    Fenced code is left alone.
    """
    normalized_title = _normalize_heading(title)
    kept: List[str] = []
    previous_heading = None
    in_fence = False

    for line in markdown.split('\n'):
        if FENCE_PATTERN.match(line):
            in_fence = not in_fence
            previous_heading = None
            kept.append(line)
            continue

        match = None if in_fence else HEADING_PATTERN.match(line)
        if match:
            key = (len(match.group(1)), _normalize_heading(match.group(2)))
            if key[1] == normalized_title or key == previous_heading:
                continue
            previous_heading = key
        elif line.strip():
            previous_heading = None
        kept.append(line)

    result = '\n'.join(kept)
    return re.sub(r'\n{3,}', '\n\n', result).strip()


# ADF to HTML rendering

def _render_children(node: AdfDict) -> str:
    return ''.join(_render(child) for child in node.get("content") or [])


def _attrs(node: AdfDict) -> Dict[str, Any]:
    return node.get("attrs") or {}


def _render_text(node: AdfDict) -> str:
    rendered = html.escape(node.get("text", ""), quote=False)
    for mark in node.get("marks") or []:
        kind = mark.get("type")
        if kind == "strong":
            rendered = f"<strong>{rendered}</strong>"
        elif kind == "em":
            rendered = f"<em>{rendered}</em>"
        elif kind == "strike":
            rendered = f"<s>{rendered}</s>"
        elif kind == "code":
            rendered = f"<code>{rendered}</code>"
        elif kind == "link":
            href = html.escape(mark.get("attrs", {}).get("href", ""))
            rendered = f'<a href="{href}">{rendered}</a>'
        elif kind == "subsup":
            tag = "sub" if mark.get("attrs", {}).get("type") == "sub" else "sup"
            rendered = f"<{tag}>{rendered}</{tag}>"
    return rendered


def _render_list_item(node: AdfDict) -> str:
    children = node.get("content") or []
    if len(children) == 1 and children[0].get("type") == AdfNodeType.PARAGRAPH.value:
        return f"<li>{_render_children(children[0])}</li>"
    return f"<li>{_render_children(node)}</li>"


def _render_media(node: AdfDict) -> str:
    attrs = _attrs(node)
    alt = attrs.get("alt") or attrs.get("__fileName") or ""
    src = attrs.get("url") or attrs.get("__fileName") or ""
    return f'<p><img src="{html.escape(src)}" alt="{html.escape(alt)}"></p>'


def _render_date(node: AdfDict) -> str:
    timestamp = _attrs(node).get("timestamp")
    try:
        moment = datetime.fromtimestamp(int(timestamp) / 1000, tz=timezone.utc)
    except (TypeError, ValueError):
        return ''
    return moment.strftime('%Y-%m-%d')


def _render(node: AdfDict) -> str:
    kind = node_type(node)
    attrs = _attrs(node)

    if kind == AdfNodeType.TEXT:
        return _render_text(node)
    if kind == AdfNodeType.PARAGRAPH:
        return f"<p>{_render_children(node)}</p>"
    if kind == AdfNodeType.HEADING:
        level = min(max(int(attrs.get("level", 1)), 1), 6)
        return f"<h{level}>{_render_children(node)}</h{level}>"
    if kind == AdfNodeType.HARD_BREAK:
        return "<br>"
    if kind == AdfNodeType.BULLET_LIST:
        return f"<ul>{_render_children(node)}</ul>"
    if kind == AdfNodeType.ORDERED_LIST:
        return f'<ol start="{int(attrs.get("order", 1))}">{_render_children(node)}</ol>'
    if kind == AdfNodeType.LIST_ITEM:
        return _render_list_item(node)
    if kind == AdfNodeType.CODE_BLOCK:
        code = html.escape(''.join(child.get("text", "") for child in node.get("content") or []))
        language = html.escape(attrs.get("language") or "")
        return f'<pre data-language="{language}"><code>{code}</code></pre>'
    if kind in (AdfNodeType.BLOCKQUOTE, AdfNodeType.PANEL):
        return f"<blockquote>{_render_children(node)}</blockquote>"
    if kind == AdfNodeType.RULE:
        return "<hr>"
    if kind == AdfNodeType.TABLE:
        return f"<table>{_render_children(node)}</table>"
    if kind == AdfNodeType.TABLE_ROW:
        return f"<tr>{_render_children(node)}</tr>"
    if kind == AdfNodeType.TABLE_HEADER:
        return f"<th>{_render_children(node)}</th>"
    if kind == AdfNodeType.TABLE_CELL:
        return f"<td>{_render_children(node)}</td>"
    if kind == AdfNodeType.MEDIA_SINGLE:
        return _render_children(node)
    if kind == AdfNodeType.MEDIA:
        return _render_media(node)
    if kind == AdfNodeType.INLINE_CARD:
        url = html.escape(attrs.get("url", ""))
        return f'<a href="{url}">{url}</a>'
    if kind == AdfNodeType.MENTION:
        return html.escape(attrs.get("text") or f"@{attrs.get('id', '')}", quote=False)
    if kind == AdfNodeType.EMOJI:
        return html.escape(attrs.get("text") or attrs.get("shortName", ""), quote=False)
    if kind == AdfNodeType.STATUS:
        return html.escape(attrs.get("text", ""), quote=False)
    if kind == AdfNodeType.DATE:
        return _render_date(node)
    if kind == AdfNodeType.EXPAND:
        title = html.escape(attrs.get("title") or "", quote=False)
        heading = f"<p><strong>{title}</strong></p>" if title else ""
        return heading + _render_children(node)
    if kind in (AdfNodeType.EXTENSION, AdfNodeType.INLINE_EXTENSION):
        return ''
    return _render_children(node)
