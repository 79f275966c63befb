"""Per-page configuration read from frontmatter.

Recognized keys (reads accept every alias, writes use the first one):

    connie-publish                  bool, publish this file
    connie-title / title            page title
    connie-page-id / pageId         known Confluence content id
    spaceKey                        space recorded by a pull
    tags                            labels, no whitespace allowed
    connie-content-type             "page" (default) or "blogpost"
    connie-blog-post-date           YYYY-MM-DD
    connie-dont-change-parent-page  bool, leave the remote parent alone
    connie-frontmatter-to-publish   keys rendered as a table on the page
"""

import copy
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from src.adf import get_text_content, markdown_to_adf
from src.adf.markdown_to_adf import LinkResolver
from src.settings.models import Settings

from .errors import FrontmatterError
from .models import ContentKind, LocalDocument, MarkdownFile

logger = logging.getLogger(__name__)

PUBLISH_KEYS = ("connie-publish",)
TITLE_KEYS = ("connie-title", "title")
PAGE_ID_KEYS = ("connie-page-id", "pageId")
SPACE_KEY_KEYS = ("spaceKey",)
TAGS_KEYS = ("tags",)
CONTENT_TYPE_KEYS = ("connie-content-type",)
BLOG_POST_DATE_KEYS = ("connie-blog-post-date",)
DONT_CHANGE_PARENT_KEYS = ("connie-dont-change-parent-page",)
FRONTMATTER_TO_PUBLISH_KEYS = ("connie-frontmatter-to-publish",)

# Field names accepted by FileSystemAdaptor.update_markdown_values
WRITE_KEYS = {
    "publish": PUBLISH_KEYS,
    "pageId": PAGE_ID_KEYS,
    "spaceKey": SPACE_KEY_KEYS,
    "title": TITLE_KEYS,
}

_TAG_PATTERN = re.compile(r'^\S+$')


@dataclass(frozen=True)
class PageValues:
    """Validated per-page settings of one markdown file."""
    publish: Optional[bool]
    page_title: str
    tags: Tuple[str, ...]
    page_id: Optional[str]
    space_key: Optional[str]
    content_type: ContentKind
    blog_post_date: Optional[str]
    dont_change_parent_page: bool
    frontmatter_to_publish: Tuple[str, ...]


def _lookup(frontmatter: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        if key in frontmatter and frontmatter[key] is not None:
            return frontmatter[key]
    return None


def _as_bool(file_path: str, key: str, value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    raise FrontmatterError(file_path, f"'{key}' must be true or false, got {value!r}")


def _as_text_list(file_path: str, key: str, value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, (str, int)) for item in value):
        raise FrontmatterError(file_path, f"'{key}' must be a list of text values")
    return tuple(str(item) for item in value)


def publish_flag(file_path: str, frontmatter: Dict[str, Any]) -> Optional[bool]:
    """Return the explicit publish flag of a file, None when unset."""
    return _as_bool(file_path, PUBLISH_KEYS[0], _lookup(frontmatter, PUBLISH_KEYS))


def read_page_values(markdown_file: MarkdownFile) -> PageValues:
    """Validate the per-page frontmatter of a markdown file.

    Raises:
        FrontmatterError: If any recognized key has an invalid value
    """
    path = markdown_file.absolute_file_path
    frontmatter = markdown_file.frontmatter

    title = _lookup(frontmatter, TITLE_KEYS)
    if title is not None and (not isinstance(title, (str, int, float)) or not str(title).strip()):
        raise FrontmatterError(path, "'connie-title' must be non-empty text")

    tags = _as_text_list(path, TAGS_KEYS[0], _lookup(frontmatter, TAGS_KEYS))
    for tag in tags:
        if not _TAG_PATTERN.match(tag):
            raise FrontmatterError(path, f"Tag {tag!r} must be non-empty and contain no whitespace")

    page_id = _lookup(frontmatter, PAGE_ID_KEYS)
    if page_id is not None:
        page_id = str(page_id).strip()
        if page_id and not page_id.isdigit():
            raise FrontmatterError(path, f"'connie-page-id' must be numeric, got {page_id!r}")
        page_id = page_id or None

    space_key = _lookup(frontmatter, SPACE_KEY_KEYS)
    if space_key is not None:
        space_key = str(space_key).strip() or None

    raw_type = _lookup(frontmatter, CONTENT_TYPE_KEYS) or ContentKind.PAGE.value
    try:
        content_type = ContentKind(raw_type)
    except ValueError:
        raise FrontmatterError(
            path, f"'connie-content-type' must be 'page' or 'blogpost', got {raw_type!r}"
        )

    blog_post_date = _lookup(frontmatter, BLOG_POST_DATE_KEYS)
    if blog_post_date is not None:
        blog_post_date = str(blog_post_date)
        try:
            datetime.strptime(blog_post_date, "%Y-%m-%d")
        except ValueError:
            raise FrontmatterError(
                path, f"'connie-blog-post-date' must be YYYY-MM-DD, got {blog_post_date!r}"
            )

    dont_change_parent = _as_bool(
        path, DONT_CHANGE_PARENT_KEYS[0], _lookup(frontmatter, DONT_CHANGE_PARENT_KEYS)
    )

    return PageValues(
        publish=publish_flag(path, frontmatter),
        page_title=str(title).strip() if title is not None else markdown_file.page_title,
        tags=tags,
        page_id=page_id,
        space_key=space_key,
        content_type=content_type,
        blog_post_date=blog_post_date,
        dont_change_parent_page=bool(dont_change_parent),
        frontmatter_to_publish=_as_text_list(
            path, FRONTMATTER_TO_PUBLISH_KEYS[0], _lookup(frontmatter, FRONTMATTER_TO_PUBLISH_KEYS)
        ),
    )


def frontmatter_expand(frontmatter: Dict[str, Any], keys: Tuple[str, ...]) -> Optional[Dict[str, Any]]:
    """Render selected frontmatter values as a two-column table in an expand node."""
    rows: List[Dict[str, Any]] = []
    for key in keys:
        if key not in frontmatter:
            continue
        value = frontmatter[key]
        if isinstance(value, list):
            value = ", ".join(str(item) for item in value)
        rows.append({
            "type": "tableRow",
            "content": [
                _cell("tableHeader", str(key)),
                _cell("tableCell", "" if value is None else str(value)),
            ],
        })
    if not rows:
        return None
    return {
        "type": "expand",
        "attrs": {"title": "Properties"},
        "content": [{"type": "table", "attrs": {"layout": "default"}, "content": rows}],
    }


def _cell(cell_type: str, value: str) -> Dict[str, Any]:
    content = [{"type": "text", "text": value}] if value else []
    return {
        "type": cell_type,
        "attrs": {"colspan": 1, "rowspan": 1, "colwidth": [340]},
        "content": [{"type": "paragraph", "content": content}],
    }


def _take_first_heading(adf: Dict[str, Any]) -> Tuple[Optional[str], Dict[str, Any]]:
    content = adf.get("content") or []
    for index, node in enumerate(content):
        if node.get("type") == "heading":
            title = get_text_content(node).strip()
            if not title:
                return None, adf
            trimmed = copy.deepcopy(adf)
            del trimmed["content"][index]
            return title, trimmed
    return None, adf


def to_local_document(
    markdown_file: MarkdownFile,
    settings: Settings,
    cross_references: Optional[LinkResolver] = None
) -> LocalDocument:
    """Transcode a markdown file and apply its per-page configuration.

    Args:
        markdown_file: File loaded by the FileSystemAdaptor
        settings: Run settings (base URL, first-heading title option)
        cross_references: Resolver for links to other local documents

    Returns:
        LocalDocument ready for tree building

    Raises:
        FrontmatterError: If the frontmatter is invalid
    """
    values = read_page_values(markdown_file)
    adf = markdown_to_adf(markdown_file.contents, settings.confluence_base_url, cross_references)

    title = values.page_title
    has_explicit_title = _lookup(markdown_file.frontmatter, TITLE_KEYS) is not None
    if settings.first_heading_page_title and not has_explicit_title:
        heading_title, trimmed = _take_first_heading(adf)
        if heading_title:
            logger.debug(f"Using first heading as title of {markdown_file.file_name}: {heading_title}")
            title, adf = heading_title, trimmed

    expand = frontmatter_expand(markdown_file.frontmatter, values.frontmatter_to_publish)
    if expand is not None:
        adf["content"].insert(0, expand)

    return LocalDocument(
        absolute_path=markdown_file.absolute_file_path,
        file_name=markdown_file.file_name,
        folder_name=markdown_file.folder_name,
        transcoded_content=adf,
        title=title,
        tags=values.tags,
        remote_id=values.page_id,
        content_kind=values.content_type,
        retain_parent=values.dont_change_parent_page,
        post_date=values.blog_post_date,
        space_key=values.space_key,
    )


def default_page_title(absolute_file_path: str) -> str:
    """Title used when frontmatter has none: the file stem, or the folder name for index files."""
    stem = os.path.splitext(os.path.basename(absolute_file_path))[0]
    if stem.lower() in ("index", "readme"):
        folder = os.path.basename(os.path.dirname(absolute_file_path))
        return folder or stem
    return stem
