"""Resolution of wiki links once every page id is known."""

import logging
import os
from dataclasses import replace
from typing import Dict, List

from src.adf.markdown_to_adf import WIKILINK_PREFIX
from src.adf.traverse import traverse
from src.adf.url_utils import page_url
from src.settings.models import Settings

from .reconciler import ReconciledNode
from .models import RemoteNode

logger = logging.getLogger(__name__)


def prepare_adf_to_upload(nodes: List[ReconciledNode], settings: Settings) -> List[ReconciledNode]:
    """Rewrite ``wikilinks:`` hrefs to the URLs of the reconciled pages.

    A wiki link target matches a page by file stem or by title (both
    case-insensitive). Unmatched links become ``#``.

    Returns:
        The nodes, with new documents where a link was rewritten
    """
    urls: Dict[str, str] = {}
    for node in nodes:
        if not isinstance(node, RemoteNode):
            continue
        url = page_url(settings.confluence_base_url, node.remote_id, node.space_key)
        stem = os.path.splitext(node.document.file_name)[0]
        urls.setdefault(stem.lower(), url)
        urls.setdefault(node.document.title.lower(), url)

    def resolve(href: str) -> str:
        target = href[len(WIKILINK_PREFIX):]
        page, _, section = target.partition("#")
        url = urls.get(page.strip().lower())
        if url is None:
            logger.warning(f"Wiki link target not found: {page}")
            return "#"
        if section:
            return f"{url}#{section.strip().replace(' ', '-')}"
        return url

    def on_text(node, parent):
        for mark in node.get("marks") or []:
            href = (mark.get("attrs") or {}).get("href", "")
            if mark.get("type") == "link" and href.startswith(WIKILINK_PREFIX):
                mark["attrs"]["href"] = resolve(href)
        return None

    prepared: List[ReconciledNode] = []
    for node in nodes:
        if isinstance(node, RemoteNode):
            content = traverse(node.document.transcoded_content, {"text": on_text})
            node = replace(node, document=replace(node.document, transcoded_content=content))
        prepared.append(node)
    return prepared
