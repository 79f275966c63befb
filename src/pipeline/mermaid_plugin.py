"""Rendering of ``mermaid`` code blocks to attached PNG images."""

import hashlib
import logging
from typing import Dict, List, NamedTuple, Optional

from src.adf.adf_models import AdfDict, AdfNodeType, get_text_content, media_single
from src.adf.traverse import find_nodes, traverse

from .mermaid_renderer import ChartData, MermaidRenderer
from .types import ADFProcessingPlugin, PublisherFunctions, UploadedImageData

logger = logging.getLogger(__name__)

MERMAID_LANGUAGE = "mermaid"


class MermaidChart(NamedTuple):
    upload_file_name: str
    mermaid_text: str


def mermaid_file_name(mermaid_text: Optional[str]) -> MermaidChart:
    """Name the attachment of a chart after the digest of its source.

    Example:
        >>> mermaid_file_name("graph TD; A-->B").upload_file_name
        'RenderedMermaidChart-....png'
    """
    source = mermaid_text or ""
    digest = hashlib.md5(source.encode("utf-8")).hexdigest()
    return MermaidChart(f"RenderedMermaidChart-{digest}.png", source)


def _is_mermaid(node: AdfDict) -> bool:
    return (node.get("attrs") or {}).get("language") == MERMAID_LANGUAGE


class MermaidRendererPlugin(ADFProcessingPlugin):
    """Replaces mermaid code blocks by images rendered with a MermaidRenderer.

    Charts that fail to upload stay code blocks.
    """

    def __init__(self, renderer: MermaidRenderer):
        self.renderer = renderer

    def extract(self, adf: AdfDict, functions: PublisherFunctions) -> List[ChartData]:
        charts: Dict[str, ChartData] = {}
        for node in find_nodes(adf, AdfNodeType.CODE_BLOCK.value):
            if not _is_mermaid(node):
                continue
            chart = mermaid_file_name(get_text_content(node))
            charts.setdefault(chart.upload_file_name, ChartData(chart.upload_file_name, chart.mermaid_text))
        return list(charts.values())

    def transform(
        self,
        items: List[ChartData],
        functions: PublisherFunctions
    ) -> Dict[str, Optional[UploadedImageData]]:
        if not items:
            return {}
        rendered = self.renderer.capture_mermaid_charts(items)
        uploaded: Dict[str, Optional[UploadedImageData]] = {}
        for chart in items:
            data = rendered.get(chart.name)
            if data is None:
                logger.warning(f"Mermaid chart {chart.name} was not rendered")
                uploaded[chart.name] = None
                continue
            uploaded[chart.name] = functions.upload_buffer(chart.name, data)
        return uploaded

    def load(
        self,
        adf: AdfDict,
        uploaded: Dict[str, Optional[UploadedImageData]],
        functions: PublisherFunctions
    ) -> AdfDict:
        def on_code_block(node, parent):
            if not _is_mermaid(node):
                return None
            name = mermaid_file_name(get_text_content(node)).upload_file_name
            image = uploaded.get(name)
            if image is None:
                return None
            return media_single({
                "type": AdfNodeType.MEDIA.value,
                "attrs": {"type": "file", "id": image.id, "collection": image.collection},
            })

        return traverse(adf, {AdfNodeType.CODE_BLOCK.value: on_code_block})
