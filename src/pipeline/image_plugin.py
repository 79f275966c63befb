"""Upload of local images referenced from markdown.

The transcoder emits a ``media`` node with an empty id and a ``__fileName``
attribute for every local image. This plugin uploads each referenced file
once and fills in the attachment id and collection. An image that cannot be
found or uploaded is replaced by a paragraph holding its alt text.
"""

import logging
from typing import Dict, List, Optional

from src.adf.adf_models import AdfDict, AdfNodeType, paragraph, text
from src.adf.traverse import find_nodes, traverse

from .types import ADFProcessingPlugin, PublisherFunctions, UploadedImageData

logger = logging.getLogger(__name__)

FILE_NAME_ATTR = "__fileName"


def _file_name(media: AdfDict) -> Optional[str]:
    attrs = media.get("attrs") or {}
    if attrs.get("type") != "file":
        return None
    return attrs.get(FILE_NAME_ATTR) or None


class ImageUploaderPlugin(ADFProcessingPlugin):
    """Uploads local images and points their media nodes at the attachments."""

    def extract(self, adf: AdfDict, functions: PublisherFunctions) -> List[str]:
        names: List[str] = []
        for media in find_nodes(adf, AdfNodeType.MEDIA.value):
            name = _file_name(media)
            if name and name not in names:
                names.append(name)
        return names

    def transform(
        self,
        items: List[str],
        functions: PublisherFunctions
    ) -> Dict[str, Optional[UploadedImageData]]:
        return {name: functions.upload_file(name) for name in items}

    def load(
        self,
        adf: AdfDict,
        uploaded: Dict[str, Optional[UploadedImageData]],
        functions: PublisherFunctions
    ) -> AdfDict:
        def on_media_single(node, parent):
            media = next(
                (c for c in node.get("content") or [] if c.get("type") == AdfNodeType.MEDIA.value),
                None
            )
            if media is None:
                return None
            name = _file_name(media)
            if name is None:
                return None

            attrs = media["attrs"]
            image = uploaded.get(name)
            if image is None:
                logger.warning(f"Image {name} could not be uploaded, keeping its alt text")
                return paragraph([text(attrs.get("alt") or name)])

            attrs["id"] = image.id
            attrs["collection"] = image.collection
            del attrs[FILE_NAME_ATTR]
            return None

        return traverse(adf, {AdfNodeType.MEDIA_SINGLE.value: on_media_single})
