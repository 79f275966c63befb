"""Content pipeline: attachment-producing ADF plugins."""

from .attachments import (
    CurrentAttachment,
    CurrentAttachments,
    PageAttachmentFunctions,
    current_attachments,
    file_hash,
)
from .image_plugin import ImageUploaderPlugin
from .mermaid_plugin import MermaidRendererPlugin, mermaid_file_name
from .mermaid_renderer import ChartData, MermaidCliRenderer, MermaidRenderer
from .types import (
    ADFProcessingPlugin,
    PublisherFunctions,
    UploadedImageData,
    execute_pipeline,
)

# Plugins every publish runs, after any optional ones
ALWAYS_PLUGINS = [ImageUploaderPlugin()]

__all__ = [
    "ALWAYS_PLUGINS",
    "CurrentAttachment",
    "CurrentAttachments",
    "PageAttachmentFunctions",
    "current_attachments",
    "file_hash",
    "ImageUploaderPlugin",
    "MermaidRendererPlugin",
    "mermaid_file_name",
    "ChartData",
    "MermaidCliRenderer",
    "MermaidRenderer",
    "ADFProcessingPlugin",
    "PublisherFunctions",
    "UploadedImageData",
    "execute_pipeline",
]
