"""Content pipeline plugin contract.

A plugin works in three phases over one page's ADF:

1. ``extract`` collects the assets the page references (images, diagrams)
2. ``transform`` uploads them, once per plugin, and maps asset keys to
   upload results (None when an asset could not be uploaded)
3. ``load`` rewrites the ADF to point at the uploaded attachments

``execute_pipeline`` runs every plugin's extract phase first, then every
transform, then every load in registration order.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from src.adf.adf_models import AdfDict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedImageData:
    """An attachment the page body can reference.

    Attributes:
        filename: Attachment title on the page
        id: Media file id of the attachment
        collection: Media collection the file lives in
        status: ``existing`` when the same bytes were already attached,
            ``uploaded`` when this run uploaded them
    """
    filename: str
    id: str
    collection: str
    status: str


class PublisherFunctions(ABC):
    """Upload operations bound to one page, handed to every plugin."""

    @abstractmethod
    def upload_buffer(self, file_name: str, data: bytes) -> Optional[UploadedImageData]:
        """Attach in-memory bytes to the page under ``file_name``."""

    @abstractmethod
    def upload_file(self, path: str) -> Optional[UploadedImageData]:
        """Attach a file referenced from the page's markdown source."""


class ADFProcessingPlugin(ABC):
    """A three-phase content pipeline plugin."""

    @abstractmethod
    def extract(self, adf: AdfDict, functions: PublisherFunctions) -> Any:
        """Collect the assets this plugin handles."""

    @abstractmethod
    def transform(self, items: Any, functions: PublisherFunctions) -> Dict[str, Optional[UploadedImageData]]:
        """Upload the extracted assets."""

    @abstractmethod
    def load(
        self,
        adf: AdfDict,
        uploaded: Dict[str, Optional[UploadedImageData]],
        functions: PublisherFunctions
    ) -> AdfDict:
        """Return the ADF rewritten to reference the uploaded assets."""


def execute_pipeline(
    plugins: List[ADFProcessingPlugin],
    adf: AdfDict,
    functions: PublisherFunctions
) -> AdfDict:
    """Run every plugin over a page's ADF.

    Args:
        plugins: Plugins in the order their load phases apply
        adf: The page's transcoded ADF
        functions: Upload operations for the page

    Returns:
        The rewritten ADF
    """
    extracted = [plugin.extract(adf, functions) for plugin in plugins]
    transformed = [
        plugin.transform(items, functions)
        for plugin, items in zip(plugins, extracted)
    ]
    for plugin, uploaded in zip(plugins, transformed):
        logger.debug(f"{type(plugin).__name__}: {len(uploaded)} assets")
        adf = plugin.load(adf, uploaded, functions)
    return adf
