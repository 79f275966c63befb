"""Hash-reconciled attachment uploads for one page.

Attachments are uploaded with the MD5 hex digest of their bytes as the
comment. When the page already carries an attachment with the same name and
digest, the upload is skipped and the existing attachment is reused.
"""

import hashlib
import logging
import mimetypes
from typing import Any, Dict, List, NamedTuple, Optional

from src.confluence_client.api_wrapper import APIWrapper
from src.confluence_client.errors import SyncError
from src.local_tree.filesystem_adaptor import FileSystemAdaptor

from .types import PublisherFunctions, UploadedImageData

logger = logging.getLogger(__name__)


class CurrentAttachment(NamedTuple):
    """An attachment already present on a page."""
    filehash: str
    attachment_id: str
    collection_name: str


CurrentAttachments = Dict[str, CurrentAttachment]


def file_hash(data: bytes) -> str:
    """Return the MD5 hex digest used to recognize unchanged attachments."""
    return hashlib.md5(data).hexdigest()


def current_attachments(attachments: List[Dict[str, Any]]) -> CurrentAttachments:
    """Index a page's attachments by title.

    Args:
        attachments: Attachment dicts from ``APIWrapper.get_attachments``

    Returns:
        Title to CurrentAttachment
    """
    indexed: CurrentAttachments = {}
    for attachment in attachments:
        extensions = attachment.get("extensions") or {}
        metadata = attachment.get("metadata") or {}
        indexed[attachment.get("title", "")] = CurrentAttachment(
            filehash=metadata.get("comment", "") or "",
            attachment_id=extensions.get("fileId", "") or "",
            collection_name=extensions.get("collectionName", "") or "",
        )
    return indexed


class PageAttachmentFunctions(PublisherFunctions):
    """Uploads attachments to one page, skipping unchanged ones.

    Example:
        >>> functions = PageAttachmentFunctions(api, adaptor, "123", "/docs/a.md", attachments)
        >>> functions.upload_file("images/diagram.png")
        UploadedImageData(filename='diagram.png', ..., status='existing')
    """

    def __init__(
        self,
        api: APIWrapper,
        adaptor: FileSystemAdaptor,
        page_id: str,
        page_file_path: str,
        attachments: CurrentAttachments
    ):
        self._api = api
        self._adaptor = adaptor
        self._page_id = page_id
        self._page_file_path = page_file_path
        self._attachments = attachments
        self.uploaded_count = 0

    def upload_buffer(self, file_name: str, data: bytes) -> Optional[UploadedImageData]:
        mime_type = mimetypes.guess_type(file_name)[0] or 'application/octet-stream'
        return self._upload(file_name, data, mime_type)

    def upload_file(self, path: str) -> Optional[UploadedImageData]:
        binary = self._adaptor.read_binary(path, self._page_file_path)
        if binary is None:
            return None
        return self._upload(binary.filename, binary.contents, binary.mime_type)

    def _upload(self, file_name: str, data: bytes, mime_type: str) -> Optional[UploadedImageData]:
        digest = file_hash(data)
        existing = self._attachments.get(file_name)
        if existing is not None and existing.filehash == digest:
            logger.debug(f"Attachment {file_name} unchanged on page {self._page_id}")
            return UploadedImageData(
                filename=file_name,
                id=existing.attachment_id,
                collection=existing.collection_name,
                status="existing",
            )

        try:
            attachment = self._api.upload_attachment(
                self._page_id, file_name, data, digest, mime_type
            )
        except SyncError as e:
            logger.error(f"Failed to upload {file_name} to page {self._page_id}: {e}")
            return None

        extensions = attachment.get("extensions") or {}
        uploaded = UploadedImageData(
            filename=file_name,
            id=extensions.get("fileId", "") or "",
            collection=extensions.get("collectionName", "") or "",
            status="uploaded",
        )
        self._attachments[file_name] = CurrentAttachment(digest, uploaded.id, uploaded.collection)
        self.uploaded_count += 1
        logger.info(f"Uploaded {file_name} to page {self._page_id}")
        return uploaded
