"""Publish orchestration.

A publish run loads the local markdown files, builds and validates the local
page tree, maps it onto Confluence (creating missing pages), then updates
every page concurrently. Each page update:

1. checks that nobody else edited the page since we last published it
2. refuses to turn a page into a blog post or back
3. runs the content pipeline (attachments, rendered charts)
4. updates body, title and parent only when they differ from Confluence
5. reconciles labels with the document's tags

A failure of one document never aborts the others; it becomes a FAILED
result carrying the error message.
"""

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence

from src.adf.adf_equal import adf_equal
from src.confluence_client.api_wrapper import APIWrapper
from src.confluence_client.retry_logic import retry_on_rate_limit
from src.local_tree.cross_reference import CrossReferenceMap, find_common_path
from src.local_tree.filesystem_adaptor import FileSystemAdaptor
from src.local_tree.models import ContentKind, MarkdownFile
from src.local_tree.page_config import to_local_document
from src.local_tree.tree_builder import build_local_tree, folder_page_paths
from src.pipeline import ALWAYS_PLUGINS
from src.pipeline.attachments import PageAttachmentFunctions, current_attachments
from src.pipeline.types import ADFProcessingPlugin, execute_pipeline
from src.remote_tree.link_resolver import prepare_adf_to_upload
from src.remote_tree.models import RemoteNode, UnresolvedNode
from src.remote_tree.reconciler import ReconciledNode, RemoteTreeReconciler
from src.settings.models import Settings

from .conflict import Conflict, check_conflict
from .errors import ContentTypeChangeError, PublishConflictError
from .models import SAME, UPDATED, PublishResult, PublishStatus

logger = logging.getLogger(__name__)


def matches_filter(markdown_file: MarkdownFile, publish_filter: str, content_root: str) -> bool:
    """Whether a file is selected by a publish filter.

    The filter matches the absolute path, the file name with or without
    ``.md``, or the path relative to the content root with or without ``.md``.
    """
    path = markdown_file.absolute_file_path
    if path == publish_filter:
        return True
    if markdown_file.file_name in (publish_filter, publish_filter + '.md'):
        return True
    if not os.path.isabs(publish_filter):
        if path == os.path.abspath(os.path.join(content_root, publish_filter)):
            return True
    relative = os.path.relpath(path, content_root)
    return relative in (publish_filter, publish_filter + '.md')


class Publisher:
    """Publishes a folder of markdown files to a Confluence page tree.

    Example:
        >>> publisher = Publisher(settings, api, FileSystemAdaptor(settings))
        >>> results = publisher.publish()
        >>> failed = [r for r in results if not r.succeeded]
    """

    def __init__(
        self,
        settings: Settings,
        api: APIWrapper,
        adaptor: FileSystemAdaptor,
        plugins: Optional[Sequence[ADFProcessingPlugin]] = None
    ):
        self.settings = settings
        self.api = api
        self.adaptor = adaptor
        self.plugins: List[ADFProcessingPlugin] = list(plugins or []) + list(ALWAYS_PLUGINS)
        self._account_id: Optional[str] = None
        self._account_lock = threading.Lock()

    def current_account_id(self) -> str:
        """Account id of the credentials in use, fetched once."""
        with self._account_lock:
            if self._account_id is None:
                user = self.api.get_current_user()
                self._account_id = user.get("accountId", "")
                logger.debug(f"Publishing as account {self._account_id}")
            return self._account_id

    def publish(self, publish_filter: Optional[str] = None) -> List[PublishResult]:
        """Publish every publishable file, or only those matching a filter.

        Args:
            publish_filter: Absolute path, file name or path relative to the
                content root of the file(s) to publish

        Returns:
            One PublishResult per attempted document

        Raises:
            LocalTreeError: If the local files do not form a valid tree
            ConfluenceError: If the parent page or current user cannot be read
        """
        all_files = self.adaptor.get_markdown_files_to_upload()
        files = all_files
        if publish_filter:
            content_root = os.path.abspath(self.settings.content_root)
            files = [f for f in all_files if matches_filter(f, publish_filter, content_root)]
            logger.info(f"Filter {publish_filter} selected {len(files)} of {len(all_files)} files")

        # A lone file is its own tree root
        common_path = None
        if len(all_files) > 1:
            common_path = find_common_path(f.absolute_file_path for f in all_files)
        reference_root = common_path or os.path.abspath(self.settings.content_root)
        if not common_path and all_files:
            reference_root = os.path.dirname(all_files[0].absolute_file_path)
        cross_references = CrossReferenceMap.from_files(
            all_files,
            reference_root,
            self.settings.confluence_base_url,
            self.settings.default_space_key,
        )

        selected = {f.absolute_file_path for f in files}
        tree_files = files
        if publish_filter and common_path:
            # Folder pages above the selection keep the selected pages in place
            keep = selected | folder_page_paths(
                (f.absolute_file_path for f in all_files), selected, common_path
            )
            tree_files = [f for f in all_files if f.absolute_file_path in keep]

        documents = [to_local_document(f, self.settings, cross_references) for f in tree_files]
        local_root = build_local_tree(documents, common_path)

        my_account_id = self.current_account_id()
        parent_id = self.settings.confluence_parent_id
        parent_page = self.api.get_content_by_id(parent_id, ["space"])
        space_key = (parent_page.get("space") or {}).get("key") or self.settings.default_space_key
        logger.info(f"Publishing {len(documents)} documents below page {parent_id} in space {space_key}")

        reconciler = RemoteTreeReconciler(self.api, self.adaptor, self.settings.max_workers)
        nodes = reconciler.ensure_remote_tree(local_root, space_key, parent_id, parent_id)
        nodes = prepare_adf_to_upload(nodes, self.settings)

        if publish_filter:
            nodes = [n for n in nodes if n.document.absolute_path in selected]

        return self._publish_nodes(nodes, my_account_id)

    def _publish_nodes(self, nodes: List[ReconciledNode], my_account_id: str) -> List[PublishResult]:
        results: List[Optional[PublishResult]] = [None] * len(nodes)

        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            futures = {}
            for index, node in enumerate(nodes):
                if isinstance(node, UnresolvedNode):
                    results[index] = PublishResult(
                        document=node.document,
                        status=PublishStatus.FAILED,
                        reason=str(node.error),
                    )
                    continue
                future = executor.submit(
                    retry_on_rate_limit, self.update_page_content, node, my_account_id
                )
                futures[future] = index

            for future in as_completed(futures):
                index = futures[future]
                node = nodes[index]
                try:
                    results[index] = future.result()
                except Exception as e:
                    logger.error(f"Failed to publish {node.document.file_name}: {e}")
                    results[index] = PublishResult(
                        document=node.document,
                        status=PublishStatus.FAILED,
                        page_id=node.remote_id,
                        reason=str(e),
                    )

        return [r for r in results if r is not None]

    def update_page_content(self, node: RemoteNode, my_account_id: str) -> PublishResult:
        """Bring one reconciled page in line with its local document.

        Raises:
            PublishConflictError: If another user edited the page
            ContentTypeChangeError: If the content type would change
        """
        document = node.document
        outcome = check_conflict(node, my_account_id, self.api)
        if isinstance(outcome, Conflict):
            raise PublishConflictError(document.title, my_account_id, node.last_editor_id)
        version = outcome.version

        existing = node.existing
        kind = document.content_kind.value
        if existing.content_type != kind:
            raise ContentTypeChangeError(document.title, existing.content_type, kind)

        functions = PageAttachmentFunctions(
            self.api,
            self.adaptor,
            node.remote_id,
            document.absolute_path,
            current_attachments(self.api.get_attachments(node.remote_id)),
        )
        adf_to_upload = execute_pipeline(self.plugins, document.transcoded_content, functions)
        image_result = UPDATED if functions.uploaded_count else SAME

        keep_parent = document.content_kind == ContentKind.BLOGPOST or document.retain_parent
        existing_details = (existing.title, existing.content_type)
        new_details = (existing.title, kind)
        if not keep_parent:
            existing_details += (existing.parent_id,)
            new_details += (node.parent_id,)

        content_result = SAME
        if not adf_equal(existing.adf, adf_to_upload) or existing_details != new_details:
            content_result = UPDATED
            ancestors = None if keep_parent or not node.parent_id else [{"id": node.parent_id}]
            logger.info(f"Updating {document.title} (page {node.remote_id}) to version {version + 1}")
            self.api.update_content(
                node.remote_id,
                version + 1,
                existing.title,
                kind,
                adf_to_upload,
                ancestors,
            )

        label_result = self._sync_labels(node.remote_id, document.tags)

        if node.created:
            status = PublishStatus.CREATED
        elif UPDATED in (content_result, image_result, label_result):
            status = PublishStatus.UPDATED
        else:
            status = PublishStatus.UNCHANGED

        return PublishResult(
            document=document,
            status=status,
            page_id=node.remote_id,
            content_result=content_result,
            image_result=image_result,
            label_result=label_result,
        )

    def _sync_labels(self, page_id: str, tags: Sequence[str]) -> str:
        result = SAME
        current = self.api.get_labels(page_id)
        current_names = [label.get("name", "") for label in current]

        for name in current_names:
            if name not in tags:
                logger.debug(f"Removing label {name} from page {page_id}")
                self.api.remove_label(page_id, name)
                result = UPDATED

        to_add = [tag for tag in tags if tag not in current_names]
        if to_add:
            logger.debug(f"Adding labels {to_add} to page {page_id}")
            self.api.add_labels(page_id, to_add)
            result = UPDATED
        return result
