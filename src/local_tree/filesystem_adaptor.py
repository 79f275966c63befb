"""Local file collaborator backed by the filesystem.

Finds the markdown files to publish under the content root, reads and
rewrites their frontmatter, resolves binary files (images) referenced from
them, and writes pulled pages back to disk.
"""

import logging
import mimetypes
import os
import threading
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

from src.settings.models import Settings

from .errors import FilesystemError
from .frontmatter_handler import FrontmatterHandler
from .models import BinaryFile, MarkdownFile
from .page_config import TITLE_KEYS, WRITE_KEYS, default_page_title, publish_flag

logger = logging.getLogger(__name__)

SKIPPED_DIRECTORIES = {"node_modules", "__pycache__"}


class FileSystemAdaptor:
    """Reads and writes markdown files below ``settings.content_root``.

    Frontmatter write-backs are serialized with a lock because documents
    are reconciled concurrently.

    Example:
        >>> adaptor = FileSystemAdaptor(settings)
        >>> files = adaptor.get_markdown_files_to_upload()
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.content_root = os.path.abspath(settings.content_root)
        self._write_lock = threading.Lock()

    def _read_text(self, absolute_file_path: str) -> str:
        try:
            with open(absolute_file_path, 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            raise FilesystemError(absolute_file_path, 'read', 'File not found')
        except PermissionError:
            raise FilesystemError(absolute_file_path, 'read', 'Permission denied')
        except (OSError, UnicodeDecodeError) as e:
            raise FilesystemError(absolute_file_path, 'read', str(e))

    def _write_text(self, absolute_file_path: str, content: str) -> None:
        try:
            with open(absolute_file_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except PermissionError:
            raise FilesystemError(absolute_file_path, 'write', 'Permission denied')
        except OSError as e:
            raise FilesystemError(absolute_file_path, 'write', str(e))

    def _within_root(self, path: str) -> bool:
        real_root = os.path.realpath(self.content_root)
        real_path = os.path.realpath(path)
        return real_path == real_root or real_path.startswith(real_root + os.sep)

    def load_markdown_file(self, absolute_file_path: str) -> MarkdownFile:
        """Read a markdown file and parse its frontmatter.

        Raises:
            FilesystemError: If the file cannot be read
            FrontmatterError: If the frontmatter is malformed
        """
        absolute_file_path = os.path.abspath(absolute_file_path)
        frontmatter, body = FrontmatterHandler.split(
            absolute_file_path, self._read_text(absolute_file_path)
        )

        title = None
        for key in TITLE_KEYS:
            if frontmatter.get(key) is not None and str(frontmatter[key]).strip():
                title = str(frontmatter[key]).strip()
                break

        return MarkdownFile(
            folder_name=os.path.basename(os.path.dirname(absolute_file_path)),
            absolute_file_path=absolute_file_path,
            file_name=os.path.basename(absolute_file_path),
            contents=body,
            page_title=title or default_page_title(absolute_file_path),
            frontmatter=frontmatter,
        )

    def load_markdown_files(self, folder_path: str) -> List[MarkdownFile]:
        """Load every markdown file below a folder, in a stable order."""
        files = []
        for dirpath, dirnames, filenames in os.walk(folder_path):
            dirnames[:] = sorted(
                d for d in dirnames
                if not d.startswith('.') and d not in SKIPPED_DIRECTORIES
            )
            for filename in sorted(filenames):
                if filename.lower().endswith('.md'):
                    files.append(self.load_markdown_file(os.path.join(dirpath, filename)))
        return files

    def get_markdown_files_to_upload(self) -> List[MarkdownFile]:
        """Return the markdown files that should be published.

        Files inside ``folder_to_publish`` are published unless their
        frontmatter sets ``connie-publish: false``; files elsewhere under the
        content root only when it sets ``connie-publish: true``.
        """
        if not os.path.isdir(self.content_root):
            raise FilesystemError(self.content_root, 'list', 'Content root is not a directory')

        publish_folder = os.path.abspath(
            os.path.join(self.content_root, self.settings.folder_to_publish)
        )

        selected = []
        for markdown_file in self.load_markdown_files(self.content_root):
            flag = publish_flag(markdown_file.absolute_file_path, markdown_file.frontmatter)
            in_folder = (
                markdown_file.absolute_file_path.startswith(publish_folder + os.sep)
                or os.path.dirname(markdown_file.absolute_file_path) == publish_folder
            )
            if flag is True or (in_folder and flag is not False):
                selected.append(markdown_file)

        logger.info(f"Found {len(selected)} markdown files to publish under {self.content_root}")
        return selected

    def update_markdown_values(self, absolute_file_path: str, values: Dict[str, Any]) -> None:
        """Rewrite frontmatter values of a file in place.

        Args:
            absolute_file_path: File to update
            values: Field names from page_config.WRITE_KEYS (``pageId``,
                ``publish``, ...) mapped to their new values; None removes
                the field. Aliases of a written field are removed.
        """
        updates: Dict[str, Any] = {}
        for name, value in values.items():
            keys = WRITE_KEYS.get(name)
            if keys is None:
                raise ValueError(f"Unknown frontmatter field: {name}")
            updates[keys[0]] = value
            for alias in keys[1:]:
                updates[alias] = None

        with self._write_lock:
            content = self._read_text(absolute_file_path)
            self._write_text(
                absolute_file_path,
                FrontmatterHandler.update(absolute_file_path, content, updates)
            )
        logger.debug(f"Updated frontmatter of {absolute_file_path}: {sorted(values)}")

    def _find_closest_file(self, file_name: str, referenced_from: str) -> Optional[str]:
        best: Optional[str] = None
        best_distance = None
        origin = os.path.dirname(referenced_from)
        for dirpath, dirnames, filenames in os.walk(self.content_root):
            dirnames[:] = [d for d in dirnames if not d.startswith('.')]
            if file_name in filenames:
                candidate = os.path.join(dirpath, file_name)
                distance = len(os.path.relpath(candidate, origin).split(os.sep))
                if best_distance is None or distance < best_distance:
                    best, best_distance = candidate, distance
        return best

    def read_binary(self, search_path: str, referenced_from: str) -> Optional[BinaryFile]:
        """Find and read a binary file referenced from a markdown file.

        The path may be percent-encoded, as markdown image sources are. Looks
        relative to the referencing file, then relative to the content
        root, then for the closest file with the same name anywhere below
        the content root.

        Returns:
            BinaryFile, or None when nothing matches
        """
        cleaned = unquote(search_path.split('#', 1)[0].split('?', 1)[0])
        candidates = [
            os.path.join(os.path.dirname(referenced_from), cleaned),
            os.path.join(self.content_root, cleaned.lstrip('/')),
        ]
        found = next(
            (os.path.abspath(c) for c in candidates
             if os.path.isfile(c) and self._within_root(c)),
            None
        )
        if found is None:
            found = self._find_closest_file(os.path.basename(cleaned), referenced_from)
        if found is None:
            logger.warning(f"Could not find {search_path} referenced from {referenced_from}")
            return None

        try:
            with open(found, 'rb') as f:
                contents = f.read()
        except OSError as e:
            raise FilesystemError(found, 'read', str(e))

        mime_type = mimetypes.guess_type(found)[0] or 'application/octet-stream'
        return BinaryFile(
            filename=os.path.basename(found),
            file_path=found,
            mime_type=mime_type,
            contents=contents,
        )

    def write_markdown_file(
        self,
        relative_path: str,
        frontmatter: Dict[str, Any],
        body: str,
        overwrite: bool = False
    ) -> str:
        """Write a markdown file below the content root.

        Returns:
            Absolute path of the written file

        Raises:
            FilesystemError: If the path escapes the content root, or the
                file exists and overwrite is False
        """
        target = os.path.abspath(os.path.join(self.content_root, relative_path))
        if not self._within_root(target):
            raise FilesystemError(target, 'write', 'Path escapes the content root')
        if os.path.exists(target) and not overwrite:
            raise FilesystemError(target, 'write', 'File already exists')

        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
        except OSError as e:
            raise FilesystemError(target, 'mkdir', str(e))
        self._write_text(target, FrontmatterHandler.generate(frontmatter, body))
        return target
