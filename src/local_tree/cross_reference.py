"""Cross-reference map: local file names to known Confluence pages.

Built once per run from every publishable file's frontmatter, including
files excluded by a publish filter, so links to them still resolve.
Each file is registered under its path relative to the common root
(without ``.md``) and under its bare stem.
"""

import logging
import os
from typing import Dict, Iterable, NamedTuple, Optional
from urllib.parse import unquote

from src.adf.url_utils import page_url

from .models import MarkdownFile
from .page_config import PAGE_ID_KEYS, SPACE_KEY_KEYS

logger = logging.getLogger(__name__)


class CrossReference(NamedTuple):
    """Remote identity of a local file."""
    remote_id: str
    space_key: Optional[str]


def find_common_path(paths: Iterable[str]) -> str:
    """Return the deepest directory containing every given file.

    Raises:
        ValueError: If no paths are given
    """
    directories = [os.path.dirname(os.path.abspath(path)) for path in paths]
    if not directories:
        raise ValueError("No paths provided")
    return os.path.commonpath(directories)


def _strip_markdown_suffix(name: str) -> str:
    return name[:-3] if name.lower().endswith('.md') else name


def normalize_reference(target: str) -> str:
    """Normalize a link target to a cross-reference key.

    Drops any ``#fragment`` or ``?query``, leading ``./`` and ``../``
    segments and the ``.md`` suffix, and uses forward slashes.

    Example:
        >>> normalize_reference("../guides/setup.md#install")
        'guides/setup'
    """
    key = unquote(target.split('#', 1)[0].split('?', 1)[0]).replace('\\', '/').strip()
    while key.startswith(('./', '../')):
        key = key[2:] if key.startswith('./') else key[3:]
    return _strip_markdown_suffix(key.strip('/'))


class CrossReferenceMap:
    """Maps normalized local file names to remote page identities.

    Read-only after construction and safe to share between threads.

    Example:
        >>> refs = CrossReferenceMap.from_files(files, "/docs", base_url, "TEAM")
        >>> refs.resolve("./setup.md#install")
        'https://example.atlassian.net/wiki/spaces/TEAM/pages/42#install'
    """

    def __init__(
        self,
        entries: Dict[str, CrossReference],
        base_url: str,
        default_space_key: Optional[str] = None
    ):
        self._entries = dict(entries)
        self._base_url = base_url
        self._default_space_key = default_space_key

    @classmethod
    def from_files(
        cls,
        files: Iterable[MarkdownFile],
        common_path: str,
        base_url: str,
        default_space_key: Optional[str] = None
    ) -> 'CrossReferenceMap':
        """Build the map from the frontmatter of every file."""
        entries: Dict[str, CrossReference] = {}
        for file in files:
            remote_id = _first_value(file.frontmatter, PAGE_ID_KEYS)
            if remote_id is None:
                continue
            space_key = _first_value(file.frontmatter, SPACE_KEY_KEYS)
            reference = CrossReference(remote_id, space_key)

            relative = os.path.relpath(file.absolute_file_path, common_path).replace(os.sep, '/')
            key = _strip_markdown_suffix(relative)
            entries[key] = reference
            stem = _strip_markdown_suffix(file.file_name)
            if stem != key:
                entries.setdefault(stem, reference)

        logger.debug(f"Cross-reference map holds {len(entries)} entries")
        return cls(entries, base_url, default_space_key)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, target: str) -> Optional[CrossReference]:
        """Look up the remote identity of a link target."""
        key = normalize_reference(target)
        if not key:
            return None
        if key in self._entries:
            return self._entries[key]
        return self._entries.get(key.rsplit('/', 1)[-1])

    def resolve(self, target: str) -> Optional[str]:
        """Return the page URL a link target points at, or None if unknown.

        A ``#fragment`` on the target is carried over to the URL.
        """
        reference = self.get(target)
        if reference is None:
            return None
        url = page_url(
            self._base_url,
            reference.remote_id,
            reference.space_key or self._default_space_key
        )
        fragment = target.split('#', 1)[1] if '#' in target else ''
        return f"{url}#{fragment}" if fragment else url


def _first_value(frontmatter: Dict, keys) -> Optional[str]:
    for key in keys:
        value = frontmatter.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None
