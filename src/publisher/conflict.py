"""Last-editor conflict check before a page update.

A page whose last editor is someone else is normally not overwritten. When
the document declared the page id itself (typically after a pull), the edit
is expected: the current version is re-fetched and the update proceeds on
top of it with a warning.
"""

import logging
from typing import NamedTuple, Union

from src.confluence_client.api_wrapper import APIWrapper
from src.confluence_client.errors import SyncError
from src.remote_tree.models import RemoteNode

logger = logging.getLogger(__name__)


class Recovered(NamedTuple):
    """The update may proceed from ``version``."""
    version: int


class Conflict(NamedTuple):
    """The update must not proceed."""
    reason: str


ConflictOutcome = Union[Recovered, Conflict]


def check_conflict(node: RemoteNode, my_account_id: str, api: APIWrapper) -> ConflictOutcome:
    """Decide whether ``node`` may be updated, and from which version.

    Args:
        node: Reconciled page about to be updated
        my_account_id: Account id of the credentials in use
        api: Used to re-fetch the version of pages edited by someone else

    Returns:
        Recovered carrying the version to build on, or Conflict
    """
    if node.created or node.last_editor_id == my_account_id:
        return Recovered(node.version)

    reason = (
        f"Page last updated by another user. Won't publish over their changes. "
        f"MyAccountId: {my_account_id}, Last Updated By: {node.last_editor_id}"
    )
    if not node.declared_remote_id:
        return Conflict(reason)

    try:
        content = api.get_content_by_id(node.remote_id, ["version"])
    except SyncError as e:
        logger.error(f"Could not re-fetch version of {node.remote_id}: {e}")
        return Conflict(reason)

    version = int((content.get("version") or {}).get("number", node.version))
    logger.warning(
        f"Page {node.document.title} was updated by another user ({node.last_editor_id}). "
        f"Using current version {version} to update."
    )
    return Recovered(version)
