"""Publishing of a local markdown tree to Confluence."""

from .conflict import Conflict, Recovered, check_conflict
from .errors import ContentTypeChangeError, PublishConflictError, PublishError
from .models import PublishResult, PublishStatus
from .publisher import Publisher, matches_filter

__all__ = [
    "Conflict",
    "Recovered",
    "check_conflict",
    "ContentTypeChangeError",
    "PublishConflictError",
    "PublishError",
    "PublishResult",
    "PublishStatus",
    "Publisher",
    "matches_filter",
]
