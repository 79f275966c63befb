"""Mapping of the local page tree onto Confluence pages."""

from .errors import (
    RemoteTreeError,
    OutsidePageTreeError,
    AmbiguousPageError,
    MissingSpaceKeyError,
    UnresolvedParentError,
)
from .link_resolver import prepare_adf_to_upload
from .models import ExistingPage, RemoteNode, UnresolvedNode
from .reconciler import BLANK_PAGE_ADF, RemoteTreeReconciler

__all__ = [
    "RemoteTreeError",
    "OutsidePageTreeError",
    "AmbiguousPageError",
    "MissingSpaceKeyError",
    "UnresolvedParentError",
    "prepare_adf_to_upload",
    "ExistingPage",
    "RemoteNode",
    "UnresolvedNode",
    "BLANK_PAGE_ADF",
    "RemoteTreeReconciler",
]
