"""Structural equality of ADF documents.

Mark order is not significant in ADF (``strong`` then ``em`` renders the
same as ``em`` then ``strong``), and Confluence does not preserve the order
it was given, so marks are sorted before comparison. Everything else is
compared structurally.
"""

import json
from typing import Any

from .adf_models import AdfDict


def _mark_key(mark: AdfDict):
    return (mark.get("type", ""), json.dumps(mark.get("attrs") or {}, sort_keys=True))


def order_marks(value: Any) -> Any:
    """Return a copy of ``value`` with every ``marks`` list sorted."""
    if isinstance(value, dict):
        ordered = {key: order_marks(item) for key, item in value.items()}
        if isinstance(ordered.get("marks"), list):
            ordered["marks"] = sorted(ordered["marks"], key=_mark_key)
        return ordered
    if isinstance(value, list):
        return [order_marks(item) for item in value]
    return value


def adf_equal(first: AdfDict, second: AdfDict) -> bool:
    """Check whether two ADF documents are structurally equal."""
    return order_marks(first) == order_marks(second)
