"""Pre-order ADF tree traversal with per-type visitors.

A visitor receives ``(node, parent)`` where ``parent`` is a ParentRef chain
leading back to the document root, and answers with:

- ``None``: keep the node as it is (in-place edits are kept)
- ``False``: remove the node
- a dict: replace the node
- a list of dicts: splice the nodes in place of the node

Traversal continues into the content of whatever node is kept.
"""

import copy
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

from .adf_models import AdfDict

VisitorResult = Union[None, bool, AdfDict, List[AdfDict]]
Visitor = Callable[[AdfDict, "ParentRef"], VisitorResult]


class ParentRef(NamedTuple):
    """A link in the chain of ancestors of the node being visited."""
    node: Optional[AdfDict]
    parent: Optional["ParentRef"]


def traverse(adf: AdfDict, visitors: Dict[str, Visitor]) -> AdfDict:
    """Apply visitors to a deep copy of ``adf`` and return the copy.

    Args:
        adf: Root node (usually a ``doc``)
        visitors: Node type to visitor callable

    Returns:
        The rewritten tree; the input is left untouched
    """
    root = copy.deepcopy(adf)
    result = _visit(root, ParentRef(None, None), visitors)
    if isinstance(result, dict):
        return result
    return root


def _visit(node: AdfDict, parent: ParentRef, visitors: Dict[str, Visitor]) -> Any:
    visitor = visitors.get(node.get("type", ""))
    outcome: VisitorResult = None
    if visitor is not None:
        outcome = visitor(node, parent)

    if outcome is False:
        return False
    if isinstance(outcome, list):
        return [_walk_children(item, parent, visitors) for item in outcome]
    if isinstance(outcome, dict):
        node = outcome
    return _walk_children(node, parent, visitors)


def _walk_children(node: AdfDict, parent: ParentRef, visitors: Dict[str, Visitor]) -> AdfDict:
    children = node.get("content")
    if not children:
        return node

    here = ParentRef(node, parent)
    rewritten: List[AdfDict] = []
    for child in children:
        result = _visit(child, here, visitors)
        if result is False:
            continue
        if isinstance(result, list):
            rewritten.extend(result)
        else:
            rewritten.append(result)
    node["content"] = rewritten
    return node


def find_nodes(adf: AdfDict, node_type: str) -> List[AdfDict]:
    """Return every node of the given type, in document order."""
    found: List[AdfDict] = []

    def _collect(node: AdfDict) -> None:
        if node.get("type") == node_type:
            found.append(node)
        for child in node.get("content") or []:
            _collect(child)

    _collect(adf)
    return found
