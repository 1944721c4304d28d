"""Bottom-up bounding box derivation for reconciled trees."""

from __future__ import annotations

from .ast import LEAF, Node
from .rect import Rect


class UnboundGeometryError(RuntimeError):
    """Raised when aggregation reaches a node that was never measured."""


def compute_bounds(node: Node) -> Rect:
    """Return ``node``'s rectangle, deriving and memoizing it for internal nodes.

    Leaves are the only measured nodes; their rectangle comes from the
    reconciler and is returned as-is. Internal nodes get the smallest
    rectangle enclosing every child.
    """
    if node.rect is not None:
        return node.rect
    if node.kind == LEAF or not node.children:
        raise UnboundGeometryError(f'{node!r} has no measured rectangle; reconcile before aggregating')
    node.rect = Rect.enclosing(compute_bounds(child) for child in node.children)
    return node.rect
