from __future__ import annotations

from typing import Tuple

from .ast import Node
from .geometry import compute_bounds

PointLike = Tuple[float, float]


def select(node: Node, point_a: PointLike, point_b: PointLike) -> Node:
    """Smallest node under ``node`` whose rectangle holds both points.

    Children are tested in document order and the first one containing both
    points is descended into. When a drag leaves the initially hit child the
    containment test fails and the ancestor is returned instead.
    """
    for child in node.children:
        rect = compute_bounds(child)
        if rect.contains(point_a) and rect.contains(point_b):
            return select(child, point_a, point_b)
    return node
