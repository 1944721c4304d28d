from __future__ import annotations

from typing import List

from .ast import CONTAINER_KINDS, Node


def _expands(parent: Node, child: Node, same_kind_only: bool) -> bool:
    if child.kind not in CONTAINER_KINDS:
        return False
    return child.kind == parent.kind if same_kind_only else True


def linearize(node: Node, *, same_kind_only: bool = False) -> List[Node]:
    """Return ``node``'s children as the renderer lays them out side by side.

    ``Sum`` and ``Product`` emit no grouping in the generated notation, so a
    nested run of either kind is spliced into its container's row, including a
    ``Product`` inside a ``Sum`` and the reverse. The stricter rule that keeps a
    child of the other kind as one unit is available as ``same_kind_only``.
    """
    if node.kind not in CONTAINER_KINDS:
        return list(node.children)
    linear: List[Node] = []
    for child in node.children:
        if _expands(node, child, same_kind_only):
            linear.extend(linearize(child, same_kind_only=same_kind_only))
        else:
            linear.append(child)
    return linear
