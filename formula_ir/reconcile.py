"""Bind measured rectangles from the rendered structure onto tree leaves."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .ast import CONTAINER_KINDS, FRACTION, LEAF, PRODUCT, SUM, Node, iter_nodes, node_path
from .config import DENOMINATOR_FIRST, EditorConfig, get_editor_config
from .linearize import linearize
from .logging_utils import apply_debug_logging
from .rect import Rect
from .structure import ATOMIC, FLAT, TWO_SLOT, RenderedNode

logger = logging.getLogger(__name__)

RENDERED_KIND_FOR = {
    SUM: FLAT,
    PRODUCT: FLAT,
    FRACTION: TWO_SLOT,
    LEAF: ATOMIC,
}

Binding = Tuple[Node, Rect]


class StructuralMismatch(Exception):
    """The rendered layout disagrees with the linearized tree."""

    def __init__(self, message: str, path: Sequence[int] = ()):
        self.path = tuple(path)
        where = '/'.join(str(i) for i in self.path) or '<root>'
        super().__init__(f'[path {where}] {message}')


def _collapse_tree(node: Node) -> Node:
    # A one-element run renders as that element alone.
    while node.kind in CONTAINER_KINDS:
        linear = linearize(node)
        if len(linear) != 1:
            break
        node = linear[0]
    return node


def _collapse_rendered(rendered: RenderedNode) -> RenderedNode:
    while rendered.kind == FLAT and len(rendered.children) == 1:
        rendered = rendered.children[0]
    return rendered


def _match(node: Node, rendered: RenderedNode, bindings: List[Binding], slot_order: str) -> None:
    node = _collapse_tree(node)
    rendered = _collapse_rendered(rendered)

    expected = RENDERED_KIND_FOR[node.kind]
    if rendered.kind != expected:
        raise StructuralMismatch(
            f'{node.kind} node rendered as {rendered.kind}, expected {expected}', node_path(node)
        )

    if node.kind == LEAF:
        if rendered.text != node.symbol:
            raise StructuralMismatch(
                f'leaf symbol {node.symbol!r} rendered as {rendered.text!r}', node_path(node)
            )
        rect = rendered.bounding_rect()
        if rect is None:
            raise StructuralMismatch(f'rendered {rendered.text!r} has no measurable rectangle', node_path(node))
        bindings.append((node, rect))
        return

    children = linearize(node)
    rendered_children = list(rendered.children)
    if node.kind == FRACTION and slot_order == DENOMINATOR_FIRST:
        rendered_children.reverse()
    if len(children) != len(rendered_children):
        raise StructuralMismatch(
            f'{node.kind} has {len(children)} linearized children but {len(rendered_children)} were rendered',
            node_path(node),
        )
    for child, rendered_child in zip(children, rendered_children):
        _match(child, rendered_child, bindings, slot_order)


def reconcile(root: Node, structure: RenderedNode, *, config: Optional[EditorConfig] = None) -> int:
    """Match ``structure`` against ``root`` and write leaf geometry.

    Nothing is written unless the whole walk succeeds. On success every
    derived rectangle is dropped so the aggregator recomputes it. Returns the
    number of leaves bound.
    """
    cfg = config or get_editor_config()
    bindings: List[Binding] = []
    _match(root, structure, bindings, cfg.fraction_slot_order)

    for node in iter_nodes(root):
        if node.kind != LEAF:
            node.rect = None
    for leaf, rect in bindings:
        leaf.rect = rect
    logger.debug('Bound geometry onto %d leaves', len(bindings))
    return len(bindings)


apply_debug_logging(globals(), logger=logger, skip={'_collapse_tree', '_collapse_rendered', 'StructuralMismatch'})
