from typing import Set, Tuple

from .ast import FRACTION, LEAF, NODE_KINDS, Node


class ValidationError(Exception):
    pass


def _where(path: Tuple[int, ...]) -> str:
    return '/'.join(str(i) for i in path) or '<root>'


def _check(node: Node, path: Tuple[int, ...], seen: Set[int]) -> int:
    if id(node) in seen:
        raise ValidationError(f'[path {_where(path)}] node {node!r} is reachable twice')
    seen.add(id(node))
    if node.kind not in NODE_KINDS:
        raise ValidationError(f'[path {_where(path)}] unknown node kind {node.kind!r}')
    if node.kind == LEAF:
        if node.children:
            raise ValidationError(f'[path {_where(path)}] leaf has {len(node.children)} children')
        if not isinstance(node.symbol, str):
            raise ValidationError(f'[path {_where(path)}] leaf symbol must be a string')
        return 1 if node.is_caret and not node.is_slot_placeholder else 0
    if node.symbol is not None:
        raise ValidationError(f'[path {_where(path)}] {node.kind} carries symbol {node.symbol!r}')
    if node.kind == FRACTION and len(node.children) != 2:
        raise ValidationError(
            f'[path {_where(path)}] fraction needs exactly 2 children, got {len(node.children)}'
        )
    carets = 0
    for idx, child in enumerate(node.children):
        if child.parent is not node:
            raise ValidationError(f'[path {_where(path + (idx,))}] parent link does not point at owner')
        carets += _check(child, path + (idx,), seen)
    return carets


def validate(root: Node) -> None:
    if root.parent is not None:
        raise ValidationError('validation must start at the root node')
    carets = _check(root, (), set())
    if carets > 1:
        raise ValidationError(f'expected at most one caret node, found {carets}')
