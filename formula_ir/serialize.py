"""Persisted form of expression trees: ``{kind, symbol?, children}`` records.

Geometry is never written; it is always re-derived by a settle pass.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple, Union

from .ast import FRACTION, LEAF, NODE_KINDS, Node


def to_dict(node: Node) -> Dict[str, Any]:
    out: Dict[str, Any] = {'kind': node.kind}
    if node.kind == LEAF:
        out['symbol'] = node.symbol or ''
    out['children'] = [to_dict(child) for child in node.children]
    return out


def _from_dict(data: Any, path: Tuple[int, ...]) -> Node:
    where = '/'.join(str(i) for i in path) or '<root>'
    if not isinstance(data, Mapping):
        raise ValueError(f'[path {where}] expected a node record, got {type(data).__name__}')
    kind = data.get('kind')
    if kind not in NODE_KINDS:
        raise ValueError(f'[path {where}] unknown node kind {kind!r}')
    raw_children = data.get('children') or []
    if not isinstance(raw_children, list):
        raise ValueError(f'[path {where}] children must be a list')
    if kind == LEAF:
        if raw_children:
            raise ValueError(f'[path {where}] leaf nodes cannot have children')
        symbol = data.get('symbol') or ''
        if not isinstance(symbol, str):
            raise ValueError(f'[path {where}] leaf symbol must be a string')
        return Node.leaf(symbol)
    if kind == FRACTION and len(raw_children) != 2:
        raise ValueError(f'[path {where}] fraction needs exactly 2 children, got {len(raw_children)}')
    children = [_from_dict(child, path + (idx,)) for idx, child in enumerate(raw_children)]
    return Node(kind, children=children)


def from_dict(data: Mapping[str, Any]) -> Node:
    return _from_dict(data, ())


def dumps(node: Node, *, indent: Union[int, None] = 2) -> str:
    return json.dumps(to_dict(node), indent=indent, ensure_ascii=False)


def loads(text: str) -> Node:
    return from_dict(json.loads(text))


def load_expression(path: Union[str, Path]) -> Node:
    return loads(Path(path).read_text(encoding='utf-8'))


def dump_expression(node: Node, path: Union[str, Path]) -> None:
    Path(path).write_text(dumps(node) + '\n', encoding='utf-8')
