from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .rect import Rect

LEAF = 'Leaf'
SUM = 'Sum'
PRODUCT = 'Product'
FRACTION = 'Fraction'

NODE_KINDS = (LEAF, SUM, PRODUCT, FRACTION)
CONTAINER_KINDS = frozenset({SUM, PRODUCT})

Path = Tuple[int, ...]


class InvalidMutation(Exception):
    pass


@dataclass(eq=False)
class Node:
    kind: str
    symbol: Optional[str] = None
    children: List["Node"] = field(default_factory=list)
    rect: Optional[Rect] = None
    _parent: Optional["weakref.ReferenceType[Node]"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.kind not in NODE_KINDS:
            raise ValueError(f'unknown node kind {self.kind!r}')
        if self.kind == LEAF:
            if self.children:
                raise InvalidMutation('leaf nodes cannot own children')
            if self.symbol is None:
                self.symbol = ''
        elif self.symbol is not None:
            raise ValueError(f'{self.kind} nodes carry no symbol')
        if self.kind == FRACTION and len(self.children) != 2:
            raise InvalidMutation(f'fraction needs exactly 2 children, got {len(self.children)}')
        for child in self.children:
            if child.parent is not None:
                raise InvalidMutation(f'{child!r} already has a parent')
            child._parent = weakref.ref(self)

    @classmethod
    def leaf(cls, symbol: str = '') -> "Node":
        return cls(LEAF, symbol=symbol)

    @classmethod
    def sum(cls, *children: "Node") -> "Node":
        return cls(SUM, children=list(children))

    @classmethod
    def product(cls, *children: "Node") -> "Node":
        return cls(PRODUCT, children=list(children))

    @classmethod
    def fraction(cls, numerator: "Node", denominator: "Node") -> "Node":
        return cls(FRACTION, children=[numerator, denominator])

    @property
    def parent(self) -> Optional["Node"]:
        return self._parent() if self._parent is not None else None

    @property
    def is_leaf(self) -> bool:
        return self.kind == LEAF

    @property
    def is_caret(self) -> bool:
        return self.kind == LEAF and not self.symbol

    @property
    def is_slot_placeholder(self) -> bool:
        """Empty leaf filling a fraction slot; it keeps the slot, it is not an edit position."""
        parent = self.parent
        return self.is_caret and parent is not None and parent.kind == FRACTION

    def index_in_parent(self) -> int:
        parent = self.parent
        if parent is None:
            return -1
        return _index_of(parent, self)

    def __repr__(self) -> str:
        if self.kind == LEAF:
            return f'Node({self.kind!r}, symbol={self.symbol!r})'
        return f'Node({self.kind!r}, children={len(self.children)})'


def _index_of(parent: Node, node: Node) -> int:
    for idx, child in enumerate(parent.children):
        if child is node:
            return idx
    raise InvalidMutation(f'{node!r} is not a child of {parent!r}')


def root_of(node: Node) -> Node:
    while node.parent is not None:
        node = node.parent
    return node


def iter_nodes(node: Node) -> Iterator[Node]:
    """Yield ``node`` and its descendants in document (pre-)order."""
    yield node
    for child in node.children:
        yield from iter_nodes(child)


def count_carets(node: Node) -> int:
    return sum(1 for n in iter_nodes(node) if n.is_caret and not n.is_slot_placeholder)


def invalidate(node: Node) -> None:
    """Drop memoized geometry on ``node`` and all of its ancestors."""
    current: Optional[Node] = node
    while current is not None:
        current.rect = None
        current = current.parent


def _incoming_carets(parent: Node, node: Node) -> int:
    if node.is_caret and parent.kind == FRACTION:
        return 0
    return count_carets(node)


def _check_attachable(parent: Node, node: Node, *, carets_leaving: int = 0) -> None:
    if node.parent is not None:
        raise InvalidMutation(f'{node!r} is already attached to {node.parent!r}')
    root = root_of(parent)
    if node is root:
        raise InvalidMutation(f'attaching {node!r} under {parent!r} would create a cycle')
    incoming = _incoming_carets(parent, node)
    if incoming and count_carets(root) - carets_leaving + incoming > 1:
        raise InvalidMutation('a caret node already exists in this tree')


def insert_child(parent: Node, node: Node, index: int = -1) -> None:
    """Attach ``node`` under ``parent`` at ``index`` (``-1`` appends)."""
    if parent.kind == LEAF:
        raise InvalidMutation(f'cannot insert into leaf {parent!r}')
    if parent.kind == FRACTION:
        raise InvalidMutation('fraction slots can only be replaced')
    size = len(parent.children)
    if index == -1:
        index = size
    if not 0 <= index <= size:
        raise InvalidMutation(f'index {index} out of range for {parent!r}')
    _check_attachable(parent, node)
    parent.children.insert(index, node)
    node._parent = weakref.ref(parent)
    invalidate(parent)


def remove_child(parent: Node, node: Node) -> None:
    idx = _index_of(parent, node)
    if parent.kind == FRACTION:
        raise InvalidMutation('fraction slots can only be replaced')
    del parent.children[idx]
    node._parent = None
    node.rect = None
    invalidate(parent)


def replace_child(parent: Node, old: Node, new: Node) -> None:
    """Put ``new`` in ``old``'s slot; ``old`` is detached."""
    idx = _index_of(parent, old)
    _check_attachable(parent, new, carets_leaving=count_carets(old))
    parent.children[idx] = new
    old._parent = None
    old.rect = None
    new._parent = weakref.ref(parent)
    invalidate(parent)


def replace_children(parent: Node, new_children: Sequence[Node]) -> None:
    new_children = list(new_children)
    if parent.kind == LEAF:
        raise InvalidMutation(f'cannot give children to leaf {parent!r}')
    if parent.kind == FRACTION and len(new_children) != 2:
        raise InvalidMutation(f'fraction needs exactly 2 children, got {len(new_children)}')
    if len({id(child) for child in new_children}) != len(new_children):
        raise InvalidMutation('the same node cannot appear twice among children')

    kept = {id(child) for child in parent.children}
    leaving = sum(count_carets(child) for child in parent.children)
    incoming = 0
    root = root_of(parent)
    for child in new_children:
        if id(child) in kept:
            incoming += _incoming_carets(parent, child)
            continue
        if child.parent is not None:
            raise InvalidMutation(f'{child!r} is already attached to {child.parent!r}')
        if child is root:
            raise InvalidMutation(f'attaching {child!r} under {parent!r} would create a cycle')
        incoming += _incoming_carets(parent, child)
    if incoming and count_carets(root) - leaving + incoming > 1:
        raise InvalidMutation('a caret node already exists in this tree')

    for child in parent.children:
        child._parent = None
        child.rect = None
    parent.children = new_children
    for child in new_children:
        child._parent = weakref.ref(parent)
    invalidate(parent)


def set_symbol(node: Node, symbol: str) -> None:
    if node.kind != LEAF:
        raise InvalidMutation(f'{node!r} is not a leaf')
    if not symbol and not node.is_caret and count_carets(root_of(node)):
        raise InvalidMutation('a caret node already exists in this tree')
    node.symbol = symbol
    invalidate(node)


def promote_leaf(node: Node, symbol: str) -> Node:
    """Turn leaf ``node`` into ``Product[Leaf(old symbol), Leaf(symbol)]`` in place."""
    if node.kind != LEAF or not node.symbol:
        raise InvalidMutation(f'only a leaf holding a symbol can be promoted, got {node!r}')
    if not symbol:
        raise InvalidMutation('promotion needs a non-empty symbol')
    previous = node.symbol
    node.kind = PRODUCT
    node.symbol = None
    node.children = []
    for sym in (previous, symbol):
        child = Node.leaf(sym)
        node.children.append(child)
        child._parent = weakref.ref(node)
    invalidate(node)
    return node


def node_path(node: Node) -> Path:
    path: List[int] = []
    current = node
    while current.parent is not None:
        path.append(current.index_in_parent())
        current = current.parent
    return tuple(reversed(path))


def node_at(root: Node, path: Iterable[int]) -> Node:
    node = root
    for idx in path:
        node = node.children[idx]
    return node


def clone_tree(node: Node) -> Node:
    """Deep copy of ``node`` (geometry included) as a fresh detached root."""
    copy = Node(node.kind, symbol=node.symbol, children=[clone_tree(c) for c in node.children])
    copy.rect = node.rect
    return copy
