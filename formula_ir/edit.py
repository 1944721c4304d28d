"""Selection and keyboard editing on top of the expression tree.

An :class:`EditSession` owns the root of one editing session and runs the
event loop of the editor: every handled pointer or key event mutates the tree
and then requests one settle pass (generate notation, render, reconcile,
aggregate). The caret is a real node in the tree: an empty-symbol leaf
placed among the children of the selected node.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .ast import (
    CONTAINER_KINDS,
    FRACTION,
    LEAF,
    PRODUCT,
    InvalidMutation,
    Node,
    Path,
    clone_tree,
    insert_child,
    node_at,
    node_path,
    promote_leaf,
    remove_child,
    replace_child,
    replace_children,
    set_symbol,
)
from .config import EditorConfig, get_editor_config
from .geometry import UnboundGeometryError, compute_bounds
from .latex_codegen import generate_latex, is_operator_symbol
from .rect import Point
from .reconcile import StructuralMismatch, reconcile
from .selection import select
from .settle import SettleScheduler
from .structure import RenderedNode

logger = logging.getLogger(__name__)

IDLE = 'Idle'
SELECTED = 'Selected'
EDITING = 'Editing'

ARROW_LEFT = 'ArrowLeft'
ARROW_RIGHT = 'ArrowRight'
BACKSPACE = 'Backspace'
ENTER = 'Enter'
ESCAPE = 'Escape'

Renderer = Callable[[str], RenderedNode]


@dataclass
class _Snapshot:
    root: Node
    selected: Optional[Path]
    caret: Optional[Path]
    typed_run: int
    settled: bool


class EditSession:
    def __init__(
        self,
        root: Node,
        render: Optional[Renderer] = None,
        *,
        scheduler: Optional[SettleScheduler] = None,
        config: Optional[EditorConfig] = None,
    ):
        self.root = root
        self.render = render
        self.scheduler = scheduler
        self.config = config or get_editor_config()
        self.selected: Optional[Node] = None
        self.caret: Optional[Node] = None
        self.drag_start: Optional[Point] = None
        self.settled = False
        # leaves typed after the caret since it last moved; keeps them in typing order
        self._typed_run = 0
        self._snapshot: Optional[_Snapshot] = None

    @property
    def state(self) -> str:
        if self.selected is None:
            return IDLE
        if self.caret is None:
            return SELECTED
        return EDITING

    # ------------------------------------------------------------------
    # settle loop

    def settle(self) -> bool:
        """Render, reconcile and aggregate the current tree.

        On a structural mismatch, or when a node is left without geometry, the
        session rolls back to the state captured before the first unsettled
        event.
        """
        if self.render is None:
            self.settled = False
            return False
        code = generate_latex(self.root, operators=self.config.operator_symbols)
        try:
            structure = self.render(code)
            reconcile(self.root, structure, config=self.config)
            compute_bounds(self.root)
        except StructuralMismatch as exc:
            logger.error("Settle failed for %r: %s", code, exc)
            self._rollback()
            return False
        except UnboundGeometryError as exc:
            logger.error("Settle left geometry unbound for %r: %s", code, exc)
            self._rollback()
            return False
        self.settled = True
        self._snapshot = None
        logger.info("Settled %r", code)
        return True

    def request_settle(self) -> None:
        self.settled = False
        if self.render is None:
            return
        if self.scheduler is not None:
            self.scheduler.schedule(self.settle)
        else:
            self.settle()

    def _take_snapshot(self) -> _Snapshot:
        return _Snapshot(
            root=clone_tree(self.root),
            selected=node_path(self.selected) if self.selected is not None else None,
            caret=node_path(self.caret) if self.caret is not None else None,
            typed_run=self._typed_run,
            settled=self.settled,
        )

    def _restore(self, snap: _Snapshot) -> None:
        self.root = snap.root
        self.selected = node_at(self.root, snap.selected) if snap.selected is not None else None
        self.caret = node_at(self.root, snap.caret) if snap.caret is not None else None
        self._typed_run = snap.typed_run
        self.settled = snap.settled
        self.drag_start = None

    def _rollback(self) -> None:
        snap = self._snapshot
        self._snapshot = None
        if snap is None:
            self.settled = False
            return
        self._restore(snap)
        logger.info("Rolled back to the last settled tree")

    def _committed(self, snapshot: _Snapshot) -> None:
        if self._snapshot is None:
            self._snapshot = snapshot
        self.request_settle()

    # ------------------------------------------------------------------
    # pointer

    def select(self, point_a: Tuple[float, float], point_b: Tuple[float, float]) -> Optional[Node]:
        if not self.settled:
            logger.debug("Ignoring selection request on unsettled geometry")
            return None
        self.selected = select(self.root, point_a, point_b)
        return self.selected

    def pointer_down(self, point: Tuple[float, float], *, inside: bool = True) -> Optional[Node]:
        if not inside:
            self.blur()
            return None
        if self.caret is not None:
            return self.selected
        picked = self.select(point, point)
        if picked is not None:
            self.drag_start = Point(*point)
        return picked

    def pointer_move(self, point: Tuple[float, float]) -> Optional[Node]:
        if self.drag_start is None:
            return self.selected
        picked = self.select(self.drag_start, point)
        return picked if picked is not None else self.selected

    def pointer_up(self) -> None:
        self.drag_start = None

    def blur(self) -> None:
        snapshot = self._take_snapshot()
        if self.deselect():
            self._committed(snapshot)

    def deselect(self) -> bool:
        """Drop selection and caret; return whether the tree changed."""
        changed = False
        caret = self.caret
        if caret is not None and caret.is_caret:
            parent = caret.parent
            if parent is not None and parent.kind != FRACTION:
                remove_child(parent, caret)
                self._prune_empty(parent)
                changed = True
        self.selected = None
        self.caret = None
        self.drag_start = None
        self._typed_run = 0
        return changed

    def _prune_empty(self, node: Node) -> None:
        """Drop ``node`` and any ancestors left without children.

        A fraction slot or the root cannot disappear, so the emptied container
        there is replaced by an empty leaf.
        """
        while node.kind in CONTAINER_KINDS and not node.children:
            parent = node.parent
            if parent is None:
                self.root = Node.leaf()
                return
            if parent.kind == FRACTION:
                replace_child(parent, node, Node.leaf())
                return
            remove_child(parent, node)
            node = parent

    # ------------------------------------------------------------------
    # keyboard

    def handle_key(self, key: str) -> bool:
        """Apply one key event; return whether it was accepted."""
        if self.selected is None:
            return False
        snapshot = self._take_snapshot()
        try:
            if self.caret is None:
                handled = self._handle_selected_key(key)
            else:
                handled = self._handle_editing_key(key)
        except InvalidMutation as exc:
            # a wrapper may already be in place when the insertion is refused
            self._restore(snapshot)
            logger.warning("Rejected %r in state %s: %s", key, self.state, exc)
            return False
        if handled:
            self._committed(snapshot)
        return handled

    def is_character_key(self, key: str) -> bool:
        return len(key) == 1 and (key.isalnum() or is_operator_symbol(key, self.config.operator_symbols))

    def _start_caret(self, caret: Node, selected: Node) -> None:
        self.caret = caret
        self.selected = selected
        self._typed_run = 0

    def _wrap_in_product(self, node: Node) -> Node:
        """Replace ``node`` by ``Product[node]`` and return the product."""
        product = Node(PRODUCT)
        parent = node.parent
        if parent is None:
            insert_child(product, node)
            self.root = product
        else:
            replace_child(parent, node, product)
            insert_child(product, node)
        return product

    def _handle_selected_key(self, key: str) -> bool:
        sel = self.selected
        if sel is None:
            return False

        if key == ESCAPE:
            self.deselect()
            return True
        if key not in (ARROW_LEFT, ARROW_RIGHT, ENTER, BACKSPACE):
            return False

        if sel.is_caret:
            # an empty slot left behind earlier becomes the caret again
            self._start_caret(sel, sel.parent or sel)
            return True

        caret = Node.leaf()
        if key in (ARROW_LEFT, ARROW_RIGHT):
            parent = sel.parent
            if parent is None:
                host = sel if sel.kind in CONTAINER_KINDS else self._wrap_in_product(sel)
                insert_child(host, caret, 0 if key == ARROW_LEFT else -1)
            else:
                host = self._wrap_in_product(sel) if parent.kind == FRACTION else parent
                idx = sel.index_in_parent()
                insert_child(host, caret, idx if key == ARROW_LEFT else idx + 1)
            self._start_caret(caret, host)
        elif key == ENTER:
            if sel.kind == LEAF:
                raise InvalidMutation(f'{sel!r} cannot hold a caret')
            if sel.kind == FRACTION:
                numerator = sel.children[0]
                if numerator.is_caret:
                    self._start_caret(numerator, sel)
                    return True
                host = self._wrap_in_product(numerator)
            else:
                host = sel
            insert_child(host, caret, 0)
            self._start_caret(caret, host)
        else:
            parent = sel.parent
            if parent is None:
                if sel.kind in CONTAINER_KINDS:
                    replace_children(sel, [caret])
                    self._start_caret(caret, sel)
                else:
                    self.root = caret
                    self._start_caret(caret, caret)
            else:
                replace_child(parent, sel, caret)
                self._start_caret(caret, parent)
        return True

    def _handle_editing_key(self, key: str) -> bool:
        caret = self.caret
        if caret is None:
            return False
        parent = caret.parent

        if key == ESCAPE:
            self.deselect()
            return True
        if key in (ARROW_LEFT, ARROW_RIGHT):
            self._typed_run = 0
            if parent is None or parent.kind == FRACTION:
                return True
            idx = caret.index_in_parent()
            step = -1 if key == ARROW_LEFT else 1
            target = min(max(idx + step, 0), len(parent.children) - 1)
            if target != idx:
                remove_child(parent, caret)
                insert_child(parent, caret, target)
            return True
        if key == BACKSPACE:
            if parent is None:
                return True
            idx = caret.index_in_parent()
            if idx > 0:
                remove_child(parent, parent.children[idx - 1])
            return True
        if self.is_character_key(key):
            self._type_character(key)
            return True
        return False

    def _type_character(self, ch: str) -> None:
        caret = self.caret
        if caret is None:
            return
        parent = caret.parent

        if parent is not None and parent.kind == PRODUCT:
            idx = caret.index_in_parent()
            insert_child(parent, Node.leaf(ch), min(idx + 1 + self._typed_run, len(parent.children)))
            self._typed_run += 1
            return

        if caret.symbol:
            product = promote_leaf(caret, ch)
            fresh = Node.leaf()
            insert_child(product, fresh, 0)
            self._start_caret(fresh, product)
            self._typed_run = len(product.children) - 1
            return

        self._update_symbol(ch)

    def _update_symbol(self, ch: str) -> None:
        caret = self.caret
        if caret is None:
            return
        set_symbol(caret, (caret.symbol or '') + ch)
