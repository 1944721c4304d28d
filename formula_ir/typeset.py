"""Reference typesetter for the generated notation.

Understands exactly what :mod:`formula_ir.latex_codegen` emits: ``{...}``
groups, ``\\frac{...}{...}`` and bare glyphs. Like the real rendering
pipeline it flattens runs into rows and collapses one-element runs, and it
lays glyphs out with fixed monospace metrics so every atomic element gets a
measurable rectangle.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from .config import EditorConfig, get_editor_config
from .rect import Rect
from .structure import ATOMIC, FLAT, TWO_SLOT, RenderedNode

logger = logging.getLogger(__name__)

WS = ' \t\r\n'
FRAC = '\\frac'

_command_re = re.compile(r'\\[A-Za-z]+')

Size = Tuple[float, float]


class Cursor:
    def __init__(self, text: str):
        self.text = text
        self.i = 0

    def peek(self) -> Optional[str]:
        return self.text[self.i] if self.i < len(self.text) else None

    def skip_ws(self) -> None:
        while self.i < len(self.text) and self.text[self.i] in WS:
            self.i += 1

    def error(self, message: str) -> SyntaxError:
        pointer = ' ' * self.i + '^'
        return SyntaxError(f'[col {self.i + 1}] {message}\n{self.text}\n{pointer}')


def _as_run(items: List[RenderedNode]) -> RenderedNode:
    if len(items) == 1:
        return items[0]
    return RenderedNode(FLAT, children=items)


def _matching_brace(cur: Cursor) -> int:
    depth = 0
    for j in range(cur.i, len(cur.text)):
        ch = cur.text[j]
        if ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return j
    raise cur.error('unterminated group')


def _parse_group(cur: Cursor) -> RenderedNode:
    cur.skip_ws()
    if cur.peek() != '{':
        raise cur.error("expected '{'")
    end = _matching_brace(cur)
    content = cur.text[cur.i + 1:end]
    if not any(ch in content for ch in '{\\' + WS):
        cur.i = end + 1
        return RenderedNode(ATOMIC, text=content)
    cur.i += 1
    return _as_run(_parse_run(cur, closing=True))


def _parse_item(cur: Cursor) -> RenderedNode:
    if cur.text.startswith(FRAC, cur.i):
        cur.i += len(FRAC)
        numerator = _parse_group(cur)
        denominator = _parse_group(cur)
        return RenderedNode(TWO_SLOT, children=[numerator, denominator])
    ch = cur.peek()
    if ch == '{':
        return _parse_group(cur)
    if ch == '\\':
        m = _command_re.match(cur.text, cur.i)
        if not m:
            raise cur.error('dangling backslash')
        cur.i = m.end()
        return RenderedNode(ATOMIC, text=m.group(0))
    cur.i += 1
    return RenderedNode(ATOMIC, text=ch or '')


def _parse_run(cur: Cursor, *, closing: bool) -> List[RenderedNode]:
    items: List[RenderedNode] = []
    while True:
        cur.skip_ws()
        ch = cur.peek()
        if ch is None:
            if closing:
                raise cur.error('unterminated group')
            return items
        if ch == '}':
            if not closing:
                raise cur.error("unexpected '}'")
            cur.i += 1
            return items
        items.append(_parse_item(cur))


def parse_notation(code: str) -> RenderedNode:
    """Parse ``code`` into an unmeasured rendered structure."""
    cur = Cursor(code)
    items = _parse_run(cur, closing=False)
    if len(items) == 1:
        return items[0]
    return RenderedNode(FLAT, children=items)


def _measure(node: RenderedNode, cfg: EditorConfig, sizes: Dict[int, Size]) -> Size:
    if node.kind == ATOMIC:
        size = (cfg.glyph_width * len(node.text), cfg.glyph_height)
    elif node.kind == FLAT:
        parts = [_measure(child, cfg, sizes) for child in node.children]
        width = sum(w for w, _ in parts) + cfg.glyph_gap * max(len(parts) - 1, 0)
        height = max((h for _, h in parts), default=cfg.glyph_height)
        size = (width, height)
    else:
        (w0, h0), (w1, h1) = (_measure(child, cfg, sizes) for child in node.children)
        size = (max(w0, w1), h0 + h1 + cfg.fraction_gap)
    sizes[id(node)] = size
    return size


def _place(node: RenderedNode, x: float, center_y: float, sizes: Dict[int, Size], cfg: EditorConfig) -> None:
    width, height = sizes[id(node)]
    top = center_y - height / 2
    node.rect = Rect(x, top, width, height)
    if node.kind == FLAT:
        cursor_x = x
        for child in node.children:
            _place(child, cursor_x, center_y, sizes, cfg)
            cursor_x += sizes[id(child)][0] + cfg.glyph_gap
    elif node.kind == TWO_SLOT:
        numerator, denominator = node.children
        w0, h0 = sizes[id(numerator)]
        w1, h1 = sizes[id(denominator)]
        _place(numerator, x + (width - w0) / 2, top + h0 / 2, sizes, cfg)
        _place(denominator, x + (width - w1) / 2, top + h0 + cfg.fraction_gap + h1 / 2, sizes, cfg)


def typeset(code: str, *, config: Optional[EditorConfig] = None) -> RenderedNode:
    """Render ``code`` into a measured structure, top-left corner at the configured origin."""
    cfg = config or get_editor_config()
    root = parse_notation(code)
    sizes: Dict[int, Size] = {}
    _, height = _measure(root, cfg, sizes)
    _place(root, cfg.origin_x, cfg.origin_y + height / 2, sizes, cfg)
    logger.debug('Typeset %r into %s', code, root.kind)
    return root
