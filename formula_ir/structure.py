"""Description of what the external renderer actually drew."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from .rect import Rect

FLAT = 'Flat'
TWO_SLOT = 'TwoSlot'
ATOMIC = 'Atomic'

RENDERED_KINDS = (FLAT, TWO_SLOT, ATOMIC)


@dataclass(eq=False)
class RenderedNode:
    kind: str
    children: List["RenderedNode"] = field(default_factory=list)
    text: str = ''
    rect: Optional[Rect] = None
    measure: Optional[Callable[[], Rect]] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.kind not in RENDERED_KINDS:
            raise ValueError(f'unknown rendered kind {self.kind!r}')
        if self.kind == ATOMIC and self.children:
            raise ValueError('atomic rendered nodes have no children')
        if self.kind == TWO_SLOT and len(self.children) != 2:
            raise ValueError(f'two-slot rendered node needs 2 children, got {len(self.children)}')

    def bounding_rect(self) -> Optional[Rect]:
        """Return the measured rectangle, asking the renderer lazily when possible."""
        if self.rect is None and self.measure is not None:
            self.rect = self.measure()
        return self.rect


def _rect_from_payload(payload: Any) -> Optional[Rect]:
    if payload is None:
        return None
    if isinstance(payload, Mapping):
        return Rect(
            float(payload['x']),
            float(payload['y']),
            float(payload['width']),
            float(payload['height']),
        )
    if isinstance(payload, (list, tuple)) and len(payload) == 4:
        return Rect(*(float(v) for v in payload))
    raise ValueError(f'invalid rect payload {payload!r}')


def structure_from_dict(data: Mapping[str, Any]) -> RenderedNode:
    """Build a :class:`RenderedNode` tree from the extraction collaborator's JSON."""
    kind = data.get('kind')
    children = [structure_from_dict(child) for child in data.get('children', [])]
    return RenderedNode(
        kind,
        children=children,
        text=str(data.get('text') or ''),
        rect=_rect_from_payload(data.get('rect')),
    )


def structure_to_dict(node: RenderedNode) -> Dict[str, Any]:
    out: Dict[str, Any] = {'kind': node.kind}
    if node.kind == ATOMIC:
        out['text'] = node.text
    rect = node.rect
    if rect is not None:
        out['rect'] = list(rect.as_tuple())
    if node.children:
        out['children'] = [structure_to_dict(child) for child in node.children]
    return out


def format_structure(node: RenderedNode, indent: int = 0) -> str:
    """Indented one-line-per-node dump, handy when reconciliation fails."""
    line = '    ' * indent + node.kind
    if node.kind == ATOMIC:
        line += f' / {node.text!r}'
    if node.rect is not None:
        x, y, w, h = node.rect.as_tuple()
        line += f' @ ({x:g}, {y:g}, {w:g}x{h:g})'
    lines = [line]
    for child in node.children:
        lines.append(format_structure(child, indent + 1))
    return '\n'.join(lines)
