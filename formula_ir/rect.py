from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, NamedTuple, Tuple

import numpy as np


class Point(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in rendering-surface coordinates (y grows downward)."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"rectangle with negative extent: {self!r}")

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, point: Tuple[float, float]) -> bool:
        px, py = point
        return self.left <= px <= self.right and self.top <= py <= self.bottom

    def contains_rect(self, other: "Rect") -> bool:
        return (
            self.left <= other.left
            and self.top <= other.top
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def union(self, other: "Rect") -> "Rect":
        return Rect.enclosing([self, other])

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)

    @classmethod
    def from_edges(cls, left: float, top: float, right: float, bottom: float) -> "Rect":
        return cls(float(left), float(top), float(right - left), float(bottom - top))

    @classmethod
    def enclosing(cls, rects: Iterable["Rect"]) -> "Rect":
        edges = np.array([[r.left, r.top, r.right, r.bottom] for r in rects], dtype=float)
        if edges.size == 0:
            raise ValueError("cannot enclose an empty set of rectangles")
        left, top = edges[:, :2].min(axis=0)
        right, bottom = edges[:, 2:].max(axis=0)
        return cls.from_edges(left, top, right, bottom)
