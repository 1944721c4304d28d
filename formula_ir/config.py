"""Configuration helpers for editor components."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import FrozenSet

NUMERATOR_FIRST = "numerator-first"
DENOMINATOR_FIRST = "denominator-first"


@dataclass
class EditorConfig:
    """Knobs shared by the code generator, the reference typesetter and the settle loop."""

    settle_delay: float = 0.03
    operator_symbols: FrozenSet[str] = field(default_factory=lambda: frozenset({"=", "-", "+"}))
    glyph_width: float = 10.0
    glyph_height: float = 16.0
    glyph_gap: float = 2.0
    fraction_gap: float = 4.0
    origin_x: float = 0.0
    origin_y: float = 0.0
    fraction_slot_order: str = NUMERATOR_FIRST


_EDITOR_CONFIG = EditorConfig()


def get_editor_config() -> EditorConfig:
    return copy.deepcopy(_EDITOR_CONFIG)


def set_editor_config(config: EditorConfig) -> None:
    if config.fraction_slot_order not in (NUMERATOR_FIRST, DENOMINATOR_FIRST):
        raise ValueError(f"unknown fraction slot order {config.fraction_slot_order!r}")
    global _EDITOR_CONFIG
    _EDITOR_CONFIG = copy.deepcopy(config)
