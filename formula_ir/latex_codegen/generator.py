"""Notation consumed by the external typesetting engine.

``Sum`` and ``Product`` emit bare, space-joined runs; the typesetter is
expected to flatten them into one row of siblings. Non-operator leaves are
braced so multi-character or decorated tokens stay atomic to the
typesetter's own tokenizer.
"""

from __future__ import annotations

from typing import AbstractSet, Optional

from ..ast import CONTAINER_KINDS, FRACTION, LEAF, Node
from ..config import get_editor_config


def is_operator_symbol(symbol: str, operators: Optional[AbstractSet[str]] = None) -> bool:
    if operators is None:
        operators = get_editor_config().operator_symbols
    return symbol in operators


def _leaf_code(symbol: str, operators: AbstractSet[str]) -> str:
    if symbol in operators:
        return symbol
    return "{" + symbol + "}"


def _slot_code(node: Node, operators: AbstractSet[str]) -> str:
    # \frac already groups its arguments; a single glyph needs no extra braces.
    if node.kind == LEAF and len(node.symbol or "") == 1:
        return node.symbol or ""
    return _generate(node, operators)


def _generate(node: Node, operators: AbstractSet[str]) -> str:
    if node.kind in CONTAINER_KINDS:
        return " ".join(_generate(child, operators) for child in node.children)
    if node.kind == FRACTION:
        numerator, denominator = node.children
        return (
            "\\frac{"
            + _slot_code(numerator, operators)
            + "}{"
            + _slot_code(denominator, operators)
            + "}"
        )
    if node.kind == LEAF:
        return _leaf_code(node.symbol or "", operators)
    raise ValueError(f"unknown node kind {node.kind!r}")


def generate_latex(node: Node, *, operators: Optional[AbstractSet[str]] = None) -> str:
    """Return the notation for the subtree rooted at ``node``."""
    if operators is None:
        operators = get_editor_config().operator_symbols
    return _generate(node, operators)
