"""Expression tree → linear LaTeX-style notation."""

from .generator import (
    generate_latex,
    is_operator_symbol,
)

__all__ = [
    "generate_latex",
    "is_operator_symbol",
]
