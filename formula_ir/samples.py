from __future__ import annotations

from typing import Any, Dict

from .ast import Node
from .serialize import from_dict

# (2a + 3) / 5 = 1
SAMPLE_EXPRESSION: Dict[str, Any] = {
    'kind': 'Sum',
    'children': [
        {
            'kind': 'Fraction',
            'children': [
                {
                    'kind': 'Sum',
                    'children': [
                        {
                            'kind': 'Product',
                            'children': [
                                {'kind': 'Leaf', 'symbol': '2', 'children': []},
                                {'kind': 'Leaf', 'symbol': 'a', 'children': []},
                            ],
                        },
                        {'kind': 'Leaf', 'symbol': '+', 'children': []},
                        {'kind': 'Leaf', 'symbol': '3', 'children': []},
                    ],
                },
                {'kind': 'Leaf', 'symbol': '5', 'children': []},
            ],
        },
        {'kind': 'Leaf', 'symbol': '=', 'children': []},
        {'kind': 'Leaf', 'symbol': '1', 'children': []},
    ],
}


def sample_expression() -> Node:
    return from_dict(SAMPLE_EXPRESSION)
