import pytest

from formula_ir.ast import Node
from formula_ir.rect import Rect
from formula_ir.samples import SAMPLE_EXPRESSION, sample_expression
from formula_ir.serialize import dump_expression, from_dict, load_expression, loads, to_dict
from formula_ir.validate import validate


def test_sample_expression_round_trips():
    tree = sample_expression()

    validate(tree)
    assert to_dict(tree) == SAMPLE_EXPRESSION


def test_geometry_is_not_persisted():
    tree = Node.sum(Node.leaf('a'))
    tree.children[0].rect = Rect(1.0, 2.0, 3.0, 4.0)

    assert to_dict(tree) == {
        'kind': 'Sum',
        'children': [{'kind': 'Leaf', 'symbol': 'a', 'children': []}],
    }


def test_missing_symbol_deserializes_as_caret():
    tree = from_dict({'kind': 'Product', 'children': [{'kind': 'Leaf'}]})

    assert tree.children[0].is_caret


@pytest.mark.parametrize(
    'payload, message_part',
    [
        ({'kind': 'Sum', 'children': [{'kind': 'Power'}]}, '[path 0] unknown node kind'),
        ({'kind': 'Fraction', 'children': [{'kind': 'Leaf', 'symbol': '1'}]}, 'fraction needs exactly 2'),
        (
            {'kind': 'Sum', 'children': [{'kind': 'Leaf', 'symbol': 'a', 'children': [{'kind': 'Leaf'}]}]},
            'leaf nodes cannot have children',
        ),
        ({'kind': 'Sum', 'children': ['a']}, 'expected a node record'),
    ],
)
def test_malformed_records_raise_value_error(payload, message_part):
    with pytest.raises(ValueError) as exc:
        from_dict(payload)

    assert message_part in str(exc.value)


def test_dump_and_load_expression(tmp_path):
    path = tmp_path / 'expr.json'

    dump_expression(sample_expression(), path)
    loaded = load_expression(path)

    assert to_dict(loaded) == SAMPLE_EXPRESSION


def test_loads_parses_json_text():
    tree = loads('{"kind": "Fraction", "children": [{"kind": "Leaf", "symbol": "2"}, {"kind": "Leaf", "symbol": "5"}]}')

    assert [c.symbol for c in tree.children] == ['2', '5']
