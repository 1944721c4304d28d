from formula_ir.ast import FRACTION, PRODUCT, SUM, Node, count_carets
from formula_ir.edit import (
    ARROW_LEFT,
    ARROW_RIGHT,
    BACKSPACE,
    EDITING,
    ENTER,
    ESCAPE,
    IDLE,
    SELECTED,
    EditSession,
)
from formula_ir.latex_codegen import generate_latex
from formula_ir.rect import Rect
from formula_ir.serialize import to_dict
from formula_ir.structure import ATOMIC, RenderedNode
from formula_ir.typeset import typeset
from formula_ir.validate import validate


def _session(tree):
    session = EditSession(tree, render=typeset)
    assert session.settle()
    return session


def _press(session, *keys):
    for key in keys:
        assert session.handle_key(key), key
        validate(session.root)
        assert session.settled


def _symbols(node):
    return [c.symbol if c.is_leaf else c.kind for c in node.children]


def _sum_2a_plus_3():
    return Node.sum(Node.product(Node.leaf('2'), Node.leaf('a')), Node.leaf('+'), Node.leaf('3'))


def _one_equals_two():
    return Node.sum(Node.leaf('1'), Node.leaf('='), Node.leaf('2'))


def test_click_selects_leaf_and_escape_returns_to_idle():
    session = _session(_sum_2a_plus_3())

    picked = session.pointer_down((17.0, 8.0))

    assert picked.symbol == 'a'
    assert session.state == SELECTED
    _press(session, ESCAPE)
    assert session.state == IDLE


def test_backspace_on_selected_leaf_leaves_caret_at_same_index():
    session = _session(_sum_2a_plus_3())
    session.pointer_down((17.0, 8.0))
    product = session.root.children[0]

    _press(session, BACKSPACE)

    assert session.state == EDITING
    assert session.selected is product
    assert product.children[1] is session.caret
    assert session.caret.is_caret
    assert generate_latex(session.root) == '{2} {} + {3}'


def test_typing_inside_product_inserts_after_caret_in_order():
    session = _session(_sum_2a_plus_3())
    session.pointer_down((17.0, 8.0))
    _press(session, BACKSPACE)
    product = session.root.children[0]

    _press(session, 'x', 'y')

    assert _symbols(product) == ['2', '', 'x', 'y']
    assert product.children[1] is session.caret
    assert generate_latex(session.root) == '{2} {} {x} {y} + {3}'


def test_arrow_right_puts_caret_beside_selection_in_parent():
    session = _session(_one_equals_two())
    session.pointer_down((5.0, 8.0))

    _press(session, ARROW_RIGHT)

    assert session.selected is session.root
    assert _symbols(session.root) == ['1', '', '=', '2']


def test_arrow_left_on_root_inserts_caret_at_front():
    session = _session(_one_equals_two())
    session.pointer_down((500.0, 500.0))
    assert session.selected is session.root

    _press(session, ARROW_LEFT)

    assert _symbols(session.root) == ['', '1', '=', '2']
    _press(session, ARROW_LEFT)
    assert session.root.children[0] is session.caret
    _press(session, ARROW_RIGHT, ARROW_RIGHT)
    assert session.root.children[2] is session.caret


def test_caret_clamps_at_right_end():
    session = _session(_one_equals_two())
    session.pointer_down((500.0, 500.0))
    _press(session, ARROW_RIGHT, ARROW_RIGHT)

    assert session.root.children[-1] is session.caret


def test_first_character_is_pending_then_promoted_to_product():
    session = _session(_one_equals_two())
    session.pointer_down((5.0, 8.0))
    _press(session, ARROW_RIGHT)
    caret = session.caret

    _press(session, 'x')
    assert caret.symbol == 'x'
    assert session.caret is caret

    _press(session, 'y')
    assert caret.kind == PRODUCT and caret.symbol is None
    assert session.selected is caret
    assert _symbols(caret) == ['', 'x', 'y']
    assert caret.children[0] is session.caret

    _press(session, 'z')
    assert _symbols(caret) == ['', 'x', 'y', 'z']
    assert generate_latex(session.root) == '{1} {} {x} {y} {z} = {2}'


def test_backspace_while_editing_removes_left_sibling():
    session = _session(_one_equals_two())
    session.pointer_down((5.0, 8.0))
    _press(session, ARROW_RIGHT)

    _press(session, BACKSPACE)
    assert _symbols(session.root) == ['', '=', '2']
    _press(session, BACKSPACE)
    assert _symbols(session.root) == ['', '=', '2']


def test_escape_removes_unfilled_caret():
    session = _session(_one_equals_two())
    session.pointer_down((5.0, 8.0))
    _press(session, ARROW_LEFT)

    _press(session, ESCAPE)

    assert session.state == IDLE
    assert session.caret is None
    assert generate_latex(session.root) == '{1} = {2}'


def test_escape_keeps_pending_symbol():
    session = _session(_one_equals_two())
    session.pointer_down((5.0, 8.0))
    _press(session, ARROW_LEFT, 'k', ESCAPE)

    assert generate_latex(session.root) == '{k} {1} = {2}'


def test_blur_and_click_outside_deselect():
    session = _session(_one_equals_two())
    session.pointer_down((5.0, 8.0))
    _press(session, ARROW_LEFT)

    session.pointer_down((0.0, 0.0), inside=False)

    assert session.state == IDLE
    assert len(session.root.children) == 3
    assert session.settled


def test_clicks_are_ignored_while_editing():
    session = _session(_one_equals_two())
    session.pointer_down((5.0, 8.0))
    _press(session, ARROW_LEFT)
    selected = session.selected

    session.pointer_down((29.0, 8.0))

    assert session.selected is selected
    assert session.state == EDITING


def test_drag_widens_selection():
    session = _session(_sum_2a_plus_3())

    session.pointer_down((5.0, 8.0))
    assert session.pointer_move((17.0, 8.0)) is session.root.children[0]
    assert session.pointer_move((41.0, 8.0)) is session.root
    session.pointer_up()
    assert session.pointer_move((5.0, 8.0)) is session.root


def test_backspace_on_root_container_leaves_single_caret():
    session = _session(_one_equals_two())
    session.pointer_down((500.0, 500.0))

    _press(session, BACKSPACE)

    assert session.root.kind == SUM
    assert session.root.children == [session.caret]
    assert generate_latex(session.root) == '{}'


def test_backspace_on_leaf_root_makes_caret_the_root():
    session = _session(Node.leaf('7'))
    session.pointer_down((5.0, 8.0))

    _press(session, BACKSPACE)
    assert session.root is session.caret

    _press(session, 'x', 'y')
    assert session.root.kind == PRODUCT
    assert _symbols(session.root) == ['', 'x', 'y']


def test_enter_on_fraction_opens_numerator():
    session = _session(Node.fraction(Node.leaf('2'), Node.leaf('5')))
    session.pointer_down((500.0, 500.0))

    _press(session, ENTER)

    frac = session.root
    assert frac.kind == FRACTION
    assert frac.children[0].kind == PRODUCT
    assert _symbols(frac.children[0]) == ['', '2']
    assert session.selected is frac.children[0]
    assert generate_latex(frac) == '\\frac{{} {2}}{5}'


def test_arrow_beside_fraction_slot_wraps_slot_in_product():
    session = _session(Node.fraction(Node.leaf('2'), Node.leaf('5')))
    picked = session.pointer_down((5.0, 28.0))
    assert picked.symbol == '5'

    _press(session, ARROW_RIGHT)

    denominator = session.root.children[1]
    assert denominator.kind == PRODUCT
    assert _symbols(denominator) == ['5', '']
    assert len(session.root.children) == 2


def test_backspace_on_fraction_slot_keeps_arity():
    session = _session(Node.fraction(Node.leaf('2'), Node.leaf('5')))
    session.pointer_down((5.0, 8.0))

    _press(session, BACKSPACE, ARROW_RIGHT, 'x', 'y')

    numerator = session.root.children[0]
    assert numerator.kind == PRODUCT
    assert _symbols(numerator) == ['', 'x', 'y']
    assert session.root.children[1].symbol == '5'


def test_enter_on_leaf_is_rejected_without_change():
    session = _session(_one_equals_two())
    session.pointer_down((5.0, 8.0))

    assert not session.handle_key(ENTER)

    assert session.state == SELECTED
    assert generate_latex(session.root) == '{1} = {2}'


def test_unknown_keys_are_ignored():
    session = _session(_one_equals_two())
    assert not session.handle_key('x')

    session.pointer_down((5.0, 8.0))
    assert not session.handle_key('Tab')
    _press(session, ARROW_LEFT)
    assert not session.handle_key('Shift')
    assert not session.handle_key(ENTER)


def test_structural_mismatch_rolls_back_the_event():
    session = _session(_one_equals_two())
    session.pointer_down((5.0, 8.0))
    session.render = lambda code: RenderedNode(ATOMIC, text='?', rect=Rect(0.0, 0.0, 1.0, 1.0))

    session.handle_key(ARROW_LEFT)

    assert generate_latex(session.root) == '{1} = {2}'
    assert session.state == SELECTED
    assert session.selected.symbol == '1'
    assert session.settled
    assert session.root.children[0].rect == Rect(0.0, 0.0, 10.0, 16.0)


def test_selection_is_ignored_before_first_settle():
    session = EditSession(_one_equals_two(), render=typeset)

    assert session.pointer_down((5.0, 8.0)) is None
    assert session.state == IDLE


def _fraction_equals_one():
    return Node.sum(Node.fraction(Node.leaf('2'), Node.leaf('5')), Node.leaf('='), Node.leaf('1'))


def test_escape_prunes_container_left_empty():
    session = _session(_sum_2a_plus_3())
    session.pointer_down((5.0, 8.0))

    _press(session, BACKSPACE, ARROW_RIGHT, BACKSPACE)
    assert _symbols(session.root.children[0]) == ['']
    _press(session, ESCAPE)

    assert session.state == IDLE
    assert _symbols(session.root) == ['+', '3']
    assert session.pointer_down((5.0, 8.0)).symbol == '+'


def test_escape_leaves_placeholder_in_emptied_fraction_slot():
    session = _session(Node.fraction(Node.product(Node.leaf('2'), Node.leaf('a')), Node.leaf('5')))
    session.pointer_down((5.0, 8.0))

    _press(session, BACKSPACE, ARROW_RIGHT, BACKSPACE, ESCAPE)

    numerator = session.root.children[0]
    assert numerator.is_slot_placeholder
    assert count_carets(session.root) == 0
    assert generate_latex(session.root) == '\\frac{{}}{5}'


def test_editing_elsewhere_after_leaving_fraction_slot_empty():
    session = _session(_fraction_equals_one())
    assert session.pointer_down((5.0, 28.0)).symbol == '5'
    _press(session, BACKSPACE, ESCAPE)

    assert session.state == IDLE
    assert session.root.children[0].children[1].is_slot_placeholder
    assert count_carets(session.root) == 0

    assert session.pointer_down((29.0, 18.0)).symbol == '1'
    _press(session, ARROW_LEFT, 'x')

    assert _symbols(session.root) == [FRACTION, '=', 'x', '1']


def test_enter_on_fraction_reuses_empty_numerator():
    session = _session(_fraction_equals_one())
    session.pointer_down((5.0, 8.0))
    _press(session, BACKSPACE, ESCAPE)
    frac = session.pointer_down((5.0, 18.0))
    assert frac.kind == FRACTION

    _press(session, ENTER, 'x')

    assert session.state == EDITING
    assert frac.children[0] is session.caret
    assert generate_latex(session.root) == '\\frac{x}{5} = {1}'


def test_rejected_key_leaves_tree_unchanged():
    tree = Node.sum(
        Node.fraction(Node.leaf('2'), Node.leaf('5')),
        Node.leaf('='),
        Node.product(Node.leaf('1'), Node.leaf()),
    )
    session = _session(tree)
    before = to_dict(session.root)
    assert session.pointer_down((5.0, 28.0)).symbol == '5'

    assert not session.handle_key(ARROW_RIGHT)

    assert to_dict(session.root) == before
    validate(session.root)
    assert session.state == SELECTED
    assert session.selected.symbol == '5'
    assert session.settled
