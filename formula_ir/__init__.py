from .ast import (
    FRACTION,
    LEAF,
    PRODUCT,
    SUM,
    InvalidMutation,
    Node,
    insert_child,
    remove_child,
    replace_child,
    replace_children,
)
from .linearize import linearize
from .rect import Point, Rect
from .geometry import compute_bounds, UnboundGeometryError
from .structure import RenderedNode, structure_from_dict, format_structure
from .reconcile import reconcile, StructuralMismatch
from .selection import select
from .latex_codegen import generate_latex
from .serialize import to_dict, from_dict, dumps, loads, load_expression, dump_expression
from .typeset import typeset
from .validate import validate, ValidationError
from .settle import SettleScheduler
from .edit import EditSession
from .config import EditorConfig, get_editor_config, set_editor_config
from .samples import sample_expression

__all__ = [
    'LEAF',
    'SUM',
    'PRODUCT',
    'FRACTION',
    'Node',
    'InvalidMutation',
    'insert_child',
    'remove_child',
    'replace_child',
    'replace_children',
    'linearize',
    'Point',
    'Rect',
    'compute_bounds',
    'UnboundGeometryError',
    'RenderedNode',
    'structure_from_dict',
    'format_structure',
    'reconcile',
    'StructuralMismatch',
    'select',
    'generate_latex',
    'to_dict',
    'from_dict',
    'dumps',
    'loads',
    'load_expression',
    'dump_expression',
    'typeset',
    'validate',
    'ValidationError',
    'SettleScheduler',
    'EditSession',
    'EditorConfig',
    'get_editor_config',
    'set_editor_config',
    'sample_expression',
]
