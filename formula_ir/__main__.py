import argparse
import logging
from typing import List, Optional, Sequence

from formula_ir import (
    EditSession,
    format_structure,
    generate_latex,
    load_expression,
    dump_expression,
    sample_expression,
    typeset,
    validate,
)
from formula_ir.ast import iter_nodes, node_path

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _geometry_lines(session: EditSession) -> List[str]:
    lines = []
    for node in iter_nodes(session.root):
        path = "/".join(str(i) for i in node_path(node)) or "<root>"
        label = node.kind if node.symbol is None else f"{node.kind} {node.symbol!r}"
        if node.rect is None:
            where = "unbound"
        else:
            x, y, w, h = node.rect.as_tuple()
            where = f"({x:g}, {y:g}, {w:g}x{h:g})"
        marker = " *" if node is session.selected else ""
        lines.append(f"{path:<12} {label:<16} {where}{marker}")
    return lines


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Drive the structural formula editor from the command line")
    parser.add_argument("path", nargs="?", help="Expression JSON file (default: built-in sample)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--select",
        nargs="+",
        type=float,
        metavar="COORD",
        help="Select with X Y (click) or X1 Y1 X2 Y2 (drag)",
    )
    parser.add_argument(
        "--key",
        dest="keys",
        action="append",
        default=[],
        help="Key to replay after selecting; repeat for several keys",
    )
    parser.add_argument(
        "--show-structure",
        action="store_true",
        help="Print the rendered structure of the final expression",
    )
    parser.add_argument(
        "--show-geometry",
        action="store_true",
        help="Print every node with its rectangle",
    )
    parser.add_argument(
        "--output",
        help="Write the edited expression as JSON to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    if args.path:
        logger.info("Loading expression from %s", args.path)
        root = load_expression(args.path)
    else:
        root = sample_expression()
    validate(root)

    session = EditSession(root, render=typeset)
    if not session.settle():
        logger.error("Initial render did not reconcile with the expression")
        raise SystemExit(1)

    if args.select:
        if len(args.select) not in (2, 4):
            parser.error("--select takes 2 or 4 coordinates")
        point_a = (args.select[0], args.select[1])
        point_b = (args.select[2], args.select[3]) if len(args.select) == 4 else point_a
        picked = session.select(point_a, point_b)
        logger.info("Selected %r", picked)

    for key in args.keys:
        if not session.handle_key(key):
            logger.warning("Key %r was not accepted in state %s", key, session.state)

    validate(session.root)
    code = generate_latex(session.root)
    print(code)

    if args.show_structure:
        print(format_structure(typeset(code)))
    if args.show_geometry:
        print("\n".join(_geometry_lines(session)))
    if args.output:
        dump_expression(session.root, args.output)
        logger.info("Wrote expression to %s", args.output)


if __name__ == "__main__":  # pragma: no cover
    main()
