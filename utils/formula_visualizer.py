# utils/formula_visualizer.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Graphviz rendering of formula trees annotated with evaluation status

import os
from typing import Dict, Optional

from graphviz import Digraph

from core.evaluator import TraceEvaluator
from core.verdict import Verdict
from model.trace import Trace
from parser.ast_nodes import Atomic, Formula, iter_postorder
from utils.logger import get_logger

logger = get_logger(__name__)

VISUALIZATION_OUTPUT_FOLDER = "formula_visualizations"

STATUS_COLORS = {
    Verdict.TRUE: "palegreen",
    Verdict.FALSE: "lightcoral",
    Verdict.PENDING: "lightgrey",
}


class _LabelVisitor:
    """Short operator label for each node, the full text for atoms."""

    def visit_atomic(self, n):
        return n.name

    def visit_not(self, n):
        return "!"

    def visit_and(self, n):
        return "&"

    def visit_or(self, n):
        return "|"

    def visit_implies(self, n):
        return "->"

    def visit_next(self, n):
        return "X"

    def visit_always(self, n):
        return "G"

    def visit_eventually(self, n):
        return "F"

    def visit_until(self, n):
        return "U"

    def visit_release(self, n):
        return "R"

    def visit_always_timed(self, n):
        return f"G{n.interval}"

    def visit_eventually_timed(self, n):
        return f"F{n.interval}"

    def visit_until_timed(self, n):
        return f"U{n.interval}"


_LABELS = _LabelVisitor()


def build_formula_graph(
    formula: Formula,
    trace: Optional[Trace] = None,
    index: int = 0,
    closed: bool = True,
    fmt: str = "png",
) -> Digraph:
    """
    Builds a Graphviz diagram of a formula tree. Shared subformulas appear
    once. When a trace is given each node is colored by its status at
    `index` and labelled with the failure reason.

    Args:
        formula: Formula to draw.
        trace: Optional trace to evaluate the nodes against.
        index: Start index the statuses refer to.
        closed: Whether the trace is treated as complete.
        fmt: The output format for the image (e.g., "png", "svg").

    Returns:
        The Digraph, ready for rendering or inspection of its source.
    """
    evaluator = TraceEvaluator(trace, closed=closed) if trace is not None else None

    dot = Digraph(comment=f"Formula {formula}", format=fmt)
    dot.attr(rankdir="TB", nodesep="0.4", ranksep="0.5")

    node_ids: Dict[int, str] = {}
    for position, node in enumerate(iter_postorder(formula)):
        node_id = f"N{position}"
        node_ids[id(node)] = node_id

        label = node.accept(_LABELS)
        color = "white"
        if evaluator is not None:
            cell = evaluator.cell(node, index)
            color = STATUS_COLORS[cell.status]
            label += f"\n{cell.status}"
            if cell.status is Verdict.FALSE and cell.reason:
                label += f"\n{cell.reason}"

        shape = "ellipse" if isinstance(node, Atomic) else "box"
        dot.node(node_id, label, shape=shape, style="filled", fillcolor=color)

        for child in node.children():
            dot.edge(node_id, node_ids[id(child)])

    return dot


def visualize_formula(
    formula: Formula,
    base_filename: str,
    trace: Optional[Trace] = None,
    index: int = 0,
    fmt: str = "png",
) -> Optional[str]:
    """
    Renders a formula diagram into the 'formula_visualizations' folder.

    Args:
        formula: Formula to draw.
        base_filename: The base name for the output file.
        trace: Optional trace whose evaluation colors the nodes.
        index: Start index the statuses refer to.
        fmt: The output format for the image.

    Returns:
        Path of the rendered file.
    """
    dot = build_formula_graph(formula, trace, index, fmt=fmt)

    # Ensure the output directory exists and define output_path
    if not os.path.exists(VISUALIZATION_OUTPUT_FOLDER):
        try:
            os.makedirs(VISUALIZATION_OUTPUT_FOLDER)
            logger.info(f"Created directory for formula visualizations: {VISUALIZATION_OUTPUT_FOLDER}")
            output_path = os.path.join(VISUALIZATION_OUTPUT_FOLDER, base_filename)
        except OSError as e:
            logger.error(f"Could not create directory {VISUALIZATION_OUTPUT_FOLDER}: {e}. "
                         f"Saving to current directory instead.")
            output_path = base_filename  # Fallback
    else:
        output_path = os.path.join(VISUALIZATION_OUTPUT_FOLDER, base_filename)

    rendered = dot.render(output_path, cleanup=True)
    logger.info(f"Formula visualization saved to {rendered}")
    return rendered
