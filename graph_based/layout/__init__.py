# graph_based/layout/__init__.py
from graph_based.layout.errors import LayoutError
from graph_based.layout.levels import apply_levels, assign_levels
from graph_based.layout.force import ForceLayout, LayoutResult, layout_graph
from graph_based.layout.fit import fit_transform
from graph_based.layout.shapes import NodeShape, node_shape

__all__ = [
    "LayoutError", "assign_levels", "apply_levels",
    "ForceLayout", "LayoutResult", "layout_graph",
    "fit_transform", "NodeShape", "node_shape",
]
