"""Constraint-based layout for template slots."""

from canvaslayout.constraints import LayoutEngine, LayoutSolver, parse_constraints, solve_layout

__version__ = "0.1.0"

__all__ = ["LayoutEngine", "LayoutSolver", "parse_constraints", "solve_layout"]
