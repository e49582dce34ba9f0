"""Constraint layout module - DSL parsing and Cassowary-based frame solving."""

from canvaslayout.constraints.engine import LayoutEngine
from canvaslayout.constraints.errors import (
    ConstraintParseError,
    ConstraintRejectedError,
    DuplicateEntityError,
    LayoutError,
    UnknownSlotError,
)
from canvaslayout.constraints.linear import LinearSystem, Relation
from canvaslayout.constraints.parser import (
    parse_constraint_or_raise,
    parse_constraint_string,
    parse_constraints,
)
from canvaslayout.constraints.solver import LayoutSolver, solve_layout
from canvaslayout.constraints.strength import Strength
from canvaslayout.constraints.variables import SlotVariables, VariableSpace

__all__ = [
    # Parsing
    "parse_constraint_string",
    "parse_constraint_or_raise",
    "parse_constraints",
    # Solving
    "LayoutSolver",
    "solve_layout",
    "LayoutEngine",
    "LinearSystem",
    "Relation",
    "Strength",
    "SlotVariables",
    "VariableSpace",
    # Errors
    "LayoutError",
    "ConstraintParseError",
    "UnknownSlotError",
    "DuplicateEntityError",
    "ConstraintRejectedError",
]
