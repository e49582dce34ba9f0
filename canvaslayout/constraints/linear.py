"""Linear constraint system backed by kiwisolver (Cassowary).

LinearSystem is the only place that talks to the solving library. The layout
builder works with Strength, Relation and (coefficient, variable) terms, so a
different simplex implementation only has to provide this class.
"""

import logging
import math
from enum import Enum
from typing import Union

import kiwisolver

from canvaslayout.constraints.errors import ConstraintRejectedError
from canvaslayout.constraints.strength import Strength
from canvaslayout.dsl.schema import ConstraintOperator

logger = logging.getLogger(__name__)


_KIWI_STRENGTHS: dict[Strength, float] = {
    Strength.REQUIRED: kiwisolver.strength.required,
    Strength.STRONG: kiwisolver.strength.strong,
    Strength.MEDIUM: kiwisolver.strength.medium,
    Strength.WEAK: kiwisolver.strength.weak,
}

Variable = kiwisolver.Variable
Operand = Union[kiwisolver.Variable, kiwisolver.Expression, float]


class Relation(str, Enum):
    """Relations the solver understands."""

    EQ = "=="
    GE = ">="
    LE = "<="

    @classmethod
    def from_operator(cls, operator: ConstraintOperator) -> "Relation":
        """Map a DSL operator onto a solver relation.

        '>' and '<' have no strict form and behave as '>=' and '<='.
        """
        return {
            ConstraintOperator.EQ: cls.EQ,
            ConstraintOperator.GE: cls.GE,
            ConstraintOperator.GT: cls.GE,
            ConstraintOperator.LE: cls.LE,
            ConstraintOperator.LT: cls.LE,
        }[ConstraintOperator(operator)]


class LinearSystem:
    """One-shot constraint system: add constraints, solve once, read values."""

    def __init__(self) -> None:
        self._solver = kiwisolver.Solver()
        self.constraint_count = 0

    def variable(self, name: str) -> Variable:
        """Create a new unknown."""
        return kiwisolver.Variable(name)

    @staticmethod
    def expression(*terms: tuple[float, Variable], constant: float = 0.0) -> kiwisolver.Expression:
        """Build ``sum(coefficient * variable) + constant``.

        Args:
            terms: (coefficient, variable) pairs.
            constant: Constant term.

        Returns:
            Expression usable on either side of ``add``.

        Raises:
            ConstraintRejectedError: If a coefficient or the constant is not finite.
        """
        for coefficient, variable in terms:
            _require_finite(coefficient, f"coefficient of {variable.name()}")
        _require_finite(constant, "constant")

        return kiwisolver.Expression(
            [kiwisolver.Term(variable, float(coefficient)) for coefficient, variable in terms],
            float(constant),
        )

    def add(self, lhs: Operand, relation: Relation, rhs: Operand, strength: Strength) -> None:
        """Add ``lhs <relation> rhs`` at the given strength.

        Raises:
            ConstraintRejectedError: If the solver refuses the constraint, e.g. a
                required constraint that contradicts earlier required ones, or
                a non-finite numeric side.
        """
        for side in (lhs, rhs):
            if isinstance(side, (int, float)):
                _require_finite(side, "value")

        if relation == Relation.EQ:
            constraint = lhs == rhs
        elif relation == Relation.GE:
            constraint = lhs >= rhs
        else:
            constraint = lhs <= rhs

        constraint = constraint | _KIWI_STRENGTHS[strength]

        try:
            self._solver.addConstraint(constraint)
        except (kiwisolver.UnsatisfiableConstraint, kiwisolver.DuplicateConstraint) as e:
            raise ConstraintRejectedError(
                f"{type(e).__name__} at {strength.name.lower()} strength: {lhs} {relation.value} {rhs}"
            ) from e

        self.constraint_count += 1

    def solve(self) -> None:
        """Push the current solution into every variable."""
        self._solver.updateVariables()
        logger.debug(f"Solved linear system with {self.constraint_count} constraints")

    @staticmethod
    def value(variable: Variable) -> float:
        """Solved value of a variable."""
        return variable.value()


def _require_finite(number: float, what: str) -> None:
    # kiwisolver aborts the interpreter on infinite coefficients
    if not math.isfinite(number):
        raise ConstraintRejectedError(f"Non-finite {what}: {number}")
