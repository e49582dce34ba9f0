"""Strength tiers for layout constraints."""

from enum import IntEnum

from canvaslayout.dsl.schema import ConstraintType


class Strength(IntEnum):
    """Constraint priority, highest first.

    REQUIRED constraints are never violated; the others are satisfied as well
    as possible, and a stronger tier always wins over any number of weaker ones.
    """

    REQUIRED = 4
    STRONG = 3
    MEDIUM = 2
    WEAK = 1

    @classmethod
    def for_user_constraint(cls, constraint_type: ConstraintType) -> "Strength":
        """Tier for an authored constraint: STRONG equalities, MEDIUM inequalities."""
        if constraint_type == ConstraintType.EQUALITY:
            return cls.STRONG
        return cls.MEDIUM
