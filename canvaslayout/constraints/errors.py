"""Exceptions raised inside the layout pipeline.

None of these escape ``solve_layout``: parse errors drop the offending line,
unknown slots end up in ``failed_constraints``, and everything else reverts
the solve to its input frames.
"""


class LayoutError(Exception):
    """Base class for layout pipeline failures."""


class ConstraintParseError(LayoutError):
    """Raised when a DSL line does not match the constraint grammar."""

    def __init__(self, constraint: str, reason: str) -> None:
        super().__init__(f"{reason}: {constraint!r}")
        self.constraint = constraint
        self.reason = reason


class UnknownSlotError(LayoutError):
    """Raised when a constraint references an entity with no variables."""

    def __init__(self, slot: str) -> None:
        super().__init__(f"Unknown slot '{slot}'")
        self.slot = slot


class DuplicateEntityError(LayoutError):
    """Raised when variables are allocated twice for the same entity."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Variables already allocated for '{name}'")
        self.name = name


class ConstraintRejectedError(LayoutError):
    """Raised when the linear solver refuses a constraint."""
