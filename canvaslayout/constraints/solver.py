"""Constraint-based layout solver.

Computes the frame of every slot on a page from parsed DSL constraints. Each
call builds a fresh linear system:

1. Canvas variables pinned to the canvas size (required).
2. Slot identities (right = left + width, ...) and minimum sizes (required).
3. Default sizes (weak) and the caller's current frames (medium).
4. Authored constraints in list order: equalities strong, inequalities medium.

Same-strength conflicts are arbitrated by the solver following that add order.

solve_layout never raises. Constraints naming unknown slots are skipped and
reported; any other failure returns the input frames untouched.
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Union

from canvaslayout.constraints.errors import ConstraintRejectedError, UnknownSlotError
from canvaslayout.constraints.linear import LinearSystem, Relation
from canvaslayout.constraints.strength import Strength
from canvaslayout.constraints.variables import SlotVariables, VariableSpace
from canvaslayout.dsl.schema import (
    CANVAS,
    Frame,
    FrameMap,
    ParsedConstraint,
    SolverError,
    SolverOptions,
    SolverResult,
)

logger = logging.getLogger(__name__)


class LayoutSolver:
    """Solves slot frames for one canvas configuration."""

    def __init__(self, options: Union[SolverOptions, Mapping[str, Any]]) -> None:
        """Initialize the solver.

        Args:
            options: Canvas dimensions and slot configuration. Plain mappings
                are validated on the first solve.
        """
        self.options = options

    def solve(
        self,
        input_frames: Optional[Mapping[str, Frame]],
        constraints: Iterable[ParsedConstraint],
    ) -> SolverResult:
        """Solve the layout.

        Args:
            input_frames: Current frames, used as continuity hints and returned
                unchanged on failure.
            constraints: Parsed constraints, applied in order.

        Returns:
            SolverResult with solved frames. ``error`` is set when some
            constraints could not be applied (frames still solved) or when the
            whole solve failed (frames are the input frames).
        """
        input_frames = input_frames or {}

        try:
            frames, failed = self._run(input_frames, constraints)
        except Exception as e:
            logger.exception(f"Layout solve failed, keeping input frames: {e}")
            return SolverResult.model_construct(
                frames=dict(input_frames),
                error=SolverError(
                    message=str(e) or "Unknown solver error",
                    details={"exception": type(e).__name__},
                ),
            )

        if failed:
            return SolverResult(
                frames=frames,
                error=SolverError(
                    message=f"{len(failed)} constraint(s) could not be applied",
                    failed_constraints=failed,
                ),
            )

        return SolverResult(frames=frames)

    def _run(
        self,
        input_frames: Mapping[str, Frame],
        constraints: Iterable[ParsedConstraint],
    ) -> tuple[FrameMap, list[ParsedConstraint]]:
        options = SolverOptions.model_validate(self.options)
        current = {name: Frame.model_validate(frame) for name, frame in input_frames.items()}
        slot_names = list(dict.fromkeys(options.slot_names))

        system = LinearSystem()
        space = VariableSpace(system)

        self._pin_canvas(system, space.allocate(CANVAS), options)

        for name in slot_names:
            variables = space.allocate(name)
            self._add_slot_geometry(system, variables, options)
            self._add_size_suggestions(system, variables, options, current.get(name))

        failed: list[ParsedConstraint] = []
        for constraint in constraints:
            constraint = ParsedConstraint.model_validate(constraint)
            try:
                self._add_user_constraint(system, space, constraint)
            except (UnknownSlotError, ConstraintRejectedError) as e:
                logger.warning(f"Cannot add constraint '{constraint.to_dsl()}': {e}")
                failed.append(constraint)

        system.solve()

        logger.debug(
            f"Solved {len(slot_names)} slots with {system.constraint_count} constraints "
            f"({len(failed)} failed)"
        )
        return self._extract(system, space, slot_names, current), failed

    def _pin_canvas(self, system: LinearSystem, canvas: SlotVariables, options: SolverOptions) -> None:
        """Fix every canvas variable to a literal value."""
        width = options.canvas_width
        height = options.canvas_height

        pinned = [
            (canvas.left, 0.0),
            (canvas.top, 0.0),
            (canvas.width, width),
            (canvas.height, height),
            (canvas.right, width),
            (canvas.bottom, height),
            (canvas.center_x, width / 2),
            (canvas.center_y, height / 2),
        ]
        for variable, value in pinned:
            system.add(variable, Relation.EQ, value, Strength.REQUIRED)

    def _add_slot_geometry(self, system: LinearSystem, slot: SlotVariables, options: SolverOptions) -> None:
        """Identity and minimum-size constraints that always hold."""
        expr = system.expression
        system.add(slot.right, Relation.EQ, expr((1, slot.left), (1, slot.width)), Strength.REQUIRED)
        system.add(slot.bottom, Relation.EQ, expr((1, slot.top), (1, slot.height)), Strength.REQUIRED)
        system.add(slot.center_x, Relation.EQ, expr((1, slot.left), (0.5, slot.width)), Strength.REQUIRED)
        system.add(slot.center_y, Relation.EQ, expr((1, slot.top), (0.5, slot.height)), Strength.REQUIRED)

        system.add(slot.width, Relation.GE, options.min_slot_width, Strength.REQUIRED)
        system.add(slot.height, Relation.GE, options.min_slot_height, Strength.REQUIRED)

    def _add_size_suggestions(
        self,
        system: LinearSystem,
        slot: SlotVariables,
        options: SolverOptions,
        current: Optional[Frame],
    ) -> None:
        """Weak default size, plus medium continuity hints from the current frame."""
        system.add(slot.width, Relation.EQ, options.default_dimensions.width, Strength.WEAK)
        system.add(slot.height, Relation.EQ, options.default_dimensions.height, Strength.WEAK)

        if current is None:
            return

        system.add(slot.left, Relation.EQ, current.x, Strength.MEDIUM)
        system.add(slot.top, Relation.EQ, current.y, Strength.MEDIUM)
        system.add(slot.width, Relation.EQ, current.width, Strength.MEDIUM)
        system.add(slot.height, Relation.EQ, current.height, Strength.MEDIUM)

    def _add_user_constraint(
        self,
        system: LinearSystem,
        space: VariableSpace,
        constraint: ParsedConstraint,
    ) -> None:
        """Translate one authored constraint into solver terms.

        Raises:
            UnknownSlotError: If either side names an entity with no variables.
            ConstraintRejectedError: If the solver refuses the constraint.
        """
        left_vars = space.lookup(constraint.left.slot)
        if left_vars is None:
            raise UnknownSlotError(constraint.left.slot)

        right_vars = space.lookup(constraint.right.slot)
        if right_vars is None:
            raise UnknownSlotError(constraint.right.slot)

        multiplier = 1.0 if constraint.right.multiplier is None else constraint.right.multiplier
        offset = 0.0 if constraint.right.offset is None else constraint.right.offset

        rhs = system.expression(
            (multiplier, right_vars.get(constraint.right.property)),
            constant=offset,
        )

        system.add(
            left_vars.get(constraint.left.property),
            Relation.from_operator(constraint.operator),
            rhs,
            Strength.for_user_constraint(constraint.type),
        )

    def _extract(
        self,
        system: LinearSystem,
        space: VariableSpace,
        slot_names: list[str],
        current: Mapping[str, Frame],
    ) -> FrameMap:
        """Read solved values back into frames."""
        frames: FrameMap = {}

        for name in slot_names:
            slot = space.lookup(name)
            previous = current.get(name)
            frames[name] = Frame(
                x=_round(system.value(slot.left)),
                y=_round(system.value(slot.top)),
                width=_round(system.value(slot.width)),
                height=_round(system.value(slot.height)),
                rotation=previous.rotation if previous is not None else None,
            )

        return frames


def _round(value: float) -> float:
    # Two decimals; adding 0.0 turns -0.0 into 0.0
    return round(value, 2) + 0.0


def solve_layout(
    input_frames: Optional[Mapping[str, Frame]],
    constraints: Iterable[ParsedConstraint],
    options: Union[SolverOptions, Mapping[str, Any]],
) -> SolverResult:
    """Solve layout constraints and return the resulting frames.

    Args:
        input_frames: Current frame positions (returned unchanged on error).
        constraints: Parsed constraints from the DSL parser.
        options: Canvas dimensions and slot configuration.

    Returns:
        SolverResult; never raises.
    """
    return LayoutSolver(options).solve(input_frames, constraints)
