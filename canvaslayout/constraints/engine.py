"""Layout engine: page-level entry point around the constraint solver.

Picks the constraints active for an aspect ratio, seeds slots that have no
frame yet with a simple grid layout, and runs the solver.
"""

import logging
import math
from typing import Any, Optional, Union

from canvaslayout.constraints.parser import parse_constraints
from canvaslayout.constraints.solver import solve_layout
from canvaslayout.dsl.schema import (
    ConstraintSet,
    Dimensions,
    Frame,
    FrameMap,
    ParsedConstraint,
    ParsedConstraintSet,
    SolverError,
    SolverOptions,
    SolverResult,
)

logger = logging.getLogger(__name__)


# Fallback grid, as fractions of the view-box width/height
GRID_PADDING = 0.03
GRID_SPACING = 0.11
GRID_SLOT_SIZE = 0.09

ViewBox = tuple[float, float, float, float]


class LayoutEngine:
    """Lays out the slots of a page for a given canvas size and aspect ratio."""

    def __init__(
        self,
        canvas_width: float,
        canvas_height: float,
        min_slot_width: float = 10.0,
        min_slot_height: float = 10.0,
        default_dimensions: Optional[Dimensions] = None,
        view_box: Optional[ViewBox] = None,
    ) -> None:
        """Initialize the layout engine.

        Args:
            canvas_width: Canvas width in viewBox units.
            canvas_height: Canvas height in viewBox units.
            min_slot_width: Smallest width any slot may be solved to.
            min_slot_height: Smallest height any slot may be solved to.
            default_dimensions: Weak size suggestion for unconstrained slots.
            view_box: (x, y, width, height) used for the fallback grid.
                Defaults to the canvas rectangle.
        """
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.min_slot_width = min_slot_width
        self.min_slot_height = min_slot_height
        self.default_dimensions = default_dimensions or Dimensions()
        self.view_box = view_box or (0.0, 0.0, canvas_width, canvas_height)

    def options_for(self, slot_names: list[str]) -> SolverOptions:
        """Solver options for this canvas and the given slots."""
        return SolverOptions(
            canvas_width=self.canvas_width,
            canvas_height=self.canvas_height,
            min_slot_width=self.min_slot_width,
            min_slot_height=self.min_slot_height,
            slot_names=slot_names,
            default_dimensions=self.default_dimensions,
        )

    @staticmethod
    def active_constraints(
        parsed: ParsedConstraintSet,
        ratio: Optional[str] = None,
    ) -> list[ParsedConstraint]:
        """Global constraints followed by the ones for ``ratio``."""
        active = list(parsed.global_)
        if ratio and ratio in parsed.by_ratio:
            active.extend(parsed.by_ratio[ratio])
        return active

    def fallback_frames(self, slot_names: list[str]) -> FrameMap:
        """Place slots on a square-ish grid inside the view box."""
        vb_x, vb_y, vb_width, vb_height = self.view_box
        pad = vb_width * GRID_PADDING
        spacing = vb_width * GRID_SPACING
        cols = math.ceil(math.sqrt(len(slot_names))) if slot_names else 1

        frames: FrameMap = {}
        for index, name in enumerate(slot_names):
            col = index % cols
            row = index // cols
            frames[name] = Frame(
                x=vb_x + pad + col * spacing,
                y=vb_y + pad + row * spacing,
                width=vb_width * GRID_SLOT_SIZE,
                height=vb_height * GRID_SLOT_SIZE,
            )
        return frames

    def apply(
        self,
        slot_names: list[str],
        constraints: Union[ConstraintSet, ParsedConstraintSet, dict[str, Any], None],
        frames: Optional[FrameMap] = None,
        ratio: Optional[str] = None,
        seed_missing: bool = True,
    ) -> SolverResult:
        """Solve the page layout for ``ratio``.

        Args:
            slot_names: Slots on the page.
            constraints: Template constraint set, raw or already parsed.
            frames: Current frames; used as continuity hints.
            ratio: Aspect-ratio key such as "1:1" or "9:16".
            seed_missing: Give slots without a frame a grid position hint.

        Returns:
            SolverResult from the solver. Never raises.
        """
        frames = dict(frames or {})

        try:
            if isinstance(constraints, ParsedConstraintSet):
                parsed = constraints
            else:
                parsed = parse_constraints(constraints)
            active = self.active_constraints(parsed, ratio)
            hints = dict(frames)
            if seed_missing:
                missing = [name for name in slot_names if name not in hints]
                if missing:
                    logger.info(f"Seeding {len(missing)} slot(s) without frames from the fallback grid")
                    hints.update(self.fallback_frames(missing))
            options = self.options_for(list(slot_names))
        except Exception as e:
            logger.exception(f"Could not prepare layout, keeping input frames: {e}")
            return SolverResult.model_construct(
                frames=frames,
                error=SolverError(message=str(e) or "Unknown layout error", details={"exception": type(e).__name__}),
            )

        logger.debug(f"Applying {len(active)} constraints for ratio {ratio or 'default'}")
        result = solve_layout(hints, active, options)

        # Total failure echoes the hints; the caller only gets back what it sent
        if result.error is not None and result.error.failed_constraints is None:
            return SolverResult.model_construct(frames=frames, error=result.error)
        return result
