"""Layout routes: DSL parsing and constraint solving."""

import logging

from fastapi import APIRouter, Depends

from canvaslayout.api.config import Settings, get_settings
from canvaslayout.api.schemas import ApplyRequest, SolveRequest
from canvaslayout.constraints.engine import LayoutEngine
from canvaslayout.constraints.parser import parse_constraints
from canvaslayout.constraints.solver import solve_layout
from canvaslayout.dsl.schema import ConstraintSet, ParsedConstraintSet, SolverResult

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/parse", response_model=ParsedConstraintSet)
def parse_constraint_set(constraints: ConstraintSet):
    """Parse a template constraint set, dropping lines that do not parse."""
    return parse_constraints(constraints)


@router.post("/solve", response_model=SolverResult, response_model_exclude_none=True)
def solve(request: SolveRequest, settings: Settings = Depends(get_settings)):
    """Solve parsed constraints.

    Always answers 200: partial or total failures are reported in ``error``.
    """
    options = request.options.to_solver_options(settings)
    result = solve_layout(request.frames, request.constraints, options)

    if result.error is not None:
        logger.info(f"Solve returned degraded result: {result.error.message}")

    return result


@router.post("/apply", response_model=SolverResult, response_model_exclude_none=True)
def apply(request: ApplyRequest, settings: Settings = Depends(get_settings)):
    """Parse a constraint set and solve it for the requested aspect ratio."""
    options = request.options.to_solver_options(settings)
    engine = LayoutEngine(
        canvas_width=options.canvas_width,
        canvas_height=options.canvas_height,
        min_slot_width=options.min_slot_width,
        min_slot_height=options.min_slot_height,
        default_dimensions=options.default_dimensions,
    )

    return engine.apply(
        options.slot_names,
        request.constraints,
        frames=request.frames,
        ratio=request.ratio,
        seed_missing=request.seed_missing,
    )
