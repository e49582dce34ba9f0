"""
schemas.py — Pydantic request models for the layout API.

Responses reuse the solver models from canvaslayout.dsl.schema directly.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from canvaslayout.api.config import Settings
from canvaslayout.dsl.schema import (
    ConstraintSet,
    Dimensions,
    FrameMap,
    ParsedConstraint,
    SolverOptions,
)


class CanvasOptionsSchema(BaseModel):
    """Solver options as sent by clients; omitted values come from settings."""

    model_config = ConfigDict(
        populate_by_name=True,
        allow_inf_nan=False,
        json_schema_extra={
            "example": {
                "canvasWidth": 1080,
                "canvasHeight": 1080,
                "slotNames": ["headline", "cta"],
            }
        },
    )

    canvas_width: float = Field(..., alias="canvasWidth", ge=0)
    canvas_height: float = Field(..., alias="canvasHeight", ge=0)
    min_slot_width: Optional[float] = Field(None, alias="minSlotWidth", ge=0)
    min_slot_height: Optional[float] = Field(None, alias="minSlotHeight", ge=0)
    slot_names: list[str] = Field(default_factory=list, alias="slotNames")
    default_dimensions: Optional[Dimensions] = Field(None, alias="defaultDimensions")

    def to_solver_options(self, settings: Settings) -> SolverOptions:
        """Merge request values over the configured defaults."""
        values = {**settings.solver_defaults, **self.model_dump(exclude_none=True)}
        return SolverOptions.model_validate(values)


class SolveRequest(BaseModel):
    """Solve already-parsed constraints."""

    frames: FrameMap = Field(default_factory=dict, description="Current frames by slot name")
    constraints: list[ParsedConstraint] = Field(default_factory=list)
    options: CanvasOptionsSchema


class ApplyRequest(BaseModel):
    """Parse a template constraint set and solve it for one aspect ratio."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "constraints": {
                    "global": [{"eq": "cta.bottom = canvas.bottom - 32"}],
                    "byRatio": {"9:16": [{"eq": "headline.width = canvas.width * 0.8"}]},
                },
                "ratio": "9:16",
                "options": {"canvasWidth": 1080, "canvasHeight": 1920, "slotNames": ["headline", "cta"]},
            }
        },
    )

    constraints: ConstraintSet = Field(default_factory=ConstraintSet)
    ratio: Optional[str] = Field(None, description="Aspect-ratio key, e.g. '1:1'")
    frames: FrameMap = Field(default_factory=dict)
    options: CanvasOptionsSchema
    seed_missing: bool = Field(True, alias="seedMissing")
