"""Pydantic v2 models for the layout constraint DSL and solver boundary.

This module defines the data exchanged with the layout solver: slot frames,
parsed constraints, solver options and results, plus the constraint-set shape
stored inside template documents. All geometry is in canvas (viewBox) units.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# Name of the synthetic entity every constraint may reference
CANVAS = "canvas"

DEFAULT_MIN_SLOT_SIZE = 10.0
DEFAULT_SLOT_SIZE = 100.0


class SlotProperty(str, Enum):
    """Geometric properties a constraint may reference."""

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"
    WIDTH = "width"
    HEIGHT = "height"
    CENTER_X = "centerX"
    CENTER_Y = "centerY"


class ConstraintType(str, Enum):
    """Constraint kind, which decides its strength tier."""

    EQUALITY = "equality"
    INEQUALITY = "inequality"


class ConstraintOperator(str, Enum):
    """Comparison operators accepted by the DSL."""

    EQ = "="
    GE = ">="
    LE = "<="
    GT = ">"
    LT = "<"

    @property
    def constraint_type(self) -> ConstraintType:
        """Equality for '=', inequality for everything else."""
        if self is ConstraintOperator.EQ:
            return ConstraintType.EQUALITY
        return ConstraintType.INEQUALITY


# ============================================================================
# Geometry Models
# ============================================================================


class Frame(BaseModel):
    """Absolute position and size of a slot in canvas units."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    x: float = Field(description="Left position")
    y: float = Field(description="Top position")
    width: float = Field(description="Width")
    height: float = Field(description="Height")
    rotation: Optional[float] = Field(
        default=None, description="Rotation in degrees, never solved for"
    )

    @property
    def right(self) -> float:
        """Right edge position."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Bottom edge position."""
        return self.y + self.height

    @property
    def center_x(self) -> float:
        """Horizontal center."""
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        """Vertical center."""
        return self.y + self.height / 2

    def value_of(self, prop: SlotProperty) -> float:
        """Read a DSL property off the frame."""
        return {
            SlotProperty.LEFT: self.x,
            SlotProperty.RIGHT: self.right,
            SlotProperty.TOP: self.y,
            SlotProperty.BOTTOM: self.bottom,
            SlotProperty.WIDTH: self.width,
            SlotProperty.HEIGHT: self.height,
            SlotProperty.CENTER_X: self.center_x,
            SlotProperty.CENTER_Y: self.center_y,
        }[SlotProperty(prop)]


FrameMap = dict[str, Frame]


class Dimensions(BaseModel):
    """Width/height pair used for default slot sizes."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    width: float = Field(default=DEFAULT_SLOT_SIZE, ge=0)
    height: float = Field(default=DEFAULT_SLOT_SIZE, ge=0)


# ============================================================================
# Constraint Models
# ============================================================================


class SlotRef(BaseModel):
    """Left-hand side of a constraint: one property of one entity."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    slot: str
    property: SlotProperty


class OperandRef(SlotRef):
    """Right-hand side of a constraint: multiplier * property + offset."""

    offset: Optional[float] = None
    multiplier: Optional[float] = None


class ParsedConstraint(BaseModel):
    """A single constraint decoded from the DSL."""

    model_config = ConfigDict(frozen=True)

    type: ConstraintType
    left: SlotRef
    operator: ConstraintOperator
    right: OperandRef

    def slots(self) -> tuple[str, str]:
        """Entity names referenced on both sides."""
        return self.left.slot, self.right.slot

    def to_dsl(self) -> str:
        """Render the constraint back into DSL form."""
        text = (
            f"{self.left.slot}.{self.left.property.value} {self.operator.value} "
            f"{self.right.slot}.{self.right.property.value}"
        )
        if self.right.offset is not None:
            sign = "-" if self.right.offset < 0 else "+"
            text += f" {sign} {_format_number(abs(self.right.offset))}"
        if self.right.multiplier is not None:
            text += f" * {_format_number(self.right.multiplier)}"
        return text


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class ConstraintRule(BaseModel):
    """One constraint rule as stored in a template document.

    Only ``eq`` and ``ineq`` feed the linear solver; the other keys are kept so
    documents round-trip unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    eq: Optional[str] = Field(default=None, description="Equality constraint")
    ineq: Optional[str] = Field(default=None, description="Inequality constraint")
    avoid_overlap: Optional[list[str]] = Field(default=None, alias="avoidOverlap")
    with_: Optional[str] = Field(default=None, alias="with")
    switch: Optional[str] = None
    targets: Optional[list[str]] = None


class ConstraintSet(BaseModel):
    """Template constraints grouped into global and per-aspect-ratio buckets."""

    model_config = ConfigDict(populate_by_name=True)

    global_: list[ConstraintRule] = Field(default_factory=list, alias="global")
    by_ratio: dict[str, list[ConstraintRule]] = Field(default_factory=dict, alias="byRatio")


class ParsedConstraintSet(BaseModel):
    """Parsed counterpart of ConstraintSet with unparseable entries dropped."""

    model_config = ConfigDict(populate_by_name=True)

    global_: list[ParsedConstraint] = Field(default_factory=list, alias="global")
    by_ratio: dict[str, list[ParsedConstraint]] = Field(default_factory=dict, alias="byRatio")


# ============================================================================
# Solver Boundary Models
# ============================================================================


class SolverOptions(BaseModel):
    """Canvas geometry and slot configuration for one solve."""

    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    canvas_width: float = Field(alias="canvasWidth", ge=0, description="Canvas width in viewBox units")
    canvas_height: float = Field(alias="canvasHeight", ge=0, description="Canvas height in viewBox units")
    min_slot_width: float = Field(default=DEFAULT_MIN_SLOT_SIZE, alias="minSlotWidth", ge=0)
    min_slot_height: float = Field(default=DEFAULT_MIN_SLOT_SIZE, alias="minSlotHeight", ge=0)
    slot_names: list[str] = Field(default_factory=list, alias="slotNames")
    default_dimensions: Dimensions = Field(default_factory=Dimensions, alias="defaultDimensions")


class SolverError(BaseModel):
    """Diagnostic attached to a degraded solver result."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    details: Optional[Any] = None
    failed_constraints: Optional[list[ParsedConstraint]] = Field(
        default=None, alias="failedConstraints"
    )


class SolverResult(BaseModel):
    """Solved frames, plus a diagnostic when anything went wrong."""

    model_config = ConfigDict(populate_by_name=True)

    frames: FrameMap = Field(default_factory=dict)
    error: Optional[SolverError] = None

    @property
    def ok(self) -> bool:
        """True when the solve finished without any diagnostic."""
        return self.error is None
