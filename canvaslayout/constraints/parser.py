"""Parse constraint DSL strings into ParsedConstraint models.

Supported forms:
    - Equality: "cta.bottom = canvas.bottom - 32"
    - Inequality: "headline.top >= logo.bottom + 12"
    - Expressions: "subject.height <= canvas.height * 0.45"

Lines that do not parse are logged and dropped; they never reach the solver.
"""

import logging
import re
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from canvaslayout.constraints.errors import ConstraintParseError
from canvaslayout.dsl.schema import (
    ConstraintOperator,
    ConstraintRule,
    ConstraintSet,
    OperandRef,
    ParsedConstraint,
    ParsedConstraintSet,
    SlotProperty,
    SlotRef,
)

logger = logging.getLogger(__name__)


VALID_PROPERTIES = frozenset(prop.value for prop in SlotProperty)

_NUMBER = r"(?:\d+(?:\.\d*)?|\.\d+)"

# slot.property operator slot.property [+/- number] [* number]
CONSTRAINT_PATTERN = re.compile(
    r"(?P<left_slot>\w+)\.(?P<left_prop>\w+)\s*"
    r"(?P<operator>>=|<=|=|>|<)\s*"
    r"(?P<right_slot>\w+)\.(?P<right_prop>\w+)\s*"
    rf"(?P<offset>[+-]\s*{_NUMBER})?\s*"
    rf"(?P<multiplier>\*\s*{_NUMBER})?"
)


def parse_constraint_or_raise(constraint: str) -> ParsedConstraint:
    """Parse one DSL line.

    Args:
        constraint: Text such as "cta.bottom = canvas.bottom - 32".

    Returns:
        The parsed constraint.

    Raises:
        ConstraintParseError: If the line does not match the grammar or names a
            property outside the geometric whitelist.
    """
    if not isinstance(constraint, str):
        raise ConstraintParseError(repr(constraint), "Constraint is not a string")

    match = CONSTRAINT_PATTERN.fullmatch(constraint.strip())
    if not match:
        raise ConstraintParseError(constraint, "Failed to parse constraint")

    left_prop = match.group("left_prop")
    right_prop = match.group("right_prop")
    if left_prop not in VALID_PROPERTIES or right_prop not in VALID_PROPERTIES:
        raise ConstraintParseError(constraint, "Skipping non-geometric constraint")

    operator = ConstraintOperator(match.group("operator"))

    offset = None
    if match.group("offset"):
        offset = float(re.sub(r"\s", "", match.group("offset")))

    multiplier = None
    if match.group("multiplier"):
        multiplier = float(re.sub(r"[*\s]", "", match.group("multiplier")))

    return ParsedConstraint(
        type=operator.constraint_type,
        left=SlotRef(slot=match.group("left_slot"), property=SlotProperty(left_prop)),
        operator=operator,
        right=OperandRef(
            slot=match.group("right_slot"),
            property=SlotProperty(right_prop),
            offset=offset,
            multiplier=multiplier,
        ),
    )


def parse_constraint_string(constraint: str) -> Optional[ParsedConstraint]:
    """Parse one DSL line, returning None (with a warning) when it is invalid."""
    try:
        return parse_constraint_or_raise(constraint)
    except ConstraintParseError as e:
        logger.warning(str(e))
        return None


def parse_constraints(
    constraints: Union[ConstraintSet, dict[str, Any], None],
) -> ParsedConstraintSet:
    """Parse every rule of a template constraint set.

    Each rule contributes its ``eq`` line, then its ``ineq`` line. Entries that
    fail to parse are omitted, and a set or bucket of the wrong shape is logged
    and treated as empty; nothing is raised.

    Args:
        constraints: A ConstraintSet, or the raw ``{"global": [...],
            "byRatio": {...}}`` mapping from a template document.

    Returns:
        ParsedConstraintSet with the same bucket structure.
    """
    if constraints is None:
        return ParsedConstraintSet()

    if isinstance(constraints, ConstraintSet):
        global_rules: Iterable[Any] = constraints.global_
        by_ratio: Mapping[str, Any] = constraints.by_ratio
    elif isinstance(constraints, Mapping):
        global_rules = constraints.get("global") or []
        by_ratio = constraints.get("byRatio") or {}
    else:
        logger.warning(f"Ignoring constraint set of type {type(constraints).__name__}")
        return ParsedConstraintSet()

    if not isinstance(global_rules, list):
        logger.warning(f"Ignoring 'global' of type {type(global_rules).__name__}")
        global_rules = []
    if not isinstance(by_ratio, Mapping):
        logger.warning(f"Ignoring 'byRatio' of type {type(by_ratio).__name__}")
        by_ratio = {}

    result = ParsedConstraintSet(global_=_parse_rules(global_rules))

    for ratio, ratio_rules in by_ratio.items():
        if not isinstance(ratio_rules, list):
            logger.warning(f"Ignoring rules for ratio {ratio!r} of type {type(ratio_rules).__name__}")
            ratio_rules = []
        result.by_ratio[ratio] = _parse_rules(ratio_rules)

    logger.debug(
        f"Parsed {len(result.global_)} global constraints and "
        f"{sum(len(c) for c in result.by_ratio.values())} ratio constraints"
    )
    return result


def _parse_rules(rules: Iterable[Any]) -> list[ParsedConstraint]:
    """Parse the eq/ineq lines of a list of rules."""
    parsed: list[ParsedConstraint] = []

    for rule in rules:
        if not isinstance(rule, ConstraintRule):
            try:
                rule = ConstraintRule.model_validate(rule)
            except ValidationError as e:
                logger.warning(f"Skipping malformed constraint rule {rule!r}: {e.error_count()} error(s)")
                continue

        for line in (rule.eq, rule.ineq):
            if line:
                constraint = parse_constraint_string(line)
                if constraint is not None:
                    parsed.append(constraint)

    return parsed
