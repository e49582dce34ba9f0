"""Per-entity solver variables.

Every entity (each slot plus the synthetic canvas) gets the same eight
unknowns from a single factory, stored in an arena with a name index.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from canvaslayout.constraints.errors import DuplicateEntityError
from canvaslayout.constraints.linear import LinearSystem, Variable
from canvaslayout.dsl.schema import SlotProperty


@dataclass(frozen=True)
class SlotVariables:
    """The eight geometric unknowns of one entity."""

    name: str
    left: Variable
    right: Variable
    top: Variable
    bottom: Variable
    width: Variable
    height: Variable
    center_x: Variable
    center_y: Variable

    def get(self, prop: SlotProperty) -> Variable:
        """Variable for a DSL property."""
        return getattr(self, _ATTRIBUTES[SlotProperty(prop)])


_ATTRIBUTES: dict[SlotProperty, str] = {
    SlotProperty.LEFT: "left",
    SlotProperty.RIGHT: "right",
    SlotProperty.TOP: "top",
    SlotProperty.BOTTOM: "bottom",
    SlotProperty.WIDTH: "width",
    SlotProperty.HEIGHT: "height",
    SlotProperty.CENTER_X: "center_x",
    SlotProperty.CENTER_Y: "center_y",
}


class VariableSpace:
    """Arena of SlotVariables indexed by entity name."""

    def __init__(self, system: LinearSystem) -> None:
        self._system = system
        self._arena: list[SlotVariables] = []
        self._index: dict[str, int] = {}

    def allocate(self, name: str) -> SlotVariables:
        """Create the eight variables for ``name``.

        Raises:
            DuplicateEntityError: If ``name`` already has variables.
        """
        if name in self._index:
            raise DuplicateEntityError(name)

        values = {
            attribute: self._system.variable(f"{name}.{prop.value}")
            for prop, attribute in _ATTRIBUTES.items()
        }
        entry = SlotVariables(name=name, **values)

        self._index[name] = len(self._arena)
        self._arena.append(entry)
        return entry

    def lookup(self, name: str) -> Optional[SlotVariables]:
        """Variables for ``name``, or None if it was never allocated."""
        position = self._index.get(name)
        if position is None:
            return None
        return self._arena[position]

    def names(self) -> list[str]:
        """Entity names in allocation order."""
        return [entry.name for entry in self._arena]

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[SlotVariables]:
        return iter(self._arena)

    def __len__(self) -> int:
        return len(self._arena)
