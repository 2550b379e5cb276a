"""Domain models for the food catalog."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class Unit:
    """A named serving size converted to grams."""

    id: UUID
    name: str
    grams: float


@dataclass(frozen=True)
class UnitDraft:
    """Unit payload for create and update operations."""

    name: str
    grams: float


@dataclass(frozen=True)
class Food:
    """A catalog food with its carbohydrate density and units."""

    id: UUID
    name: str
    base_carbs: float
    units: list[Unit] = field(default_factory=list)

    def find_unit(self, unit_id: UUID) -> Unit | None:
        """Return the unit with the given id, if this food owns it."""
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        return None
