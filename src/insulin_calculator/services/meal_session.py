"""In-memory meal assembly for a single dose calculation."""

import math
from dataclasses import dataclass, field, replace
from uuid import UUID

from insulin_calculator.domain.dosing import (
    DoseBreakdown,
    InsulinSettings,
    SelectedFoodEntry,
)
from insulin_calculator.domain.errors import ValidationError
from insulin_calculator.domain.foods import Food
from insulin_calculator.services import dosing


@dataclass
class MealSession:
    """Foods selected for the meal being dosed."""

    entries: list[SelectedFoodEntry] = field(default_factory=list)

    def add_food(self, food: Food) -> SelectedFoodEntry:
        """Select a food with its first unit and a quantity of one."""
        if not food.units:
            raise ValidationError(f"Food {food.name!r} has no units")
        entry = SelectedFoodEntry(food=food, unit_id=food.units[0].id, quantity=1)
        self.entries.append(entry)
        return entry

    def remove_entry(self, index: int) -> None:
        """Remove the entry at the given position."""
        del self.entries[index]

    def deselect_food(self, food_id: UUID) -> None:
        """Remove every entry for a food."""
        self.entries = [entry for entry in self.entries if entry.food.id != food_id]

    def update_unit(self, index: int, unit_id: UUID) -> None:
        """Switch the unit of an entry."""
        self.entries[index] = replace(self.entries[index], unit_id=unit_id)

    def update_quantity(self, index: int, quantity: float) -> None:
        """Change the quantity of an entry."""
        if not math.isfinite(quantity):
            raise ValidationError("Quantity must be a finite number")
        self.entries[index] = replace(self.entries[index], quantity=quantity)

    def selected_food_ids(self) -> set[UUID]:
        """Return ids of every food present in the session."""
        return {entry.food.id for entry in self.entries}

    def clear(self) -> None:
        """Discard all entries."""
        self.entries.clear()

    def total_carbs(self) -> float:
        """Return the carbohydrate grams of the whole meal."""
        return dosing.total_carbs(self.entries)

    def dose(
        self,
        current_glucose: float,
        target_glucose: float,
        settings: InsulinSettings,
    ) -> DoseBreakdown:
        """Return the dose breakdown for the meal."""
        return dosing.calculate_dose(
            self.entries, current_glucose, target_glucose, settings
        )
