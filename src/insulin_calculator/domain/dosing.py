"""Domain models for insulin dosing."""

from dataclasses import dataclass
from uuid import UUID

from insulin_calculator.domain.foods import Food

SETTING_CARBS_PER_INSULIN = "carbsPerInsulin"
SETTING_CORRECTION_FACTOR = "correctionFactor"
SETTING_INSULIN_INCREMENT = "insulinIncrement"


@dataclass(frozen=True)
class InsulinSettings:
    """Parameters consumed by the dosing calculator."""

    carbs_per_insulin: float
    correction_factor: float
    insulin_increment: float

    def as_storage(self) -> dict[str, float]:
        """Return the values keyed by their stored setting names."""
        return {
            SETTING_CARBS_PER_INSULIN: self.carbs_per_insulin,
            SETTING_CORRECTION_FACTOR: self.correction_factor,
            SETTING_INSULIN_INCREMENT: self.insulin_increment,
        }


DEFAULT_SETTINGS = InsulinSettings(
    carbs_per_insulin=15,
    correction_factor=40,
    insulin_increment=1,
)


@dataclass(frozen=True)
class SelectedFoodEntry:
    """A food picked for the current meal with its unit and quantity."""

    food: Food
    unit_id: UUID
    quantity: float


@dataclass(frozen=True)
class DoseBreakdown:
    """Intermediate and final values of a dose calculation."""

    total_carbs_g: float
    meal_insulin: float
    correction_insulin: float
    raw_total: float
    total_dose: float
