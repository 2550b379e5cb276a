"""Pure dose calculation helpers.

Every function here is total: invalid divisors degrade to a zero (or
unrounded) result instead of raising, so a misconfigured ratio can never
abort a calculation.
"""

import math
from collections.abc import Iterable

from insulin_calculator.domain.dosing import (
    DoseBreakdown,
    InsulinSettings,
    SelectedFoodEntry,
)


def carbs_for_entry(entry: SelectedFoodEntry) -> float:
    """Return grams of carbohydrate for one selected food entry."""
    unit = entry.food.find_unit(entry.unit_id)
    if unit is None:
        return 0.0
    carbs_per_gram = entry.food.base_carbs / 100
    return carbs_per_gram * unit.grams * entry.quantity


def total_carbs(entries: Iterable[SelectedFoodEntry]) -> float:
    """Return the summed carbohydrate grams of all entries."""
    return sum((carbs_for_entry(entry) for entry in entries), 0.0)


def insulin_for_carbs(total_carbs_g: float, carbs_per_insulin: float) -> float:
    """Return insulin units covering the given carbohydrate grams."""
    if not carbs_per_insulin > 0:
        return 0.0
    return total_carbs_g / carbs_per_insulin


def correction_insulin(
    current_glucose: float, target_glucose: float, correction_factor: float
) -> float:
    """Return correction units for glucose above target.

    Glucose at or below target yields zero; the correction never reduces
    the meal dose.
    """
    if not correction_factor > 0:
        return 0.0
    difference = current_glucose - target_glucose
    if not difference > 0:
        return 0.0
    return difference / correction_factor


def round_to_increment(raw_units: float, increment: float) -> float:
    """Round a dose up to the nearest multiple of the pen increment."""
    if not increment > 0 or not math.isfinite(raw_units):
        return raw_units
    steps = math.ceil(raw_units / increment)
    # Float noise can push the quotient just past an integer (1.1 / 0.1).
    if (steps - 1) * increment >= raw_units:
        steps -= 1
    return steps * increment


def total_dose(
    total_carbs_g: float,
    current_glucose: float,
    target_glucose: float,
    settings: InsulinSettings,
) -> float:
    """Return the rounded meal plus correction dose."""
    meal = insulin_for_carbs(total_carbs_g, settings.carbs_per_insulin)
    correction = correction_insulin(
        current_glucose, target_glucose, settings.correction_factor
    )
    return round_to_increment(meal + correction, settings.insulin_increment)


def calculate_dose(
    entries: Iterable[SelectedFoodEntry],
    current_glucose: float,
    target_glucose: float,
    settings: InsulinSettings,
) -> DoseBreakdown:
    """Return the full breakdown of a dose for a set of meal entries."""
    carbs = total_carbs(entries)
    meal = insulin_for_carbs(carbs, settings.carbs_per_insulin)
    correction = correction_insulin(
        current_glucose, target_glucose, settings.correction_factor
    )
    raw = meal + correction
    return DoseBreakdown(
        total_carbs_g=carbs,
        meal_insulin=meal,
        correction_insulin=correction,
        raw_total=raw,
        total_dose=round_to_increment(raw, settings.insulin_increment),
    )
