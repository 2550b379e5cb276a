"""Services for managing the food catalog."""

import asyncio
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from insulin_calculator.domain.errors import NotFoundError, ValidationError
from insulin_calculator.domain.foods import Food, UnitDraft

_logger = logging.getLogger(__name__)


class FoodCatalogRepository(Protocol):
    """Persistence interface for foods and their units."""

    def list_foods(self) -> list[Food]:
        """Return all foods ordered by name."""

    def get_food(self, food_id: UUID) -> Food | None:
        """Return a food by id, if present."""

    def search_foods(self, query: str) -> list[Food]:
        """Return foods whose name contains the query, ignoring case."""

    def create_food(
        self, name: str, base_carbs: float, units: list[UnitDraft]
    ) -> Food:
        """Insert a food with its units and return it."""

    def replace_food(
        self, food_id: UUID, name: str, base_carbs: float, units: list[UnitDraft]
    ) -> Food | None:
        """Overwrite a food and its whole unit set, or return None if missing."""

    def delete_food(self, food_id: UUID) -> bool:
        """Delete a food and its units, returning True if a row was removed."""

    def count_foods(self) -> int:
        """Return the number of stored foods."""


@dataclass
class FoodCatalogService:
    """Application service for catalog operations."""

    repository: FoodCatalogRepository

    async def list_foods(self) -> list[Food]:
        """Return every food sorted by name."""
        return await asyncio.to_thread(self.repository.list_foods)

    async def get_food(self, food_id: UUID) -> Food | None:
        """Return a food by id, or None when it does not exist."""
        return await asyncio.to_thread(self.repository.get_food, food_id)

    async def search_foods(self, query: str) -> list[Food]:
        """Return foods whose name contains the query."""
        return await asyncio.to_thread(self.repository.search_foods, query)

    async def count_foods(self) -> int:
        """Return the number of foods in the catalog."""
        return await asyncio.to_thread(self.repository.count_foods)

    async def create_food(
        self, name: str, base_carbs: float, units: Iterable[UnitDraft]
    ) -> Food:
        """Validate and create a food with fresh ids."""
        clean_name, clean_units = _validate_food(name, base_carbs, units)
        food = await asyncio.to_thread(
            self.repository.create_food, clean_name, float(base_carbs), clean_units
        )
        _logger.info("Food created: id=%s units=%s", food.id, len(food.units))
        return food

    async def update_food(
        self,
        food_id: UUID,
        name: str,
        base_carbs: float,
        units: Iterable[UnitDraft],
    ) -> Food:
        """Replace a food's fields and its entire unit set.

        Units are always reinserted, so every unit receives a new id even when
        an unchanged unit is resubmitted.
        """
        clean_name, clean_units = _validate_food(name, base_carbs, units)
        food = await asyncio.to_thread(
            self.repository.replace_food,
            food_id,
            clean_name,
            float(base_carbs),
            clean_units,
        )
        if food is None:
            raise NotFoundError(f"Food {food_id} not found")
        _logger.info("Food updated: id=%s units=%s", food.id, len(food.units))
        return food

    async def delete_food(self, food_id: UUID) -> bool:
        """Delete a food and its units; missing ids are ignored."""
        deleted = await asyncio.to_thread(self.repository.delete_food, food_id)
        if deleted:
            _logger.info("Food deleted: id=%s", food_id)
        return deleted


def _is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)


def _validate_food(
    name: str, base_carbs: float, units: Iterable[UnitDraft]
) -> tuple[str, list[UnitDraft]]:
    """Return the trimmed name and units, or raise ValidationError."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Food name must not be empty")
    if not _is_finite_number(base_carbs):
        raise ValidationError("Base carbs must be a finite number")
    clean_units = []
    for position, unit in enumerate(units, start=1):
        if not isinstance(unit.name, str) or not unit.name.strip():
            raise ValidationError(f"Unit {position} must have a name")
        if not _is_finite_number(unit.grams) or unit.grams <= 0:
            raise ValidationError(f"Unit {position} must weigh more than 0 grams")
        clean_units.append(UnitDraft(name=unit.name.strip(), grams=float(unit.grams)))
    return name.strip(), clean_units
