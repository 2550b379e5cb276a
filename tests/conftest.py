"""Shared test fixtures."""

from dataclasses import dataclass, field
from uuid import UUID, uuid4

import pytest

from insulin_calculator.config import Settings
from insulin_calculator.domain.errors import PersistenceError
from insulin_calculator.domain.foods import Food, Unit, UnitDraft
from insulin_calculator.services.catalog import (
    FoodCatalogRepository,
    FoodCatalogService,
)
from insulin_calculator.services.insulin_settings import (
    InsulinSettingsService,
    SettingsRepository,
)


def _build_units(units: list[UnitDraft]) -> list[Unit]:
    built = [Unit(id=uuid4(), name=unit.name, grams=unit.grams) for unit in units]
    return sorted(built, key=lambda unit: unit.grams)


@dataclass
class InMemoryFoodRepository(FoodCatalogRepository):
    """In-memory food catalog for tests."""

    foods: dict[UUID, Food] = field(default_factory=dict)

    def list_foods(self) -> list[Food]:
        return sorted(self.foods.values(), key=lambda food: (food.name, str(food.id)))

    def get_food(self, food_id: UUID) -> Food | None:
        return self.foods.get(food_id)

    def search_foods(self, query: str) -> list[Food]:
        needle = query.casefold()
        return [food for food in self.list_foods() if needle in food.name.casefold()]

    def create_food(
        self, name: str, base_carbs: float, units: list[UnitDraft]
    ) -> Food:
        food = Food(
            id=uuid4(), name=name, base_carbs=base_carbs, units=_build_units(units)
        )
        self.foods[food.id] = food
        return food

    def replace_food(
        self, food_id: UUID, name: str, base_carbs: float, units: list[UnitDraft]
    ) -> Food | None:
        if food_id not in self.foods:
            return None
        food = Food(
            id=food_id, name=name, base_carbs=base_carbs, units=_build_units(units)
        )
        self.foods[food_id] = food
        return food

    def delete_food(self, food_id: UUID) -> bool:
        return self.foods.pop(food_id, None) is not None

    def count_foods(self) -> int:
        return len(self.foods)


@dataclass
class InMemorySettingsRepository(SettingsRepository):
    """In-memory key/value settings for tests."""

    values: dict[str, str] = field(default_factory=dict)
    failing_keys: set[str] = field(default_factory=set)
    writes: list[tuple[str, str]] = field(default_factory=list)

    def get_values(self, keys: tuple[str, ...]) -> dict[str, str]:
        return {key: self.values[key] for key in keys if key in self.values}

    def set_value(self, key: str, value: str) -> None:
        if key in self.failing_keys:
            raise PersistenceError(f"Cannot write {key}")
        self.writes.append((key, value))
        self.values[key] = value


def make_food(
    name: str = "Arroz Branco",
    base_carbs: float = 28.2,
    units: list[tuple[str, float]] | None = None,
) -> Food:
    """Build a food without touching any repository."""
    unit_specs = units if units is not None else [("Colher de Sopa", 25)]
    return Food(
        id=uuid4(),
        name=name,
        base_carbs=base_carbs,
        units=[
            Unit(id=uuid4(), name=label, grams=grams) for label, grams in unit_specs
        ],
    )


@pytest.fixture
def catalog_repository() -> InMemoryFoodRepository:
    return InMemoryFoodRepository()


@pytest.fixture
def catalog_service(catalog_repository: InMemoryFoodRepository) -> FoodCatalogService:
    return FoodCatalogService(catalog_repository)


@pytest.fixture
def settings_repository() -> InMemorySettingsRepository:
    return InMemorySettingsRepository()


@pytest.fixture
def settings_service(
    settings_repository: InMemorySettingsRepository,
) -> InsulinSettingsService:
    return InsulinSettingsService(settings_repository)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        storage_backend="sqlite",
        database_path=str(tmp_path / "insulin_app.db"),
        seed_sample_data=True,
        environment="test",
    )
