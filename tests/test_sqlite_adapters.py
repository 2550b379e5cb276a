"""Tests for the SQLite adapter implementations."""

import asyncio
from uuid import UUID, uuid4

import pytest

from insulin_calculator.adapters.sqlite_database import SqliteDatabase
from insulin_calculator.adapters.sqlite_food_repository import SqliteFoodRepository
from insulin_calculator.adapters.sqlite_settings_repository import (
    SqliteSettingsRepository,
)
from insulin_calculator.domain.dosing import InsulinSettings
from insulin_calculator.domain.errors import NotFoundError, PersistenceError
from insulin_calculator.domain.foods import UnitDraft
from insulin_calculator.services.catalog import FoodCatalogService
from insulin_calculator.services.insulin_settings import InsulinSettingsService


@pytest.fixture
def database(tmp_path) -> SqliteDatabase:
    db = SqliteDatabase(str(tmp_path / "catalog.db"))
    db.initialize()
    return db


@pytest.fixture
def repository(database: SqliteDatabase) -> SqliteFoodRepository:
    return SqliteFoodRepository(database)


def _unit_count(database: SqliteDatabase, food_id: UUID) -> int:
    with database.connect() as connection:
        row = connection.execute(
            "SELECT COUNT(*) AS count FROM units WHERE food_id = ?", (str(food_id),)
        ).fetchone()
    return int(row["count"])


def test_initialize_is_repeatable(database: SqliteDatabase) -> None:
    database.initialize()

    assert SqliteFoodRepository(database).count_foods() == 0


def test_create_and_get_food(repository: SqliteFoodRepository) -> None:
    service = FoodCatalogService(repository)

    created = asyncio.run(service.create_food("Aveia", 60, [UnitDraft("Colher", 15)]))
    fetched = asyncio.run(service.get_food(created.id))

    assert fetched == created
    assert fetched.units[0].grams == 15
    assert repository.count_foods() == 1


def test_units_are_ordered_by_weight(repository: SqliteFoodRepository) -> None:
    food = repository.create_food(
        "Arroz Branco",
        28.2,
        [UnitDraft("Xícara", 200), UnitDraft("Colher de Sopa", 25)],
    )

    assert [unit.name for unit in food.units] == ["Colher de Sopa", "Xícara"]


def test_list_and_search_foods(repository: SqliteFoodRepository) -> None:
    for name in ["Pão Francês", "Banana Prata", "Arroz Branco"]:
        repository.create_food(name, 20, [UnitDraft("Unidade", 50)])

    listed = repository.list_foods()

    assert [food.name for food in listed] == [
        "Arroz Branco",
        "Banana Prata",
        "Pão Francês",
    ]
    assert repository.list_foods() == listed
    assert [food.name for food in repository.search_foods("PÃO")] == ["Pão Francês"]
    assert [food.name for food in repository.search_foods("an")] == [
        "Arroz Branco",
        "Banana Prata",
        "Pão Francês",
    ]
    assert repository.search_foods("%") == []
    assert len(repository.search_foods("")) == 3


def test_replace_food_reissues_unit_ids(
    database: SqliteDatabase, repository: SqliteFoodRepository
) -> None:
    food = repository.create_food(
        "Arroz Branco",
        28.2,
        [UnitDraft("Colher de Sopa", 25), UnitDraft("Xícara", 200)],
    )

    updated = repository.replace_food(
        food.id, "Arroz Integral", 24, [UnitDraft("Colher de Sopa", 25)]
    )

    assert updated is not None
    assert updated.name == "Arroz Integral"
    assert updated.units[0].id != food.units[0].id
    assert _unit_count(database, food.id) == 1


def test_replace_missing_food_raises_through_service(
    repository: SqliteFoodRepository,
) -> None:
    service = FoodCatalogService(repository)

    with pytest.raises(NotFoundError):
        asyncio.run(service.update_food(uuid4(), "Aveia", 60, []))

    assert repository.count_foods() == 0


def test_delete_food_cascades_to_units(
    database: SqliteDatabase, repository: SqliteFoodRepository
) -> None:
    kept = repository.create_food("Banana Prata", 22, [UnitDraft("Unidade", 100)])
    doomed = repository.create_food(
        "Pão Francês", 59, [UnitDraft("Unidade", 50), UnitDraft("Metade", 25)]
    )

    assert repository.delete_food(doomed.id) is True
    assert repository.delete_food(doomed.id) is False
    assert repository.get_food(doomed.id) is None
    assert _unit_count(database, doomed.id) == 0
    assert repository.list_foods() == [kept]
    assert _unit_count(database, kept.id) == 1


def test_failed_create_rolls_back(repository: SqliteFoodRepository) -> None:
    broken = [UnitDraft(None, 10)]  # type: ignore[arg-type]

    with pytest.raises(PersistenceError):
        repository.create_food("Quebrado", 10, broken)

    assert repository.count_foods() == 0


def test_failed_replace_rolls_back(
    database: SqliteDatabase, repository: SqliteFoodRepository
) -> None:
    food = repository.create_food(
        "Pão Francês", 59, [UnitDraft("Unidade", 50), UnitDraft("Metade", 25)]
    )
    broken = [UnitDraft(None, 10)]  # type: ignore[arg-type]

    with pytest.raises(PersistenceError):
        repository.replace_food(food.id, "Pão Integral", 45, broken)

    assert repository.get_food(food.id) == food
    assert _unit_count(database, food.id) == 2


def test_missing_schema_raises_persistence_error(tmp_path) -> None:
    repository = SqliteFoodRepository(SqliteDatabase(str(tmp_path / "empty.db")))

    with pytest.raises(PersistenceError):
        repository.list_foods()


def test_unopenable_database_raises_persistence_error(tmp_path) -> None:
    repository = SqliteFoodRepository(SqliteDatabase(str(tmp_path)))

    with pytest.raises(PersistenceError):
        repository.count_foods()


def test_settings_repository_upserts(database: SqliteDatabase) -> None:
    repository = SqliteSettingsRepository(database)

    repository.set_value("carbsPerInsulin", "15")
    repository.set_value("carbsPerInsulin", "12")

    assert repository.get_values(("carbsPerInsulin", "correctionFactor")) == {
        "carbsPerInsulin": "12"
    }


def test_settings_service_roundtrip(database: SqliteDatabase) -> None:
    service = InsulinSettingsService(SqliteSettingsRepository(database))
    saved = InsulinSettings(
        carbs_per_insulin=12, correction_factor=50, insulin_increment=0.5
    )

    asyncio.run(service.save_settings(saved))

    assert asyncio.run(service.get_settings()) == saved
