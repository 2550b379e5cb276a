"""SQLite implementation of the food catalog."""

import sqlite3
from collections import defaultdict
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4

from insulin_calculator.adapters.sqlite_database import SqliteDatabase
from insulin_calculator.domain.errors import PersistenceError
from insulin_calculator.domain.foods import Food, Unit, UnitDraft
from insulin_calculator.services.catalog import FoodCatalogRepository

_BY_ID = "WHERE id = ?"
_BY_NAME = "WHERE instr(casefold(name), ?) > 0"


@dataclass
class SqliteFoodRepository(FoodCatalogRepository):
    """SQLite-backed repository for foods and units."""

    database: SqliteDatabase

    def list_foods(self) -> list[Food]:
        """Return all foods ordered by name."""
        with self.database.connect() as connection:
            return _select_foods(connection)

    def get_food(self, food_id: UUID) -> Food | None:
        """Return a food by id, if present."""
        with self.database.connect() as connection:
            return _select_food(connection, food_id)

    def search_foods(self, query: str) -> list[Food]:
        """Return foods whose name contains the query, ignoring case."""
        with self.database.connect() as connection:
            return _select_foods(connection, _BY_NAME, (query.casefold(),))

    def create_food(
        self, name: str, base_carbs: float, units: list[UnitDraft]
    ) -> Food:
        """Insert a food and its units in one transaction."""
        food_id = uuid4()
        now = datetime.now(tz=UTC).isoformat()
        with self.database.connect() as connection:
            connection.execute(
                "INSERT INTO foods (id, name, base_carbs, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (str(food_id), name, base_carbs, now, now),
            )
            _insert_units(connection, food_id, units)
            food = _select_food(connection, food_id)
        if food is None:
            raise PersistenceError(f"Food {food_id} missing after insert")
        return food

    def replace_food(
        self, food_id: UUID, name: str, base_carbs: float, units: list[UnitDraft]
    ) -> Food | None:
        """Overwrite a food and reinsert its units in one transaction."""
        now = datetime.now(tz=UTC).isoformat()
        with self.database.connect() as connection:
            cursor = connection.execute(
                "UPDATE foods SET name = ?, base_carbs = ?, updated_at = ? "
                "WHERE id = ?",
                (name, base_carbs, now, str(food_id)),
            )
            if cursor.rowcount == 0:
                return None
            connection.execute("DELETE FROM units WHERE food_id = ?", (str(food_id),))
            _insert_units(connection, food_id, units)
            return _select_food(connection, food_id)

    def delete_food(self, food_id: UUID) -> bool:
        """Delete a food; its units go with it through the foreign key."""
        with self.database.connect() as connection:
            cursor = connection.execute(
                "DELETE FROM foods WHERE id = ?", (str(food_id),)
            )
            return cursor.rowcount > 0

    def count_foods(self) -> int:
        """Return the number of stored foods."""
        with self.database.connect() as connection:
            row = connection.execute("SELECT COUNT(*) AS count FROM foods").fetchone()
            return int(row["count"])


def _insert_units(
    connection: sqlite3.Connection, food_id: UUID, units: list[UnitDraft]
) -> None:
    connection.executemany(
        "INSERT INTO units (id, food_id, name, grams) VALUES (?, ?, ?, ?)",
        [(str(uuid4()), str(food_id), unit.name, unit.grams) for unit in units],
    )


def _select_food(connection: sqlite3.Connection, food_id: UUID) -> Food | None:
    foods = _select_foods(connection, _BY_ID, (str(food_id),))
    return foods[0] if foods else None


def _select_foods(
    connection: sqlite3.Connection, where: str = "", params: tuple[str, ...] = ()
) -> list[Food]:
    """Load foods matching a filter together with their units.

    Units are ordered by weight, lightest first.
    """
    food_rows = connection.execute(
        f"SELECT id, name, base_carbs FROM foods {where} ORDER BY name, id",
        params,
    ).fetchall()
    unit_rows = connection.execute(
        "SELECT id, food_id, name, grams FROM units "
        f"WHERE food_id IN (SELECT id FROM foods {where}) ORDER BY grams, rowid",
        params,
    ).fetchall()
    units_by_food: dict[str, list[Unit]] = defaultdict(list)
    for row in unit_rows:
        units_by_food[row["food_id"]].append(
            Unit(id=UUID(row["id"]), name=row["name"], grams=float(row["grams"]))
        )
    return [
        Food(
            id=UUID(row["id"]),
            name=row["name"],
            base_carbs=float(row["base_carbs"]),
            units=units_by_food[row["id"]],
        )
        for row in food_rows
    ]
