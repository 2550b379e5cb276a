"""Supabase implementation of the food catalog.

The ``units.food_id`` foreign key is declared ``ON DELETE CASCADE`` in the
database, so deleting a food row removes its units server-side.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4

from supabase import Client

from insulin_calculator.adapters.supabase_errors import execute
from insulin_calculator.domain.errors import PersistenceError
from insulin_calculator.domain.foods import Food, Unit, UnitDraft
from insulin_calculator.services.catalog import FoodCatalogRepository

_FOOD_COLUMNS = "id, name, base_carbs"
_UNIT_COLUMNS = "id, food_id, name, grams"


@dataclass
class SupabaseFoodRepository(FoodCatalogRepository):
    """Supabase-backed repository for foods and units."""

    client: Client

    def list_foods(self) -> list[Food]:
        """Return all foods ordered by name."""
        response = execute(
            self.client.table("foods")
            .select(_FOOD_COLUMNS)
            .order("name")
            .order("id"),
            "list foods",
        )
        return self._with_units(response.data or [])

    def get_food(self, food_id: UUID) -> Food | None:
        """Return a food by id, if present."""
        response = execute(
            self.client.table("foods")
            .select(_FOOD_COLUMNS)
            .eq("id", str(food_id))
            .limit(1),
            "load food",
        )
        foods = self._with_units(response.data or [])
        return foods[0] if foods else None

    def search_foods(self, query: str) -> list[Food]:
        """Return foods whose name contains the query, ignoring case."""
        response = execute(
            self.client.table("foods")
            .select(_FOOD_COLUMNS)
            .ilike("name", _like_pattern(query))
            .order("name")
            .order("id"),
            "search foods",
        )
        needle = query.casefold()
        rows = [
            row
            for row in response.data or []
            if needle in str(row.get("name", "")).casefold()
        ]
        return self._with_units(rows)

    def create_food(
        self, name: str, base_carbs: float, units: list[UnitDraft]
    ) -> Food:
        """Insert a food row followed by its unit rows."""
        food_id = uuid4()
        now = datetime.now(tz=UTC).isoformat()
        response = execute(
            self.client.table("foods").insert(
                {
                    "id": str(food_id),
                    "name": name,
                    "base_carbs": base_carbs,
                    "created_at": now,
                    "updated_at": now,
                }
            ),
            "create food",
        )
        if not response.data:
            raise PersistenceError("Failed to create food entry")
        return _parse_food(response.data[0], self._insert_units(food_id, units))

    def replace_food(
        self, food_id: UUID, name: str, base_carbs: float, units: list[UnitDraft]
    ) -> Food | None:
        """Overwrite a food and swap its unit rows for new ones."""
        response = execute(
            self.client.table("foods")
            .update(
                {
                    "name": name,
                    "base_carbs": base_carbs,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", str(food_id)),
            "update food",
        )
        if not response.data:
            return None
        execute(
            self.client.table("units").delete().eq("food_id", str(food_id)),
            "delete units",
        )
        return _parse_food(response.data[0], self._insert_units(food_id, units))

    def delete_food(self, food_id: UUID) -> bool:
        """Delete a food row."""
        response = execute(
            self.client.table("foods").delete().eq("id", str(food_id)),
            "delete food",
        )
        return bool(response.data)

    def count_foods(self) -> int:
        """Return the number of stored foods."""
        response = execute(
            self.client.table("foods").select("id", count="exact").limit(1),
            "count foods",
        )
        if response.count is not None:
            return int(response.count)
        return len(response.data or [])

    def _insert_units(self, food_id: UUID, units: list[UnitDraft]) -> list[Unit]:
        if not units:
            return []
        payload = [
            {
                "id": str(uuid4()),
                "food_id": str(food_id),
                "name": unit.name,
                "grams": unit.grams,
            }
            for unit in units
        ]
        response = execute(self.client.table("units").insert(payload), "create units")
        if not response.data:
            raise PersistenceError("Failed to create unit entries")
        return _sort_units([_parse_unit(row) for row in response.data])

    def _with_units(self, food_rows: list[dict[str, object]]) -> list[Food]:
        if not food_rows:
            return []
        food_ids = [str(row["id"]) for row in food_rows]
        response = execute(
            self.client.table("units")
            .select(_UNIT_COLUMNS)
            .in_("food_id", food_ids)
            .order("grams"),
            "load units",
        )
        units_by_food: dict[str, list[Unit]] = {food_id: [] for food_id in food_ids}
        for row in response.data or []:
            units_by_food.setdefault(str(row["food_id"]), []).append(_parse_unit(row))
        return [
            _parse_food(row, _sort_units(units_by_food[str(row["id"])]))
            for row in food_rows
        ]


def _like_pattern(query: str) -> str:
    """Build an ``ilike`` pattern that matches the query as a substring.

    PostgREST turns ``*`` into ``%`` and offers no escape for it, so each
    ``*`` becomes a wildcard here and ``search_foods`` drops the rows it
    over-matches.
    """
    parts = [_escape_like(part) for part in query.split("*")]
    return f"%{'%'.join(parts)}%"


def _escape_like(query: str) -> str:
    """Escape LIKE wildcards so the query matches literally."""
    return query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _sort_units(units: list[Unit]) -> list[Unit]:
    return sorted(units, key=lambda unit: unit.grams)


def _parse_unit(row: dict[str, object]) -> Unit:
    return Unit(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        grams=float(row.get("grams", 0.0)),
    )


def _parse_food(row: dict[str, object], units: list[Unit]) -> Food:
    """Parse a food row into a domain model."""
    return Food(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        base_carbs=float(row.get("base_carbs", 0.0)),
        units=units,
    )
