"""SQLite repository for settings."""

from dataclasses import dataclass
from datetime import UTC, datetime

from insulin_calculator.adapters.sqlite_database import SqliteDatabase
from insulin_calculator.services.insulin_settings import SettingsRepository


@dataclass
class SqliteSettingsRepository(SettingsRepository):
    """SQLite implementation for key/value settings."""

    database: SqliteDatabase

    def get_values(self, keys: tuple[str, ...]) -> dict[str, str]:
        """Return stored values for the requested keys."""
        if not keys:
            return {}
        placeholders = ", ".join("?" for _ in keys)
        with self.database.connect() as connection:
            rows = connection.execute(
                f"SELECT key, value FROM settings WHERE key IN ({placeholders})",
                keys,
            ).fetchall()
        return {row["key"]: row["value"] for row in rows}

    def set_value(self, key: str, value: str) -> None:
        """Insert or overwrite a setting."""
        with self.database.connect() as connection:
            connection.execute(
                "INSERT INTO settings (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT (key) DO UPDATE SET "
                "value = excluded.value, updated_at = excluded.updated_at",
                (key, value, datetime.now(tz=UTC).isoformat()),
            )
