"""Supabase repository for settings."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from insulin_calculator.adapters.supabase_errors import execute
from insulin_calculator.services.insulin_settings import SettingsRepository


@dataclass
class SupabaseSettingsRepository(SettingsRepository):
    """Supabase implementation for key/value settings."""

    client: Client

    def get_values(self, keys: tuple[str, ...]) -> dict[str, str]:
        """Return stored values for the requested keys."""
        response = execute(
            self.client.table("settings").select("key, value").in_("key", list(keys)),
            "load settings",
        )
        return {str(row["key"]): str(row["value"]) for row in response.data or []}

    def set_value(self, key: str, value: str) -> None:
        """Insert or overwrite a setting."""
        execute(
            self.client.table("settings").upsert(
                {
                    "key": key,
                    "value": value,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="key",
            ),
            f"save setting {key}",
        )
