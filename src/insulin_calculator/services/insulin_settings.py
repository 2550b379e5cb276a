"""Insulin settings service."""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Protocol

from insulin_calculator.domain.dosing import (
    DEFAULT_SETTINGS,
    SETTING_CARBS_PER_INSULIN,
    SETTING_CORRECTION_FACTOR,
    SETTING_INSULIN_INCREMENT,
    InsulinSettings,
)
from insulin_calculator.domain.errors import ValidationError

_logger = logging.getLogger(__name__)

SETTING_KEYS = (
    SETTING_CARBS_PER_INSULIN,
    SETTING_CORRECTION_FACTOR,
    SETTING_INSULIN_INCREMENT,
)


class SettingsRepository(Protocol):
    """Persistence interface for key/value settings."""

    def get_values(self, keys: tuple[str, ...]) -> dict[str, str]:
        """Return the stored values for the keys that exist."""

    def set_value(self, key: str, value: str) -> None:
        """Insert or overwrite a single setting."""


@dataclass
class InsulinSettingsService:
    """Service for reading and saving insulin settings."""

    repository: SettingsRepository

    async def get_settings(self) -> InsulinSettings:
        """Return stored settings, defaulting keys never written."""
        stored = await asyncio.to_thread(self.repository.get_values, SETTING_KEYS)
        defaults = DEFAULT_SETTINGS.as_storage()
        values = {
            key: _parse_decimal(stored.get(key), defaults[key]) for key in SETTING_KEYS
        }
        return InsulinSettings(
            carbs_per_insulin=values[SETTING_CARBS_PER_INSULIN],
            correction_factor=values[SETTING_CORRECTION_FACTOR],
            insulin_increment=values[SETTING_INSULIN_INCREMENT],
        )

    async def save_settings(self, settings: InsulinSettings) -> None:
        """Upsert every setting key.

        Each key is an independent write; a failure part way through leaves
        the earlier keys saved.
        """
        values = settings.as_storage()
        for key, value in values.items():
            if isinstance(value, bool) or not isinstance(value, int | float):
                raise ValidationError(f"Setting {key} must be a number")
            if not math.isfinite(value) or value <= 0:
                raise ValidationError(f"Setting {key} must be greater than 0")
        for key, value in values.items():
            await asyncio.to_thread(
                self.repository.set_value, key, format_decimal(value)
            )
        _logger.info(
            "Settings saved: carbs_per_insulin=%s correction_factor=%s "
            "insulin_increment=%s",
            settings.carbs_per_insulin,
            settings.correction_factor,
            settings.insulin_increment,
        )

    async def missing_keys(self) -> list[str]:
        """Return the setting keys that have never been written."""
        stored = await asyncio.to_thread(self.repository.get_values, SETTING_KEYS)
        return [key for key in SETTING_KEYS if key not in stored]

    async def write_default(self, key: str) -> None:
        """Store the default value for a single key."""
        default = DEFAULT_SETTINGS.as_storage()[key]
        await asyncio.to_thread(
            self.repository.set_value, key, format_decimal(default)
        )


def format_decimal(value: float) -> str:
    """Render a number as a plain decimal string, without a trailing .0."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def _parse_decimal(raw: str | None, default: float) -> float:
    """Parse a stored value; unusable or zero values fall back to the default."""
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        _logger.warning("Ignoring unparsable setting value: %r", raw)
        return default
    if not math.isfinite(value) or value == 0:
        return default
    return value
