"""First-run sample data."""

import logging

from insulin_calculator.domain.foods import UnitDraft
from insulin_calculator.services.catalog import FoodCatalogService
from insulin_calculator.services.insulin_settings import InsulinSettingsService

_logger = logging.getLogger(__name__)

SAMPLE_FOODS: list[tuple[str, float, list[UnitDraft]]] = [
    (
        "Arroz Branco",
        28.2,
        [UnitDraft("Colher de Sopa", 25), UnitDraft("Xícara", 200)],
    ),
    (
        "Pão Francês",
        59,
        [UnitDraft("Unidade", 50), UnitDraft("Metade", 25)],
    ),
    (
        "Banana Prata",
        22,
        [UnitDraft("Unidade Média", 100), UnitDraft("Unidade Pequena", 70)],
    ),
]


async def seed_initial_data(
    catalog: FoodCatalogService, settings_service: InsulinSettingsService
) -> bool:
    """Insert sample foods and default settings when the catalog is empty."""
    if await catalog.count_foods() > 0:
        return False

    _logger.info("Seeding initial data")
    for name, base_carbs, units in SAMPLE_FOODS:
        await catalog.create_food(name, base_carbs, units)
    for key in await settings_service.missing_keys():
        await settings_service.write_default(key)
    _logger.info("Initial data seeded: foods=%s", len(SAMPLE_FOODS))
    return True
