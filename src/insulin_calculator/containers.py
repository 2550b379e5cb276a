"""Dependency container wiring for the application."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from insulin_calculator.adapters.sqlite_database import SqliteDatabase
from insulin_calculator.adapters.sqlite_food_repository import SqliteFoodRepository
from insulin_calculator.adapters.sqlite_settings_repository import (
    SqliteSettingsRepository,
)
from insulin_calculator.adapters.supabase_food_repository import (
    SupabaseFoodRepository,
)
from insulin_calculator.adapters.supabase_settings_repository import (
    SupabaseSettingsRepository,
)
from insulin_calculator.app_logging import configure_logging
from insulin_calculator.config import Settings
from insulin_calculator.services.catalog import (
    FoodCatalogRepository,
    FoodCatalogService,
)
from insulin_calculator.services.insulin_settings import (
    InsulinSettingsService,
    SettingsRepository,
)
from insulin_calculator.services.seed import seed_initial_data


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    catalog_service: FoodCatalogService
    settings_service: InsulinSettingsService
    initialize: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    database: SqliteDatabase | None = None
    food_repository: FoodCatalogRepository
    settings_repository: SettingsRepository
    if resolved_settings.storage_backend == "supabase":
        if not (
            resolved_settings.supabase_url and resolved_settings.supabase_service_key
        ):
            raise ValueError("Supabase backend requires a URL and service key")
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )
        food_repository = SupabaseFoodRepository(supabase_client)
        settings_repository = SupabaseSettingsRepository(supabase_client)
    else:
        database = SqliteDatabase(resolved_settings.database_path)
        food_repository = SqliteFoodRepository(database)
        settings_repository = SqliteSettingsRepository(database)

    catalog_service = FoodCatalogService(food_repository)
    settings_service = InsulinSettingsService(settings_repository)

    async def initialize() -> None:
        if database is not None:
            await asyncio.to_thread(database.initialize)
        if resolved_settings.seed_sample_data:
            await seed_initial_data(catalog_service, settings_service)

    return AppContainer(
        settings=resolved_settings,
        catalog_service=catalog_service,
        settings_service=settings_service,
        initialize=initialize,
    )
