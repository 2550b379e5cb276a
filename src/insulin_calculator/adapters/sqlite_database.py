"""Embedded SQLite database access."""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from insulin_calculator.domain.errors import PersistenceError

_logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS foods (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    base_carbs REAL NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS units (
    id TEXT PRIMARY KEY,
    food_id TEXT NOT NULL,
    name TEXT NOT NULL,
    grams REAL NOT NULL,
    FOREIGN KEY (food_id) REFERENCES foods (id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_units_food_id ON units (food_id);
CREATE INDEX IF NOT EXISTS idx_foods_name ON foods (name);
"""


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


@dataclass
class SqliteDatabase:
    """Opens short-lived connections to a SQLite file.

    Each ``connect()`` block runs as one transaction: it commits when the
    block exits normally and rolls back when it raises.
    """

    path: str

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a configured connection wrapped in a transaction."""
        try:
            connection = sqlite3.connect(self.path)
        except sqlite3.Error as exc:
            _logger.error("Failed to open database %s: %s", self.path, exc)
            raise PersistenceError(f"Cannot open database {self.path}") from exc
        connection.row_factory = sqlite3.Row
        try:
            connection.execute("PRAGMA foreign_keys = ON")
            connection.create_function("casefold", 1, _casefold, deterministic=True)
            with connection:
                yield connection
        except sqlite3.Error as exc:
            _logger.error("Database operation failed: %s", exc)
            raise PersistenceError("Database operation failed") from exc
        finally:
            connection.close()

    def initialize(self) -> None:
        """Create tables and indexes if they do not exist."""
        with self.connect() as connection:
            connection.executescript(_SCHEMA)
        _logger.info("Database initialized: %s", self.path)
