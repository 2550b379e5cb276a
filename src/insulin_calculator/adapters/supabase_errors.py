"""Error translation for Supabase queries."""

import logging
from typing import Any

from postgrest.exceptions import APIError

from insulin_calculator.domain.errors import PersistenceError

_logger = logging.getLogger(__name__)


def execute(query: Any, action: str) -> Any:
    """Run a query builder, raising PersistenceError on API failures."""
    try:
        return query.execute()
    except APIError as exc:
        _logger.error("Supabase %s failed: %s", action, exc)
        raise PersistenceError(f"Failed to {action}") from exc
