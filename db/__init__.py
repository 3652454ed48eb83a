"""
Database layer for FRED Relay.

Provides SQLAlchemy models and database connection management.
"""

from .connection import (
    get_db_context,
    get_engine,
    get_session_factory,
    init_db,
    reset_engine,
)
from .models import Base, Observation
from .observations import (
    get_all_observations,
    get_series_observations,
    list_series_ids,
    replace_series_observations,
    save_embedding,
)

__all__ = [
    # Connection
    "get_db_context",
    "get_engine",
    "get_session_factory",
    "init_db",
    "reset_engine",
    # Models
    "Base",
    "Observation",
    # Observations
    "replace_series_observations",
    "get_all_observations",
    "get_series_observations",
    "list_series_ids",
    "save_embedding",
]
