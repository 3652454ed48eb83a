"""
Observation CRUD operations.
"""

import logging
from datetime import date
from typing import Iterable

from sqlalchemy import delete, select

from .connection import get_db_context
from .models import Observation

logger = logging.getLogger(__name__)


def replace_series_observations(
    series_id: str, rows: Iterable[tuple[date, float]]
) -> int:
    """
    Replace every stored observation of a series.

    Existing rows for the series are deleted first, so cached embeddings for
    that series are dropped too.

    Args:
        series_id: FRED series identifier
        rows: (date, value) pairs

    Returns:
        Number of rows inserted
    """
    # Last value wins for duplicate dates within one batch
    by_date: dict[date, float] = {}
    for obs_date, value in rows:
        by_date[obs_date] = value

    with get_db_context() as db:
        db.execute(delete(Observation).where(Observation.series_id == series_id))
        db.add_all(
            Observation(series_id=series_id, date=obs_date, value=value)
            for obs_date, value in sorted(by_date.items())
        )

    logger.info(f"Inserted {len(by_date)} observations for series {series_id}")
    return len(by_date)


def get_all_observations() -> list[Observation]:
    """Return every stored observation ordered by series then date."""
    with get_db_context() as db:
        return list(
            db.execute(
                select(Observation).order_by(Observation.series_id, Observation.date)
            )
            .scalars()
            .all()
        )


def get_series_observations(series_id: str) -> list[Observation]:
    """Return the observations of one series ordered by date."""
    with get_db_context() as db:
        return list(
            db.execute(
                select(Observation)
                .where(Observation.series_id == series_id)
                .order_by(Observation.date)
            )
            .scalars()
            .all()
        )


def list_series_ids() -> list[str]:
    """Return the distinct series IDs that have stored observations."""
    with get_db_context() as db:
        return list(
            db.execute(
                select(Observation.series_id)
                .distinct()
                .order_by(Observation.series_id)
            )
            .scalars()
            .all()
        )


def save_embedding(observation_id: int, embedding: list[float], key: str) -> bool:
    """
    Persist a generated embedding on its observation row.

    Returns:
        True if the row existed and was updated
    """
    with get_db_context() as db:
        observation = db.get(Observation, observation_id)
        if observation is None:
            logger.warning(f"Observation {observation_id} vanished before caching")
            return False
        observation.embedding = list(embedding)
        observation.embedding_key = key
    return True
