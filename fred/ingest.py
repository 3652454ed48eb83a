"""
FRED ingestion: fetch series and store them in the observations table.
"""

import logging

from db import replace_series_observations

from .cleaning import clean_observations
from .client import FredClient

logger = logging.getLogger(__name__)


def store_series(
    series_id: str,
    client: FredClient | None = None,
    clean: bool = False,
    start: str | None = None,
    end: str | None = None,
) -> int:
    """
    Fetch one series and replace its stored observations.

    Args:
        series_id: FRED series identifier
        client: FredClient to use (a default one is created if omitted)
        clean: Apply clean_observations() before storing
        start: Optional observation_start override
        end: Optional observation_end override

    Returns:
        Number of observations stored
    """
    client = client or FredClient()
    observations = client.fetch_observations(series_id, start=start, end=end)
    if clean:
        before = len(observations)
        observations = clean_observations(observations)
        logger.info(
            f"Cleaning {series_id}: kept {len(observations)} of {before} observations"
        )

    return replace_series_observations(
        series_id, ((obs.date, obs.value) for obs in observations)
    )


def ingest_all(
    series_ids: list[str],
    client: FredClient | None = None,
    clean: bool = False,
) -> dict[str, int]:
    """
    Ingest several series one at a time.

    A failing series is logged and skipped so the rest still load.

    Returns:
        series_id -> number of observations stored, for series that succeeded
    """
    client = client or FredClient()
    results: dict[str, int] = {}

    for series_id in series_ids:
        logger.info(f"Fetching and storing data for series: {series_id}")
        try:
            results[series_id] = store_series(series_id, client=client, clean=clean)
        except Exception as e:
            logger.error(f"Error processing series {series_id}: {e}")

    logger.info(f"Ingested {len(results)}/{len(series_ids)} series")
    return results
