"""
FRED statistics API client.

Only the ``/series/observations`` endpoint is used.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date

import httpx

from config import get_api_key, get_settings
from errors import ConfigurationError, FormatError, UpstreamAPIError

logger = logging.getLogger(__name__)

FRED_BASE_URL = "https://api.stlouisfed.org/fred"


@dataclass
class FredObservation:
    """One (date, value) point of a FRED series."""

    date: date
    value: float


class FredClient:
    """Thin wrapper around the FRED REST API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = FRED_BASE_URL,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ):
        self._api_key = api_key
        self.base_url = base_url
        self.timeout = timeout or get_settings().http_timeout_seconds
        self._client = client

    @property
    def api_key(self) -> str:
        key = self._api_key or get_api_key("FRED_API_KEY")
        if not key:
            raise ConfigurationError("FRED_API_KEY is required to fetch FRED data")
        return key

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout)
        return self._client

    def fetch_observations(
        self,
        series_id: str,
        start: str | None = None,
        end: str | None = None,
    ) -> list[FredObservation]:
        """
        Fetch observations for a series.

        Non-numeric values (FRED reports missing data as ".") are dropped.

        Args:
            series_id: FRED series identifier, e.g. "FEDFUNDS"
            start: observation_start (YYYY-MM-DD), defaults to FRED_START_DATE
            end: observation_end (YYYY-MM-DD), defaults to today

        Returns:
            Observations in API order
        """
        api_key = self.api_key
        settings = get_settings()
        params = {
            "series_id": series_id,
            "api_key": api_key,
            "file_type": "json",
            "observation_start": start or settings.fred_start_date,
            "observation_end": end or settings.fred_end_date,
        }

        logger.info(f"Fetching FRED series {series_id}")
        response = self._get_client().get("/series/observations", params=params)
        if response.status_code != 200:
            raise UpstreamAPIError("FRED", response.status_code, response.text[:200])

        try:
            payload = response.json()
        except ValueError as e:
            raise FormatError(f"FRED returned non-JSON body for {series_id}") from e

        raw = payload.get("observations") if isinstance(payload, dict) else None
        if not isinstance(raw, list):
            raise FormatError(f"FRED response for {series_id} has no observations list")

        observations = []
        skipped = 0
        for item in raw:
            parsed = _parse_observation(item)
            if parsed is None:
                skipped += 1
                continue
            observations.append(parsed)

        if skipped:
            logger.debug(f"Skipped {skipped} non-numeric observations for {series_id}")
        logger.info(f"Fetched {len(observations)} observations for {series_id}")
        return observations

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def _parse_observation(item: dict) -> FredObservation | None:
    try:
        value = float(item["value"])
        obs_date = date.fromisoformat(item["date"])
    except (KeyError, TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return FredObservation(date=obs_date, value=value)
