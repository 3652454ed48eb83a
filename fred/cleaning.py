"""
Optional cleaning steps for FRED observations.

Observations are stored raw by default. These helpers are applied only
when ingestion is asked to clean, and always return new lists.
"""

import math
from collections import defaultdict
from datetime import date

from .client import FredObservation


def remove_invalid_observations(data: list[FredObservation]) -> list[FredObservation]:
    """Drop observations whose value is missing, NaN, infinite or negative."""
    return [
        obs
        for obs in data
        if isinstance(obs.value, (int, float))
        and math.isfinite(obs.value)
        and obs.value >= 0
    ]


def normalize_min_max(data: list[FredObservation]) -> list[FredObservation]:
    """Scale values into [0, 1]. Constant series are returned unchanged."""
    if not data:
        return []
    values = [obs.value for obs in data]
    low, high = min(values), max(values)
    if high == low:
        return list(data)
    return [
        FredObservation(date=obs.date, value=(obs.value - low) / (high - low))
        for obs in data
    ]


def remove_outliers(data: list[FredObservation]) -> list[FredObservation]:
    """Remove values outside 1.5 IQR of the first and third quartiles."""
    if not data:
        return []
    values = sorted(obs.value for obs in data)
    q1 = values[int(len(values) * 0.25)]
    q3 = values[int(len(values) * 0.75)]
    iqr = q3 - q1
    lower, upper = q1 - 1.5 * iqr, q3 + 1.5 * iqr
    return [obs for obs in data if lower <= obs.value <= upper]


def apply_moving_average(
    data: list[FredObservation], window_size: int
) -> list[FredObservation]:
    """
    Simple moving average.

    The first ``window_size - 1`` points have no full window and are dropped.
    """
    if window_size < 1:
        raise ValueError("window_size must be at least 1")

    result = []
    for i in range(window_size - 1, len(data)):
        window = data[i - window_size + 1 : i + 1]
        avg = sum(obs.value for obs in window) / len(window)
        result.append(FredObservation(date=data[i].date, value=avg))
    return result


def filter_by_date_range(
    data: list[FredObservation], start: date, end: date
) -> list[FredObservation]:
    """Keep observations with start <= date <= end."""
    return [obs for obs in data if start <= obs.date <= end]


def calculate_percent_change(data: list[FredObservation]) -> list[FredObservation]:
    """
    Percent change between consecutive observations.

    A point whose predecessor is zero has no defined change and is skipped.
    """
    result = []
    for prev, curr in zip(data, data[1:]):
        if prev.value == 0:
            continue
        change = (curr.value - prev.value) / prev.value * 100
        result.append(FredObservation(date=curr.date, value=change))
    return result


def aggregate_by_date(data: list[FredObservation]) -> list[FredObservation]:
    """Average duplicate dates and sort ascending."""
    groups: dict[date, list[float]] = defaultdict(list)
    for obs in data:
        groups[obs.date].append(obs.value)
    return [
        FredObservation(date=obs_date, value=sum(values) / len(values))
        for obs_date, values in sorted(groups.items())
    ]


def clean_observations(data: list[FredObservation]) -> list[FredObservation]:
    """Standard cleaning pass: invalid values out, duplicates averaged."""
    return aggregate_by_date(remove_invalid_observations(data))
