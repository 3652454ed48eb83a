"""
Unit tests for fred/cleaning.py
"""

from datetime import date

import pytest

from fred.cleaning import (
    aggregate_by_date,
    apply_moving_average,
    calculate_percent_change,
    filter_by_date_range,
    normalize_min_max,
    remove_invalid_observations,
    remove_outliers,
)
from fred.client import FredObservation


def _series(*values):
    return [FredObservation(date(2020, i + 1, 1), v) for i, v in enumerate(values)]


class TestCleaning:
    def test_remove_invalid(self):
        data = _series(1.0, float("nan"), -2.0, 0.0)
        assert [o.value for o in remove_invalid_observations(data)] == [1.0, 0.0]

    def test_normalize_min_max(self):
        assert [o.value for o in normalize_min_max(_series(10.0, 15.0, 20.0))] == [0.0, 0.5, 1.0]

    def test_normalize_constant_series(self):
        assert [o.value for o in normalize_min_max(_series(4.0, 4.0))] == [4.0, 4.0]

    def test_remove_outliers(self):
        data = _series(1.0, 2.0, 2.0, 3.0, 2.0, 1000.0)
        assert 1000.0 not in [o.value for o in remove_outliers(data)]

    def test_moving_average(self):
        result = apply_moving_average(_series(1.0, 2.0, 3.0, 4.0), 2)
        assert [o.value for o in result] == [1.5, 2.5, 3.5]
        assert result[0].date == date(2020, 2, 1)

    def test_moving_average_window(self):
        with pytest.raises(ValueError):
            apply_moving_average(_series(1.0), 0)

    def test_filter_by_date_range(self):
        result = filter_by_date_range(_series(1.0, 2.0, 3.0), date(2020, 2, 1), date(2020, 3, 1))
        assert [o.value for o in result] == [2.0, 3.0]

    def test_percent_change_skips_zero_base(self):
        result = calculate_percent_change(_series(0.0, 5.0, 10.0))
        assert [o.value for o in result] == [100.0]
        assert result[0].date == date(2020, 3, 1)

    def test_aggregate_by_date(self):
        data = [
            FredObservation(date(2020, 2, 1), 4.0),
            FredObservation(date(2020, 1, 1), 1.0),
            FredObservation(date(2020, 1, 1), 3.0),
        ]
        result = aggregate_by_date(data)
        assert [(o.date, o.value) for o in result] == [
            (date(2020, 1, 1), 2.0),
            (date(2020, 2, 1), 4.0),
        ]
