"""
Unit tests for fred/client.py and fred/ingest.py
"""

from datetime import date
from unittest.mock import MagicMock

import pytest

from db import get_series_observations
from errors import ConfigurationError, FormatError, UpstreamAPIError
from fred.client import FredClient, FredObservation
from fred.ingest import ingest_all, store_series


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = "Bad Request. The series does not exist."
    return response


@pytest.fixture
def http():
    return MagicMock()


class TestFredClient:
    """Tests for fetch_observations."""

    def test_parses_and_drops_missing_values(self, http):
        http.get.return_value = _response(
            payload={
                "observations": [
                    {"date": "2020-01-01", "value": "1.55"},
                    {"date": "2020-02-01", "value": "."},
                    {"date": "2020-03-01", "value": "0.65"},
                ]
            }
        )

        result = FredClient(api_key="k", client=http).fetch_observations("FEDFUNDS")

        assert result == [
            FredObservation(date(2020, 1, 1), 1.55),
            FredObservation(date(2020, 3, 1), 0.65),
        ]

    def test_request_parameters(self, http, monkeypatch):
        monkeypatch.setenv("FRED_START_DATE", "2015-01-01")
        http.get.return_value = _response(payload={"observations": []})

        FredClient(api_key="k", client=http).fetch_observations("GDP", end="2020-12-31")

        path = http.get.call_args[0][0]
        params = http.get.call_args[1]["params"]
        assert path == "/series/observations"
        assert params["series_id"] == "GDP"
        assert params["api_key"] == "k"
        assert params["file_type"] == "json"
        assert params["observation_start"] == "2015-01-01"
        assert params["observation_end"] == "2020-12-31"

    def test_missing_key_makes_no_request(self, http):
        with pytest.raises(ConfigurationError, match="FRED_API_KEY"):
            FredClient(client=http).fetch_observations("GDP")
        http.get.assert_not_called()

    def test_key_from_file(self, http, monkeypatch, tmp_path):
        key_file = tmp_path / "fred_key"
        key_file.write_text("file-key\n")
        monkeypatch.setenv("FRED_API_KEY_FILE", str(key_file))
        http.get.return_value = _response(payload={"observations": []})

        FredClient(client=http).fetch_observations("GDP")

        assert http.get.call_args[1]["params"]["api_key"] == "file-key"

    def test_http_error(self, http):
        http.get.return_value = _response(status_code=400)

        with pytest.raises(UpstreamAPIError) as exc_info:
            FredClient(api_key="k", client=http).fetch_observations("NOPE")
        assert exc_info.value.status_code == 400
        assert exc_info.value.service == "FRED"

    def test_missing_observations(self, http):
        http.get.return_value = _response(payload={"error_message": "x"})

        with pytest.raises(FormatError):
            FredClient(api_key="k", client=http).fetch_observations("GDP")


class TestIngest:
    """Tests for storing fetched series."""

    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.fetch_observations.return_value = [
            FredObservation(date(2020, 1, 1), 1.55),
            FredObservation(date(2020, 2, 1), 1.58),
        ]
        return client

    def test_store_series(self, database, client):
        count = store_series("FEDFUNDS", client=client)

        assert count == 2
        stored = get_series_observations("FEDFUNDS")
        assert [(o.date, o.value) for o in stored] == [
            (date(2020, 1, 1), 1.55),
            (date(2020, 2, 1), 1.58),
        ]

    def test_store_series_with_cleaning(self, database, client):
        client.fetch_observations.return_value = [
            FredObservation(date(2020, 1, 1), 1.0),
            FredObservation(date(2020, 1, 1), 3.0),
            FredObservation(date(2020, 2, 1), -5.0),
        ]

        count = store_series("X", client=client, clean=True)

        assert count == 1
        assert get_series_observations("X")[0].value == 2.0

    def test_ingest_all_skips_failures(self, database, client):
        good = client.fetch_observations.return_value

        def fetch(series_id, start=None, end=None):
            if series_id == "BROKEN":
                raise UpstreamAPIError("FRED", 400)
            return good

        client.fetch_observations.side_effect = fetch

        results = ingest_all(["FEDFUNDS", "BROKEN", "UNRATE"], client=client)

        assert results == {"FEDFUNDS": 2, "UNRATE": 2}
