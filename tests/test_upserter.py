"""
Unit tests for rag/upserter.py
"""

import uuid
from datetime import date
from unittest.mock import MagicMock

import chromadb
import pytest

from db.models import Observation
from rag.cache import EmbeddingCache
from rag.upserter import EmbeddingUpserter, observation_text, vector_id
from rag.vector_store import ChromaVectorStore, VectorRecord
from tests.fixtures.vectors import unit_vector


def _observations(count: int) -> list[Observation]:
    return [
        Observation(
            id=i + 1,
            series_id="UNRATE",
            date=date(2000 + i // 12, i % 12 + 1, 1),
            value=3.5 + i,
        )
        for i in range(count)
    ]


def _records(count: int) -> list[VectorRecord]:
    return [VectorRecord(id=f"r{i}", values=unit_vector(0)) for i in range(count)]


@pytest.fixture
def provider():
    provider = MagicMock()
    provider.model_id = "test-model"
    provider.dimensions = 768
    provider.generate_embedding.return_value = unit_vector(2)
    return provider


@pytest.fixture
def store():
    store = MagicMock()
    store.namespace = "fred"
    return store


class TestObservationText:
    def test_template(self):
        text = observation_text("FEDFUNDS", date(2020, 3, 1), 0.65)
        assert text == "series FEDFUNDS observation on 2020-03-01 had value 0.65."

    def test_integral_values_have_no_decimal(self):
        text = observation_text("HOUST", date(2021, 1, 1), 1625.0)
        assert text == "series HOUST observation on 2021-01-01 had value 1625."


class TestVectorId:
    def test_deterministic(self):
        assert vector_id("GDP", date(2020, 1, 1)) == "GDP_2020-01-01"
        assert vector_id("GDP", date(2020, 1, 1)) == vector_id("GDP", date(2020, 1, 1))

    def test_distinct_for_distinct_days(self):
        assert vector_id("GDP", date(2020, 1, 1)) != vector_id("GDP", date(2020, 1, 2))


class TestUpsertRecords:
    """Batching and failure isolation."""

    def test_batch_count(self, provider, store):
        upserter = EmbeddingUpserter(provider, store, batch_size=100)

        total = upserter.upsert_records(_records(250))

        assert total == 250
        assert store.upsert.call_count == 3
        sizes = [len(c[0][0]) for c in store.upsert.call_args_list]
        assert sizes == [100, 100, 50]

    def test_exact_multiple(self, provider, store):
        upserter = EmbeddingUpserter(provider, store, batch_size=100)

        upserter.upsert_records(_records(200))

        assert store.upsert.call_count == 2

    def test_failed_batch_does_not_stop_later_batches(self, provider, store):
        store.upsert.side_effect = [None, RuntimeError("payload too large"), None]
        upserter = EmbeddingUpserter(provider, store, batch_size=100)

        total = upserter.upsert_records(_records(250))

        assert store.upsert.call_count == 3
        assert total == 150

    def test_no_records(self, provider, store):
        upserter = EmbeddingUpserter(provider, store)

        assert upserter.upsert_records([]) == 0
        store.upsert.assert_not_called()

    def test_invalid_batch_size(self, provider, store):
        with pytest.raises(ValueError):
            EmbeddingUpserter(provider, store, batch_size=0)


class TestBuildRecords:
    def test_skips_observations_that_fail_to_embed(self, provider, store):
        cache = MagicMock()
        cache.get_or_create.side_effect = [unit_vector(0), RuntimeError("boom"), unit_vector(1)]
        upserter = EmbeddingUpserter(provider, store, cache=cache)

        records = upserter.build_records(_observations(3))

        assert [r.id for r in records] == ["UNRATE_2000-01-01", "UNRATE_2000-03-01"]

    def test_record_metadata(self, provider, store):
        upserter = EmbeddingUpserter(
            provider, store, cache=EmbeddingCache(provider, persist=MagicMock())
        )

        record = upserter.build_records(_observations(1))[0]

        assert record.values == unit_vector(2)
        assert record.metadata == {
            "seriesId": "UNRATE",
            "date": "2000-01-01",
            "value": 3.5,
            "text": "series UNRATE observation on 2000-01-01 had value 3.5.",
        }


class TestUpsertAll:
    def test_embeds_and_upserts_everything(self, provider, store):
        persist = MagicMock(return_value=True)
        upserter = EmbeddingUpserter(
            provider,
            store,
            batch_size=2,
            load_observations=lambda: _observations(5),
            cache=EmbeddingCache(provider, persist=persist),
        )

        total = upserter.upsert_all()

        assert total == 5
        assert store.upsert.call_count == 3
        assert provider.generate_embedding.call_count == 5
        assert persist.call_count == 5

    def test_cached_rows_are_not_reembedded(self, provider, store):
        observations = _observations(2)
        for obs in observations:
            obs.embedding = unit_vector(3)
        upserter = EmbeddingUpserter(
            provider,
            store,
            load_observations=lambda: observations,
            cache=EmbeddingCache(provider, persist=MagicMock()),
        )

        assert upserter.upsert_all() == 2
        provider.generate_embedding.assert_not_called()

    def test_rerun_overwrites_instead_of_duplicating(self, provider):
        store = ChromaVectorStore(
            namespace=f"test-{uuid.uuid4().hex[:8]}", client=chromadb.EphemeralClient()
        )
        observations = _observations(3)
        upserter = EmbeddingUpserter(
            provider,
            store,
            load_observations=lambda: observations,
            cache=EmbeddingCache(provider, persist=MagicMock()),
        )

        assert upserter.upsert_all() == 3
        assert upserter.upsert_all() == 3

        assert store.count() == 3
