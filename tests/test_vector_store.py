"""
Unit tests for rag/vector_store.py
"""

import uuid
from unittest.mock import MagicMock, patch

import chromadb
import httpx
import pytest
from chromadb.errors import NotFoundError

from errors import ConfigurationError, UpstreamAPIError
from rag.vector_store import ChromaVectorStore, VectorRecord, create_chroma_client
from tests.fixtures.vectors import unit_vector


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def collection(client):
    return client.get_or_create_collection.return_value


@pytest.fixture
def ephemeral_store():
    # In-process clients share state, so each test gets its own namespace
    return ChromaVectorStore(
        namespace=f"test-{uuid.uuid4().hex[:8]}", client=chromadb.EphemeralClient()
    )


class TestChromaVectorStore:
    """Tests for the ChromaDB adapter."""

    def test_collection_per_namespace(self, client, collection):
        store = ChromaVectorStore(namespace="fred", client=client)
        collection.count.return_value = 0

        store.count()

        client.get_or_create_collection.assert_called_once_with(
            name="fredrelay_fred", metadata={"hnsw:space": "cosine"}
        )

    def test_empty_namespace_returns_no_matches(self, client, collection):
        collection.count.return_value = 0
        store = ChromaVectorStore(client=client)

        assert store.query(unit_vector(0), 5) == []
        collection.query.assert_not_called()

    def test_query_converts_distance_to_score(self, client, collection):
        collection.count.return_value = 2
        collection.query.return_value = {
            "ids": [["GDP_2020-01-01", "GDP_2020-04-01"]],
            "metadatas": [[{"text": "a"}, {"text": "b"}]],
            "distances": [[0.1, 0.25]],
        }
        store = ChromaVectorStore(client=client)

        matches = store.query(unit_vector(0), 10)

        assert collection.query.call_args[1]["n_results"] == 2
        assert [m.id for m in matches] == ["GDP_2020-01-01", "GDP_2020-04-01"]
        assert matches[0].score == pytest.approx(0.9)
        assert matches[1].score == pytest.approx(0.75)
        assert matches[0].metadata == {"text": "a"}

    def test_upsert_passes_documents(self, client, collection):
        store = ChromaVectorStore(client=client)
        record = VectorRecord(id="GDP_2020-01-01", values=unit_vector(0), metadata={"text": "t"})

        store.upsert([record])

        kwargs = collection.upsert.call_args[1]
        assert kwargs["ids"] == ["GDP_2020-01-01"]
        assert kwargs["documents"] == ["t"]
        assert kwargs["metadatas"] == [{"text": "t"}]

    def test_upsert_nothing(self, client, collection):
        ChromaVectorStore(client=client).upsert([])
        collection.upsert.assert_not_called()


class TestChromaErrors:
    def test_client_error_becomes_upstream_error(self, client, collection):
        collection.count.side_effect = NotFoundError("collection is gone")
        store = ChromaVectorStore(client=client)

        with pytest.raises(UpstreamAPIError, match="ChromaDB"):
            store.query(unit_vector(0), 3)

    def test_transport_error_becomes_upstream_error(self, client, collection):
        collection.upsert.side_effect = httpx.ConnectError("connection refused")
        store = ChromaVectorStore(client=client)
        record = VectorRecord(id="GDP_2020-01-01", values=unit_vector(0))

        with pytest.raises(UpstreamAPIError) as exc_info:
            store.upsert([record])

        assert exc_info.value.status_code is None


class TestEphemeralIndex:
    """Behaviour against a real in-memory ChromaDB index."""

    def test_empty_namespace_returns_no_matches(self, ephemeral_store):
        assert ephemeral_store.count() == 0
        assert ephemeral_store.query(unit_vector(0), 5) == []

    def test_same_id_overwrites(self, ephemeral_store):
        first = VectorRecord(
            id="FEDFUNDS_2020-04-01", values=unit_vector(1), metadata={"value": 0.05}
        )
        second = VectorRecord(
            id="FEDFUNDS_2020-04-01", values=unit_vector(0), metadata={"value": 0.06}
        )

        ephemeral_store.upsert([first])
        ephemeral_store.upsert([second])

        assert ephemeral_store.count() == 1
        matches = ephemeral_store.query(unit_vector(0), 5)
        assert [m.id for m in matches] == ["FEDFUNDS_2020-04-01"]
        assert matches[0].score == pytest.approx(1.0, abs=1e-4)
        assert matches[0].metadata["value"] == 0.06

    def test_nearest_first(self, ephemeral_store):
        ephemeral_store.upsert(
            [
                VectorRecord(id="GDP_2020-01-01", values=unit_vector(0), metadata={"value": 1.0}),
                VectorRecord(id="GDP_2020-04-01", values=unit_vector(1), metadata={"value": 2.0}),
            ]
        )

        matches = ephemeral_store.query(unit_vector(1), 2)

        assert [m.id for m in matches] == ["GDP_2020-04-01", "GDP_2020-01-01"]
        assert matches[0].score > matches[1].score


class TestCreateChromaClient:
    def test_requires_url(self):
        with pytest.raises(ConfigurationError, match="CHROMA_URL"):
            create_chroma_client()

    @patch("chromadb.HttpClient")
    def test_explicit_port(self, http_client):
        create_chroma_client("http://chroma:9000/api")
        http_client.assert_called_once_with(host="chroma", port=9000, ssl=False)

    @patch("chromadb.HttpClient")
    def test_https_defaults_to_443(self, http_client):
        create_chroma_client("https://chroma.example.com")
        http_client.assert_called_once_with(host="chroma.example.com", port=443, ssl=True)

    @patch("chromadb.HttpClient")
    def test_http_defaults_to_8000(self, http_client):
        create_chroma_client("http://chroma")
        http_client.assert_called_once_with(host="chroma", port=8000, ssl=False)
