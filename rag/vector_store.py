"""
Vector index adapter.

Vectors live in a ChromaDB collection per namespace (``<prefix><namespace>``)
using cosine distance. Re-upserting an existing id overwrites it.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from config import get_settings
from errors import ConfigurationError, UpstreamAPIError

logger = logging.getLogger(__name__)


@dataclass
class VectorRecord:
    """A vector with its id and metadata, ready for upsert."""

    id: str
    values: list[float]
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class RetrievalMatch:
    """A query hit. Higher score means more similar."""

    id: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"id": self.id, "score": self.score, "metadata": self.metadata}


class VectorStore(ABC):
    """Abstract namespaced vector index."""

    namespace: str

    @abstractmethod
    def upsert(self, records: list[VectorRecord]) -> None:
        """Insert or overwrite records by id."""
        pass

    @abstractmethod
    def query(self, vector: list[float], top_k: int) -> list[RetrievalMatch]:
        """Return up to top_k nearest records, best first."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of vectors in the namespace."""
        pass


def create_chroma_client(url: Optional[str] = None):
    """
    Create a ChromaDB HTTP client from a URL like ``http://host:8000``.

    Without an explicit port, https URLs use 443 and http URLs use 8000.

    Raises:
        ConfigurationError: If no URL is configured
    """
    url = url or get_settings().chroma_url
    if not url:
        raise ConfigurationError(
            "ChromaDB not configured. Set CHROMA_URL environment variable."
        )

    import chromadb

    ssl = url.startswith("https://")
    url_clean = url.replace("http://", "").replace("https://", "")
    authority = url_clean.split("/")[0]
    if ":" in authority:
        host, port_str = authority.split(":", 1)
        port = int(port_str)
    else:
        host = authority
        port = 443 if ssl else 8000

    client = chromadb.HttpClient(host=host, port=port, ssl=ssl)
    logger.info(f"Connected to ChromaDB at {url}")
    return client


@contextmanager
def _chroma_errors(action: str):
    """Surface ChromaDB client and transport failures as UpstreamAPIError."""
    from chromadb.errors import ChromaError

    try:
        yield
    except ChromaError as e:
        raise UpstreamAPIError("ChromaDB", None, f"{action}: {e}") from e
    except httpx.HTTPStatusError as e:
        raise UpstreamAPIError("ChromaDB", e.response.status_code, action) from e
    except httpx.HTTPError as e:
        raise UpstreamAPIError("ChromaDB", None, f"{action}: {e}") from e


class ChromaVectorStore(VectorStore):
    """ChromaDB-backed vector store, one collection per namespace."""

    def __init__(
        self,
        namespace: Optional[str] = None,
        client=None,
        collection_prefix: Optional[str] = None,
    ):
        settings = get_settings()
        self.namespace = namespace or settings.chroma_namespace
        self.collection_prefix = (
            collection_prefix
            if collection_prefix is not None
            else settings.chroma_collection_prefix
        )
        self._client = client
        self._collection = None

    @property
    def collection_name(self) -> str:
        return f"{self.collection_prefix}{self.namespace}"

    def _get_client(self):
        if self._client is None:
            self._client = create_chroma_client()
        return self._client

    def _get_collection(self):
        if self._collection is None:
            self._collection = self._get_client().get_or_create_collection(
                name=self.collection_name,
                metadata={"hnsw:space": "cosine"},
            )
        return self._collection

    def upsert(self, records: list[VectorRecord]) -> None:
        if not records:
            return
        with _chroma_errors("upsert"):
            self._get_collection().upsert(
                ids=[r.id for r in records],
                embeddings=[r.values for r in records],
                metadatas=[r.metadata for r in records],
                documents=[str(r.metadata.get("text", "")) for r in records],
            )
        logger.debug(f"Upserted {len(records)} vectors into {self.collection_name}")

    def count(self) -> int:
        with _chroma_errors("count"):
            return self._get_collection().count()

    def query(self, vector: list[float], top_k: int) -> list[RetrievalMatch]:
        if top_k <= 0:
            return []

        with _chroma_errors("query"):
            collection = self._get_collection()
            available = collection.count()
            if available == 0:
                logger.debug(f"Namespace {self.namespace} is empty")
                return []

            results = collection.query(
                query_embeddings=[vector],
                n_results=min(top_k, available),
                include=["metadatas", "distances"],
            )

        ids = (results.get("ids") or [[]])[0] or []
        metadatas = (results.get("metadatas") or [[]])[0] or [{}] * len(ids)
        distances = (results.get("distances") or [[]])[0] or [0.0] * len(ids)

        # Cosine distance is 1 - similarity; Chroma already orders by distance
        return [
            RetrievalMatch(id=vid, score=1.0 - float(dist), metadata=dict(meta or {}))
            for vid, meta, dist in zip(ids, metadatas, distances)
        ]
