"""
Retrieval query service.

Embeds a free-text query and asks the vector store for its nearest
observations. Ranking is entirely the store's.
"""

import logging
from typing import Optional

from .embeddings import EmbeddingProvider, TaskType, get_embedding_provider
from .vector_store import ChromaVectorStore, RetrievalMatch, VectorStore

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 200


class RetrievalService:
    """Embeds queries and returns the vector store's top matches."""

    def __init__(
        self,
        embedding_provider: Optional[EmbeddingProvider] = None,
        vector_store: Optional[VectorStore] = None,
    ):
        self.embedding_provider = embedding_provider or get_embedding_provider()
        self.vector_store = vector_store or ChromaVectorStore()

    def query(self, text: str, top_k: int = DEFAULT_TOP_K) -> list[RetrievalMatch]:
        """
        Retrieve up to ``top_k`` matches for ``text``.

        Returns an empty list when the namespace holds no vectors.

        Raises:
            FormatError: If the query embedding is malformed
        """
        logger.info(f"Generating embedding for query: {text!r}")
        query_vector = self.embedding_provider.generate_embedding(text, TaskType.QUERY)

        logger.debug(f"Querying namespace {self.vector_store.namespace} with top_k={top_k}")
        matches = self.vector_store.query(query_vector, top_k)

        logger.info(f"Retrieved {len(matches)} matches for query")
        return matches[:top_k]


# Global retriever instance
_retriever: Optional[RetrievalService] = None


def get_retriever() -> RetrievalService:
    """Get or create the global retrieval service."""
    global _retriever
    if _retriever is None:
        _retriever = RetrievalService()
    return _retriever


def reset_retriever() -> None:
    """Forget the global retriever (used by tests)."""
    global _retriever
    _retriever = None
