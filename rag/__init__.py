"""
RAG (Retrieval-Augmented Generation) module for FRED Relay.

Embeds stored observations into a ChromaDB namespace and retrieves them
as citation context for chat.
"""

from .cache import EmbeddingCache, embedding_cache_key
from .chat import (
    NO_CONTEXT_INSTRUCTION,
    ChatOrchestrator,
    render_citations,
    resolve_system_instruction,
)
from .embeddings import (
    EMBEDDING_DIMENSIONS,
    EmbeddingProvider,
    GeminiEmbeddingProvider,
    OpenAIEmbeddingProvider,
    TaskType,
    get_embedding_provider,
    normalize_embedding,
)
from .retriever import RetrievalService, get_retriever
from .upserter import EmbeddingUpserter, observation_text, vector_id
from .vector_store import ChromaVectorStore, RetrievalMatch, VectorRecord, VectorStore

__all__ = [
    # Embeddings
    "EMBEDDING_DIMENSIONS",
    "EmbeddingProvider",
    "GeminiEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "TaskType",
    "get_embedding_provider",
    "normalize_embedding",
    # Cache
    "EmbeddingCache",
    "embedding_cache_key",
    # Vector store
    "VectorStore",
    "ChromaVectorStore",
    "VectorRecord",
    "RetrievalMatch",
    # Upsert
    "EmbeddingUpserter",
    "observation_text",
    "vector_id",
    # Retrieval
    "RetrievalService",
    "get_retriever",
    # Chat
    "ChatOrchestrator",
    "render_citations",
    "resolve_system_instruction",
    "NO_CONTEXT_INSTRUCTION",
]
