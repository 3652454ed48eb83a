"""
Write-through embedding cache on observation rows.

A stored embedding is reused when it has the expected dimensionality and
was generated for the same model and text. Rows embedded before keys were
recorded carry no key and are reused on dimensionality alone.
"""

import hashlib
import logging
from typing import Callable, Optional

from db import save_embedding
from db.models import Observation

from .embeddings import EmbeddingProvider, TaskType

logger = logging.getLogger(__name__)


def embedding_cache_key(model_id: str, text: str) -> str:
    """Stable key for an embedding of ``text`` produced by ``model_id``."""
    return hashlib.sha256(f"{model_id}\n{text}".encode("utf-8")).hexdigest()


class EmbeddingCache:
    """Decides between reusing a row's embedding and regenerating it."""

    def __init__(
        self,
        provider: EmbeddingProvider,
        persist: Optional[Callable[[int, list[float], str], bool]] = None,
    ):
        self.provider = provider
        self.persist = persist or save_embedding
        self.hits = 0
        self.misses = 0

    def is_fresh(self, observation: Observation, key: str) -> bool:
        """True if the cached embedding can be used as-is."""
        cached = observation.embedding
        if not isinstance(cached, list) or len(cached) != self.provider.dimensions:
            return False
        return observation.embedding_key is None or observation.embedding_key == key

    def get_or_create(self, observation: Observation, text: str) -> list[float]:
        """
        Return the embedding for an observation, generating it on a miss.

        On a miss the new vector and key are written back to the row and to
        the in-memory object. Errors from the provider propagate.
        """
        key = embedding_cache_key(self.provider.model_id, text)

        if self.is_fresh(observation, key):
            self.hits += 1
            logger.debug(f"Using cached embedding for: {text!r}")
            return observation.embedding

        if isinstance(observation.embedding, list):
            logger.info(
                f"Regenerating cached embedding with {len(observation.embedding)} "
                f"dimensions for: {text!r}"
            )
        else:
            logger.debug(f"Generating embedding for: {text!r}")

        self.misses += 1
        embedding = self.provider.generate_embedding(text, TaskType.DOCUMENT)

        self.persist(observation.id, embedding, key)
        observation.embedding = embedding
        observation.embedding_key = key
        return embedding
