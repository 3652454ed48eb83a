"""
Batch upsert of stored observations into the vector index.

Each observation is rendered to a fixed sentence, embedded (cache-or-generate)
and upserted in batches small enough for the index's payload limit.
"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

from db import get_all_observations
from db.models import Observation

from .cache import EmbeddingCache
from .embeddings import EmbeddingProvider, get_embedding_provider
from .vector_store import ChromaVectorStore, VectorRecord, VectorStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


def _day(value: date | datetime) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def _format_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def observation_text(series_id: str, obs_date: date | datetime, value: float) -> str:
    """
    Canonical sentence embedded for an observation.

    Changing this wording changes every cache key, so all stored embeddings
    would be regenerated on the next run.
    """
    return (
        f"series {series_id} observation on {_day(obs_date)} "
        f"had value {_format_value(value)}."
    )


def vector_id(series_id: str, obs_date: date | datetime) -> str:
    """Deterministic vector id for a (series, day) pair."""
    return f"{series_id}_{_day(obs_date)}"


def build_vector_record(observation: Observation, text: str, values: list[float]) -> VectorRecord:
    return VectorRecord(
        id=vector_id(observation.series_id, observation.date),
        values=values,
        metadata={
            "seriesId": observation.series_id,
            "date": _day(observation.date),
            "value": float(observation.value),
            "text": text,
        },
    )


class EmbeddingUpserter:
    """Embeds every stored observation and upserts it in batches."""

    def __init__(
        self,
        embedding_provider: Optional[EmbeddingProvider] = None,
        vector_store: Optional[VectorStore] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        load_observations: Optional[Callable[[], list[Observation]]] = None,
        cache: Optional[EmbeddingCache] = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.embedding_provider = embedding_provider or get_embedding_provider()
        self.vector_store = vector_store or ChromaVectorStore()
        self.batch_size = batch_size
        self.load_observations = load_observations or get_all_observations
        self.cache = cache or EmbeddingCache(self.embedding_provider)

    def build_records(self, observations: list[Observation]) -> list[VectorRecord]:
        """
        Build vector records, skipping observations that fail to embed.
        """
        records = []
        for observation in observations:
            text = observation_text(
                observation.series_id, observation.date, observation.value
            )
            try:
                values = self.cache.get_or_create(observation, text)
            except Exception as e:
                logger.error(f"Error processing observation {observation.id}: {e}")
                continue
            records.append(build_vector_record(observation, text, values))
        return records

    def upsert_records(self, records: list[VectorRecord]) -> int:
        """
        Upsert records in batches.

        A failing batch is logged and the remaining batches are still sent.

        Returns:
            Number of records in batches that were accepted
        """
        total = 0
        for start in range(0, len(records), self.batch_size):
            batch = records[start : start + self.batch_size]
            batch_number = start // self.batch_size + 1
            try:
                self.vector_store.upsert(batch)
            except Exception as e:
                logger.error(
                    f"Error upserting batch {batch_number} starting at index {start}: {e}"
                )
                continue
            total += len(batch)
            logger.info(f"Upserted batch {batch_number} ({len(batch)} vectors)")
        return total

    def upsert_all(self) -> int:
        """
        Embed and upsert every stored observation.

        Returns:
            Count of vectors successfully upserted
        """
        observations = self.load_observations()
        logger.info(f"Preparing {len(observations)} observations for upsert")

        records = self.build_records(observations)
        total = self.upsert_records(records)

        logger.info(
            f"Successfully upserted {total} vectors to namespace "
            f"{self.vector_store.namespace} (cache hits={self.cache.hits}, "
            f"generated={self.cache.misses})"
        )
        return total
