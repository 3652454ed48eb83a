"""
Embedding provider abstraction.

Supports two embedding backends:
- gemini: Google Gemini ``embedContent`` REST endpoint (task-type aware)
- openai: OpenAI ``/v1/embeddings`` with reduced dimensions

Every provider returns unit-length vectors of ``EMBEDDING_DIMENSIONS``
components, so cosine similarity downstream is a plain dot product.
"""

import logging
import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

import httpx

from config import get_api_key, get_first_api_key, get_settings
from errors import ConfigurationError, FormatError, NormalizationError, UpstreamAPIError

logger = logging.getLogger(__name__)

EMBEDDING_DIMENSIONS = 768


class TaskType(str, Enum):
    """What the embedded text will be used for."""

    DOCUMENT = "RETRIEVAL_DOCUMENT"
    QUERY = "RETRIEVAL_QUERY"


def normalize_embedding(values: list[float]) -> list[float]:
    """
    Scale a vector to unit L2 norm.

    Raises:
        NormalizationError: If the magnitude is zero or not finite
    """
    magnitude = math.sqrt(math.fsum(v * v for v in values))
    if not math.isfinite(magnitude) or magnitude == 0:
        raise NormalizationError(
            "Embedding normalization failed due to zero or non-finite magnitude."
        )
    return [v / magnitude for v in values]


def validate_embedding(values, dimensions: int = EMBEDDING_DIMENSIONS) -> list[float]:
    """
    Check that ``values`` is a list of ``dimensions`` numbers.

    Raises:
        FormatError: On any other shape
    """
    if not isinstance(values, list):
        raise FormatError("Invalid embedding response format.")
    if len(values) != dimensions:
        raise FormatError(
            f"Expected {dimensions}-dimensional embedding, received {len(values)}."
        )
    if not all(
        isinstance(v, (int, float)) and not isinstance(v, bool) for v in values
    ):
        raise FormatError("Embedding contains non-numeric components.")
    return [float(v) for v in values]


class EmbeddingProvider(ABC):
    """Abstract base class for embedding providers."""

    name: str = "base"
    dimensions: int = EMBEDDING_DIMENSIONS

    @property
    @abstractmethod
    def model_id(self) -> str:
        """Identifier of the embedding model, used in cache keys."""
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Check if credentials are available."""
        pass

    @abstractmethod
    def _request_embedding(self, text: str, task_type: TaskType) -> list:
        """Call the remote API and return the raw vector."""
        pass

    def generate_embedding(self, text: str, task_type: TaskType) -> list[float]:
        """
        Embed a text and return a unit-normalized vector.

        Args:
            text: Non-empty text to embed
            task_type: DOCUMENT for stored records, QUERY for user queries

        Raises:
            ValueError: If text is empty
            ConfigurationError: If no API credential is configured
            UpstreamAPIError: On a non-2xx response
            FormatError: If the response lacks a numeric vector of the expected length
            NormalizationError: If the vector cannot be normalized
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        raw = self._request_embedding(text, TaskType(task_type))
        values = validate_embedding(raw, self.dimensions)
        return normalize_embedding(values)


class GeminiEmbeddingProvider(EmbeddingProvider):
    """Google Gemini embeddings via the ``embedContent`` endpoint."""

    name = "gemini"

    DEFAULT_MODEL = "models/gemini-embedding-001"
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.model_name = model_name or self.DEFAULT_MODEL
        if not self.model_name.startswith("models/"):
            self.model_name = f"models/{self.model_name}"
        self._api_key = api_key
        self.timeout = timeout or get_settings().http_timeout_seconds
        self._client = client

    @property
    def model_id(self) -> str:
        return f"{self.name}:{self.model_name}:{self.dimensions}"

    def _get_api_key(self) -> str | None:
        return self._api_key or get_first_api_key("GOOGLE_AI_API_KEY", "GEMINI_API_KEY")

    def is_configured(self) -> bool:
        return self._get_api_key() is not None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def _request_embedding(self, text: str, task_type: TaskType) -> list:
        api_key = self._get_api_key()
        if not api_key:
            raise ConfigurationError(
                "Missing GOOGLE_AI_API_KEY or GEMINI_API_KEY for Gemini embeddings."
            )

        response = self._get_client().post(
            f"{self.BASE_URL}/{self.model_name}:embedContent",
            params={"key": api_key},
            json={
                "content": {"parts": [{"text": text}]},
                "taskType": task_type.value,
                "outputDimensionality": self.dimensions,
            },
        )
        if response.status_code >= 300:
            raise UpstreamAPIError(
                "Gemini embeddings", response.status_code, response.text[:200]
            )

        try:
            data = response.json()
        except ValueError as e:
            raise FormatError("Gemini embedding response is not JSON.") from e

        embedding = data.get("embedding") if isinstance(data, dict) else None
        if not isinstance(embedding, dict):
            raise FormatError("Invalid Gemini embedding response format.")
        return embedding.get("values")


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """
    OpenAI embeddings.

    The task type has no equivalent here and is ignored.
    """

    name = "openai"

    DEFAULT_MODEL = "text-embedding-3-small"
    BASE_URL = "https://api.openai.com"

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.model_name = model_name or self.DEFAULT_MODEL
        self._api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout or get_settings().http_timeout_seconds
        self._client = client

    @property
    def model_id(self) -> str:
        return f"{self.name}:{self.model_name}:{self.dimensions}"

    def _get_api_key(self) -> str | None:
        return self._api_key or get_api_key("OPENAI_API_KEY")

    def is_configured(self) -> bool:
        return self._get_api_key() is not None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def _request_embedding(self, text: str, task_type: TaskType) -> list:
        api_key = self._get_api_key()
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY is required for OpenAI embeddings")

        response = self._get_client().post(
            f"{self.base_url}/v1/embeddings",
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": self.model_name,
                "input": [text],
                "dimensions": self.dimensions,
            },
        )
        if response.status_code >= 300:
            raise UpstreamAPIError(
                "OpenAI embeddings", response.status_code, response.text[:200]
            )

        try:
            data = response.json()
        except ValueError as e:
            raise FormatError("OpenAI embedding response is not JSON.") from e

        items = data.get("data") if isinstance(data, dict) else None
        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            raise FormatError("Invalid OpenAI embedding response format.")
        return items[0].get("embedding")


def get_embedding_provider(provider_type: Optional[str] = None) -> EmbeddingProvider:
    """
    Get an embedding provider.

    Args:
        provider_type: "gemini" or "openai" (defaults to EMBEDDING_PROVIDER)

    Raises:
        ValueError: If the provider type is unknown
    """
    provider_type = (provider_type or get_settings().embedding_provider).lower()

    if provider_type == "gemini":
        return GeminiEmbeddingProvider()
    elif provider_type == "openai":
        return OpenAIEmbeddingProvider()
    else:
        raise ValueError(
            f"Unknown embedding provider type: {provider_type}. "
            f"Available: gemini, openai"
        )
