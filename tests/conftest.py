"""
Shared fixtures: an isolated environment and an in-memory database.
"""

import pytest

from db import init_db, reset_engine
from rag.retriever import reset_retriever

ENV_KEYS = [
    "GOOGLE_AI_API_KEY",
    "GEMINI_API_KEY",
    "OPENAI_API_KEY",
    "CLAUDE_API_KEY",
    "ANTHROPIC_API_KEY",
    "AZURE_OPENAI_API_KEY",
    "AZURE_OPENAI_ENDPOINT",
    "AZURE_OPENAI_DEPLOYMENT_ID",
    "FRED_API_KEY",
    "CHROMA_URL",
    "CHROMA_NAMESPACE",
    "CHROMA_COLLECTION_PREFIX",
    "EMBEDDING_PROVIDER",
    "CHAT_PROVIDER",
    "AI_INSTRUCTIONS",
    "DATABASE_URL",
    "FRED_START_DATE",
    "FRED_END_DATE",
    "EMBEDDING_BATCH_SIZE",
    "GEMINI_MODEL_CACHE_TTL_SECONDS",
    "HTTP_TIMEOUT_SECONDS",
    "OPENAI_CHAT_MODEL",
    "ANTHROPIC_CHAT_MODEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """No credentials or endpoints leak in from the developer's shell."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
        monkeypatch.delenv(f"{key}_FILE", raising=False)
    reset_retriever()
    yield
    reset_retriever()


@pytest.fixture
def database(monkeypatch):
    """Fresh in-memory SQLite database with tables created."""
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    reset_engine()
    init_db()
    yield
    reset_engine()
