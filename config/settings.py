"""
Environment-driven settings.

Nothing here is validated at import time. Callers ask for a value when they
need it and raise ConfigurationError themselves if it is missing.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Series catalog shipped with the package
CATALOG_FILE = Path(__file__).parent / "series.yaml"

DEFAULT_START_DATE = "2010-01-01"


def get_api_key(env_var: str, file_env_var: str | None = None) -> str | None:
    """
    Get API key from environment variable or file.

    Args:
        env_var: Name of environment variable containing the key
        file_env_var: Optional name of env var containing path to key file

    Returns:
        API key string or None if not configured
    """
    api_key = os.environ.get(env_var)
    if api_key:
        return api_key

    # File-based secret (Docker Swarm secrets)
    if file_env_var:
        api_key_file = os.environ.get(file_env_var)
        if api_key_file and os.path.exists(api_key_file):
            with open(api_key_file, "r") as f:
                return f.read().strip()

    file_path = os.environ.get(f"{env_var}_FILE")
    if file_path and os.path.exists(file_path):
        with open(file_path, "r") as f:
            return f.read().strip()

    return None


def get_first_api_key(*env_vars: str) -> str | None:
    """Return the first configured key among several env var names."""
    for env_var in env_vars:
        api_key = get_api_key(env_var)
        if api_key:
            return api_key
    return None


def _int_env(name: str, default: int) -> int:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={value!r}, using {default}")
        return default


@dataclass
class Settings:
    """Runtime settings read from the environment."""

    fred_start_date: str = DEFAULT_START_DATE
    fred_end_date: str = field(default_factory=lambda: date.today().isoformat())
    chroma_url: str | None = None
    chroma_namespace: str = "fred"
    chroma_collection_prefix: str = "fredrelay_"
    embedding_provider: str = "gemini"
    embedding_batch_size: int = 100
    chat_provider: str = "gemini"
    ai_instructions: str | None = None
    model_cache_ttl_seconds: int = 300
    http_timeout_seconds: int = 60


def get_settings() -> Settings:
    """Build a Settings object from the current environment."""
    return Settings(
        fred_start_date=os.environ.get("FRED_START_DATE") or DEFAULT_START_DATE,
        fred_end_date=os.environ.get("FRED_END_DATE") or date.today().isoformat(),
        chroma_url=os.environ.get("CHROMA_URL") or None,
        chroma_namespace=os.environ.get("CHROMA_NAMESPACE") or "fred",
        chroma_collection_prefix=os.environ.get(
            "CHROMA_COLLECTION_PREFIX", "fredrelay_"
        ),
        embedding_provider=(os.environ.get("EMBEDDING_PROVIDER") or "gemini").lower(),
        embedding_batch_size=_int_env("EMBEDDING_BATCH_SIZE", 100),
        chat_provider=(os.environ.get("CHAT_PROVIDER") or "gemini").lower(),
        ai_instructions=os.environ.get("AI_INSTRUCTIONS") or None,
        model_cache_ttl_seconds=_int_env("GEMINI_MODEL_CACHE_TTL_SECONDS", 300),
        http_timeout_seconds=_int_env("HTTP_TIMEOUT_SECONDS", 60),
    )


def load_catalog(path: Path | None = None) -> dict[str, Any]:
    """Load the series catalog YAML.

    Returns:
        Dict with ``series`` (list of {id, description}) and ``retrieval``
        (provider name -> top_k) keys
    """
    catalog_path = path or CATALOG_FILE
    if not catalog_path.exists():
        logger.warning(f"Series catalog not found: {catalog_path}")
        return {"series": [], "retrieval": {}}

    with open(catalog_path, "r") as f:
        catalog = yaml.safe_load(f) or {}

    catalog.setdefault("series", [])
    catalog.setdefault("retrieval", {})
    return catalog


def get_default_series_ids(path: Path | None = None) -> list[str]:
    """Return the series IDs listed in the catalog, in file order."""
    return [entry["id"] for entry in load_catalog(path)["series"] if "id" in entry]


def get_retrieval_top_k(provider_name: str, default: int) -> int:
    """Per-provider retrieval depth from the catalog, or ``default``."""
    value = load_catalog()["retrieval"].get(provider_name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid top_k for {provider_name}: {value!r}")
        return default
