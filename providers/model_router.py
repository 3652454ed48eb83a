"""
Round-robin model fallback with a TTL-bound candidate list.

The candidate list is fetched from a provider's model registry, filtered to
chat-capable models and cached for ``ttl_seconds``. Each request starts at
the cursor and walks the list once; the cursor moves past the model that
succeeded, so load rotates across models and a failing model is skipped.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from errors import AllModelsFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 300


def normalize_model_name(name: Optional[str]) -> str:
    """Strip the ``models/`` prefix the Gemini registry uses."""
    if not name:
        return ""
    return name[len("models/") :] if name.startswith("models/") else name


def is_chat_capable_model(model: dict) -> bool:
    """
    Eligibility filter for Gemini registry entries.

    Keeps gemini chat variants that support generateContent and drops
    embedding models and the pro tier.
    """
    lower = normalize_model_name(model.get("name")).lower()
    if "gemini" not in lower:
        return False
    if "embedding" in lower:
        return False
    if "pro" in lower:
        return False
    if "pro" in (model.get("displayName") or "").lower():
        return False
    methods = model.get("supportedGenerationMethods") or []
    return "generateContent" in methods


@dataclass
class RouterState:
    """Cached candidates and cursor, shared by reference."""

    candidates: list[str] = field(default_factory=list)
    expires_at: float = 0.0
    next_index: int = 0
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)


class ModelFallbackRouter:
    """Tries model candidates in rotating order until one succeeds."""

    def __init__(
        self,
        fetch_models: Callable[[], list[dict]],
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        state: Optional[RouterState] = None,
        model_filter: Callable[[dict], bool] = is_chat_capable_model,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.fetch_models = fetch_models
        self.ttl_seconds = ttl_seconds
        self.state = state or RouterState()
        self.model_filter = model_filter
        self.clock = clock

    @property
    def is_loaded(self) -> bool:
        with self.state.lock:
            return bool(self.state.candidates) and self.clock() < self.state.expires_at

    def invalidate(self) -> None:
        """Drop the cached candidates so the next call refetches."""
        with self.state.lock:
            self.state.candidates = []
            self.state.expires_at = 0.0

    def get_candidates(self, force_refresh: bool = False) -> list[str]:
        """
        Return the eligible model names, refreshing the cache if needed.

        Raises:
            AllModelsFailedError: If the registry has no eligible model
        """
        with self.state.lock:
            if not force_refresh and self.is_loaded:
                return list(self.state.candidates)

            models = self.fetch_models()
            names = [
                normalize_model_name(m.get("name"))
                for m in models
                if isinstance(m, dict) and self.model_filter(m)
            ]
            names = [n for n in names if n]
            if not names:
                raise AllModelsFailedError(
                    [], "No eligible models found after filtering."
                )

            self.state.candidates = names
            self.state.expires_at = self.clock() + self.ttl_seconds
            if self.state.next_index >= len(names):
                self.state.next_index = 0

            logger.info(f"Loaded {len(names)} model candidates: {', '.join(names)}")
            return list(names)

    def run(
        self,
        request_fn: Callable[[str], T],
        force_refresh: bool = False,
        on_error: Optional[Callable[[str, Exception], None]] = None,
    ) -> T:
        """
        Call ``request_fn(model_name)`` on candidates until one succeeds.

        Args:
            request_fn: Performs the request with the given model
            force_refresh: Refetch candidates even if the cache is fresh
            on_error: Called with (model_name, exception) for each failure

        Raises:
            AllModelsFailedError: If every candidate failed
        """
        candidates = self.get_candidates(force_refresh=force_refresh)
        count = len(candidates)
        with self.state.lock:
            start_index = self.state.next_index % count

        last_error: Optional[Exception] = None
        attempted: list[str] = []

        for offset in range(count):
            index = (start_index + offset) % count
            model_name = candidates[index]
            attempted.append(model_name)
            try:
                result = request_fn(model_name)
            except Exception as e:
                last_error = e
                logger.warning(f"Model {model_name} failed: {e}")
                if on_error:
                    on_error(model_name, e)
                continue

            with self.state.lock:
                self.state.next_index = (index + 1) % count
            return result

        raise AllModelsFailedError(
            attempted, str(last_error) if last_error is not None else None
        )
