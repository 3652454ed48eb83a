"""
Provider registry for the chat providers.

Holds one instance per provider so per-provider state (SDK clients, the
Gemini model router cursor) survives across requests.
"""

import logging
from typing import TYPE_CHECKING

from config import get_settings

if TYPE_CHECKING:
    from .base import ChatProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Central registry for all chat providers."""

    def __init__(self):
        self._providers: dict[str, "ChatProvider"] = {}

    def register(self, provider: "ChatProvider") -> None:
        """Register a provider instance, replacing any with the same name."""
        self._providers[provider.name] = provider
        logger.info(f"Registered provider: {provider.name}")

    def get_provider(self, name: str) -> "ChatProvider | None":
        """Get a provider by name."""
        return self._providers.get(name.lower().strip())

    def get_all_providers(self) -> list["ChatProvider"]:
        """Return all registered providers."""
        return list(self._providers.values())

    def get_configured_providers(self) -> list["ChatProvider"]:
        """Return providers that have valid API credentials."""
        return [p for p in self._providers.values() if p.is_configured()]

    def resolve(self, name: str | None = None) -> "ChatProvider":
        """
        Resolve a provider by name, falling back to CHAT_PROVIDER.

        Raises:
            ValueError: If no provider with that name is registered
        """
        provider_name = name or get_settings().chat_provider
        provider = self.get_provider(provider_name)
        if provider is None:
            available = ", ".join(sorted(self._providers))
            raise ValueError(
                f"Unknown chat provider: {provider_name}. Available: {available}"
            )
        return provider

    def clear(self) -> None:
        self._providers.clear()


# Global registry instance
registry = ProviderRegistry()
