"""
Chat providers package.

This module registers every provider with the global registry.
To add a new provider:
1. Create a new provider file (e.g., mistral_provider.py)
2. Import it and add it to register_all_providers() below
"""

from .anthropic_provider import AnthropicChatProvider
from .azure_provider import AzureOpenAIChatProvider
from .base import ChatProvider, ConversationMessage, parse_history
from .gemini_provider import GeminiChatProvider
from .model_router import ModelFallbackRouter, RouterState, is_chat_capable_model
from .openai_provider import OpenAIChatProvider
from .registry import ProviderRegistry, registry


def register_all_providers(target: ProviderRegistry | None = None) -> ProviderRegistry:
    """Register one instance of each provider."""
    target = target or registry
    target.register(GeminiChatProvider())
    target.register(OpenAIChatProvider())
    target.register(AnthropicChatProvider())
    target.register(AzureOpenAIChatProvider())
    return target


register_all_providers()

__all__ = [
    "registry",
    "register_all_providers",
    "ProviderRegistry",
    "ChatProvider",
    "ConversationMessage",
    "parse_history",
    "ModelFallbackRouter",
    "RouterState",
    "is_chat_capable_model",
    "GeminiChatProvider",
    "OpenAIChatProvider",
    "AnthropicChatProvider",
    "AzureOpenAIChatProvider",
]
