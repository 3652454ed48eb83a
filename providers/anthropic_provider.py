"""
Anthropic Claude provider.

Anthropic uses its own SDK format which differs from OpenAI: the system
prompt is a separate field and only user/assistant roles are allowed in
the message list.
"""

import logging
import os
from typing import Any

import anthropic

from config import get_first_api_key, get_settings
from errors import ConfigurationError, EmptyResponseError, UpstreamAPIError

from .base import ChatProvider, ConversationMessage

logger = logging.getLogger(__name__)

API_KEY_ENVS = ("CLAUDE_API_KEY", "ANTHROPIC_API_KEY")


class AnthropicChatProvider(ChatProvider):
    """Provider for Anthropic Claude models."""

    name = "anthropic"
    default_model = "claude-sonnet-4-5-20250929"
    max_tokens = 1024

    def __init__(self, client: Any = None, model: str | None = None):
        self._client = client
        self._model = model

    @property
    def model(self) -> str:
        return self._model or os.environ.get("ANTHROPIC_CHAT_MODEL") or self.default_model

    def missing_configuration(self) -> list[str]:
        return [] if get_first_api_key(*API_KEY_ENVS) else [API_KEY_ENVS[0]]

    def get_client(self) -> anthropic.Anthropic:
        """Get or create Anthropic client."""
        if self._client is None:
            api_key = get_first_api_key(*API_KEY_ENVS)
            if not api_key:
                raise ConfigurationError("CLAUDE_API_KEY is required for Anthropic provider")
            self._client = anthropic.Anthropic(
                api_key=api_key, timeout=get_settings().http_timeout_seconds
            )
        return self._client

    def _build_kwargs(
        self,
        system: str,
        history: list[ConversationMessage],
        user_content: str,
    ) -> dict:
        """Build kwargs for Anthropic API call."""
        # System turns in history are folded into the system prompt
        system_parts = [system]
        messages = []
        for message in history:
            if message.role == "system":
                system_parts.append(message.content)
                continue
            role = "assistant" if message.is_assistant else "user"
            messages.append({"role": role, "content": message.content})
        messages.append({"role": "user", "content": user_content})

        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": "\n\n".join(p for p in system_parts if p),
            "messages": messages,
        }

    def send(
        self,
        system: str,
        history: list[ConversationMessage],
        user_content: str,
    ) -> str:
        client = self.get_client()
        try:
            response = client.messages.create(
                **self._build_kwargs(system, history, user_content)
            )
        except anthropic.APIStatusError as e:
            raise UpstreamAPIError(self.name, e.status_code, e.message) from e
        except anthropic.APIConnectionError as e:
            raise UpstreamAPIError(self.name, None, str(e)) from e

        texts = [block.text for block in response.content or [] if hasattr(block, "text")]
        reply = "\n".join(texts)
        if not reply.strip():
            raise EmptyResponseError("Claude returned no content.")
        return reply
