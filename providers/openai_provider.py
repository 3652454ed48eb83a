"""
OpenAI provider.

Uses the OpenAI SDK directly with their standard API endpoint.
"""

import logging
import os
from typing import Any

import openai
from openai import OpenAI

from config import get_api_key, get_settings
from errors import ConfigurationError, EmptyResponseError, UpstreamAPIError

from .base import ChatProvider, ConversationMessage

logger = logging.getLogger(__name__)


class OpenAIChatProvider(ChatProvider):
    """Provider for OpenAI GPT models."""

    name = "openai"
    api_key_env = "OPENAI_API_KEY"
    default_model = "gpt-4o"
    temperature = 1.0
    max_tokens = 1000

    def __init__(self, client: Any = None, model: str | None = None):
        self._client = client
        self._model = model

    @property
    def model(self) -> str:
        return self._model or os.environ.get("OPENAI_CHAT_MODEL") or self.default_model

    def missing_configuration(self) -> list[str]:
        return [] if get_api_key(self.api_key_env) else [self.api_key_env]

    def get_client(self) -> OpenAI:
        """Get or create OpenAI client."""
        if self._client is None:
            api_key = get_api_key(self.api_key_env)
            if not api_key:
                raise ConfigurationError(f"{self.api_key_env} is required for {self.name}")
            self._client = OpenAI(
                api_key=api_key, timeout=get_settings().http_timeout_seconds
            )
        return self._client

    def _build_messages(
        self,
        system: str,
        history: list[ConversationMessage],
        user_content: str,
    ) -> list[dict]:
        """System first, then history, then the new user turn."""
        messages = [{"role": "system", "content": system}]
        for message in history:
            role = "assistant" if message.is_assistant else message.role
            messages.append({"role": role, "content": message.content})
        messages.append({"role": "user", "content": user_content})
        return messages

    def send(
        self,
        system: str,
        history: list[ConversationMessage],
        user_content: str,
    ) -> str:
        client = self.get_client()
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=self._build_messages(system, history, user_content),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.APIStatusError as e:
            raise UpstreamAPIError(self.name, e.status_code, e.message) from e
        except openai.APIConnectionError as e:
            # Timeouts are a subclass; there is no status to report
            raise UpstreamAPIError(self.name, None, str(e)) from e

        reply = response.choices[0].message.content if response.choices else None
        if not reply or not reply.strip():
            raise EmptyResponseError(f"No response text received from {self.name}.")
        return reply
