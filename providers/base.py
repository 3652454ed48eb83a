"""
Base classes for chat providers.

Every provider turns the same (system, history, user message) triple into
its own request shape and returns plain reply text. Retrieval and prompt
assembly happen once, in rag.chat, before a provider is called.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from config import get_retrieval_top_k
from errors import ConfigurationError

logger = logging.getLogger(__name__)

VALID_ROLES = {"user", "assistant", "model", "system"}


@dataclass
class ConversationMessage:
    """One turn of dialogue history."""

    role: str
    content: str

    @property
    def is_assistant(self) -> bool:
        return self.role in ("assistant", "model")

    @classmethod
    def from_dict(cls, data: dict) -> "ConversationMessage":
        """
        Parse a history entry.

        Accepts ``{"role", "content"}`` as well as Gemini-style
        ``{"role", "parts": [{"text": ...}]}``.

        Raises:
            ValueError: If the role is unknown or the entry has no text
        """
        if not isinstance(data, dict):
            raise ValueError("History entries must be objects")

        role = str(data.get("role", "")).lower().strip()
        if role not in VALID_ROLES:
            raise ValueError(f"Unknown message role: {role!r}")

        content = data.get("content")
        if content is None and isinstance(data.get("parts"), list):
            content = "".join(
                str(part.get("text", ""))
                for part in data["parts"]
                if isinstance(part, dict)
            )
        if not isinstance(content, str):
            raise ValueError("History entry has no text content")

        return cls(role=role, content=content)

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


def parse_history(raw: list | None) -> list[ConversationMessage]:
    """Parse a list of history dicts, preserving order."""
    if not raw:
        return []
    if not isinstance(raw, list):
        raise ValueError("history must be a list")
    return [ConversationMessage.from_dict(item) for item in raw]


class ChatProvider(ABC):
    """Abstract base class for chat providers."""

    name: str  # Provider identifier (e.g., "gemini", "openai", "anthropic", "azure")
    default_top_k: int = 3

    @abstractmethod
    def missing_configuration(self) -> list[str]:
        """Return the names of required settings that are not set."""
        pass

    @abstractmethod
    def send(
        self,
        system: str,
        history: list[ConversationMessage],
        user_content: str,
    ) -> str:
        """
        Send one chat turn and return the reply text.

        Args:
            system: Fully resolved system instruction
            history: Prior turns, oldest first
            user_content: The new user message with its context block appended

        Raises:
            EmptyResponseError: If the provider returned no usable text
        """
        pass

    def is_configured(self) -> bool:
        """Check if this provider has valid API credentials configured."""
        return not self.missing_configuration()

    def ensure_configured(self) -> None:
        """
        Raises:
            ConfigurationError: If any required credential is missing
        """
        missing = self.missing_configuration()
        if missing:
            raise ConfigurationError(
                f"Missing {', '.join(missing)} in environment variables "
                f"for {self.name} provider"
            )

    @property
    def top_k(self) -> int:
        """Number of retrieval matches to include for this provider."""
        return get_retrieval_top_k(self.name, self.default_top_k)

    def complete(self, prompt: str, system: str) -> str:
        """Single-turn request without history."""
        self.ensure_configured()
        return self.send(system, [], prompt)
