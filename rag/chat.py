"""
Retrieval-augmented chat.

The same three steps run for every provider: retrieve matches for the user
message, render them as a citation block, and assemble the system
instruction, history and user turn. Only the final send is provider-specific.
"""

import logging
from typing import TYPE_CHECKING, Optional

from config import get_settings
from errors import EmptyResponseError

from .retriever import RetrievalService, get_retriever
from .vector_store import RetrievalMatch

if TYPE_CHECKING:
    from providers.base import ChatProvider, ConversationMessage

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_INSTRUCTION = (
    "Answer based on the provided context. Focus on how the banking sector is "
    "affected, and be precise in your reasoning."
)

CITATION_HEADER = "Relevant Information (please cite the IDs in your answer):"

NO_CONTEXT_INSTRUCTION = (
    "No relevant knowledge found in the vector store. Use your general "
    "knowledge to answer as accurately as possible."
)

NO_TEXT_FALLBACK = "No text available"


def render_citations(matches: list[RetrievalMatch]) -> str:
    """Render matches as a citation block, or the no-context instruction."""
    if not matches:
        return NO_CONTEXT_INSTRUCTION

    lines = [
        f"- {(match.metadata or {}).get('text') or NO_TEXT_FALLBACK} [{match.id}]"
        for match in matches
    ]
    return CITATION_HEADER + "\n" + "\n".join(lines)


def resolve_system_instruction(system_instruction: Optional[str] = None) -> str:
    """Caller instruction, else AI_INSTRUCTIONS, else the default."""
    if system_instruction and system_instruction.strip():
        return system_instruction
    return get_settings().ai_instructions or DEFAULT_SYSTEM_INSTRUCTION


def build_user_content(message: str, context: str) -> str:
    return f"{message}\n\n{context}"


class ChatOrchestrator:
    """Runs retrieval and prompt assembly, then hands off to a provider."""

    def __init__(
        self,
        provider: "ChatProvider",
        retriever: Optional[RetrievalService] = None,
    ):
        self.provider = provider
        self._retriever = retriever

    @property
    def retriever(self) -> RetrievalService:
        if self._retriever is None:
            self._retriever = get_retriever()
        return self._retriever

    def chat(
        self,
        history: list["ConversationMessage"],
        message: str,
        system_instruction: Optional[str] = None,
    ) -> str:
        """
        Answer ``message`` given prior ``history``.

        Raises:
            ConfigurationError: If the provider is missing credentials; raised
                before retrieval or any provider request
            EmptyResponseError: If the provider returned no text
        """
        self.provider.ensure_configured()

        matches = self.retriever.query(message, self.provider.top_k)
        context = render_citations(matches)
        logger.info(
            f"Enriching {self.provider.name} with {len(matches)} retrieved matches"
        )

        system = resolve_system_instruction(system_instruction)
        user_content = build_user_content(message, context)

        reply = self.provider.send(system, list(history), user_content)
        if not reply or not reply.strip():
            raise EmptyResponseError(f"{self.provider.name} returned no text.")
        return reply
