"""
Google Gemini provider.

Talks to the Generative Language REST API directly. The model is not fixed:
each request goes through a ModelFallbackRouter over the chat-capable models
the API currently lists.
"""

import logging
from typing import Optional

import httpx

from config import get_first_api_key, get_settings
from errors import ConfigurationError, EmptyResponseError, FormatError, UpstreamAPIError

from .base import ChatProvider, ConversationMessage
from .model_router import ModelFallbackRouter

logger = logging.getLogger(__name__)

API_BASE = "https://generativelanguage.googleapis.com"
MODEL_LIST_URL = f"{API_BASE}/v1/models"
GENERATE_URL = f"{API_BASE}/v1beta/models/{{model}}:generateContent"

GENERATION_CONFIG = {
    "temperature": 0.4,
    "topP": 0.95,
    "topK": 64,
    "maxOutputTokens": 8192,
}

SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_NONE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]


def extract_text(data: dict) -> str:
    """Join the text parts of the first candidate of a generateContent reply."""
    candidates = data.get("candidates") if isinstance(data, dict) else None
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


class GeminiChatProvider(ChatProvider):
    """Provider for Google Gemini models with model rotation."""

    name = "gemini"
    default_top_k = 3000

    def __init__(
        self,
        api_key: Optional[str] = None,
        router: Optional[ModelFallbackRouter] = None,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self._api_key = api_key
        self._client = client
        self.timeout = timeout or settings.http_timeout_seconds
        self.router = router or ModelFallbackRouter(
            self.list_models, ttl_seconds=settings.model_cache_ttl_seconds
        )

    def _get_api_key(self) -> str | None:
        return self._api_key or get_first_api_key("GOOGLE_AI_API_KEY", "GEMINI_API_KEY")

    def missing_configuration(self) -> list[str]:
        return [] if self._get_api_key() else ["GOOGLE_AI_API_KEY"]

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def _require_key(self) -> str:
        api_key = self._get_api_key()
        if not api_key:
            raise ConfigurationError("Missing GOOGLE_AI_API_KEY in environment variables")
        return api_key

    def list_models(self) -> list[dict]:
        """Fetch the raw model registry."""
        response = self._get_client().get(
            MODEL_LIST_URL, params={"key": self._require_key()}
        )
        if response.status_code >= 300:
            raise UpstreamAPIError(
                "Gemini model list", response.status_code, response.text[:200]
            )
        data = response.json()
        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            raise FormatError("Gemini model list response has no models array.")
        return models

    def _build_contents(
        self, history: list[ConversationMessage], user_content: str
    ) -> list[dict]:
        contents = []
        for message in history:
            if message.role == "system":
                continue
            role = "model" if message.is_assistant else "user"
            contents.append({"role": role, "parts": [{"text": message.content}]})
        contents.append({"role": "user", "parts": [{"text": user_content}]})
        return contents

    def generate(self, model: str, payload: dict) -> str:
        """Call generateContent on one model."""
        response = self._get_client().post(
            GENERATE_URL.format(model=model),
            params={"key": self._require_key()},
            json=payload,
        )
        if response.status_code >= 300:
            raise UpstreamAPIError(
                f"Gemini {model}", response.status_code, response.text[:200]
            )
        text = extract_text(response.json())
        if not text.strip():
            raise EmptyResponseError(f"Gemini model {model} returned no text.")
        return text

    def send(
        self,
        system: str,
        history: list[ConversationMessage],
        user_content: str,
    ) -> str:
        self._require_key()
        payload = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": self._build_contents(history, user_content),
            "generationConfig": GENERATION_CONFIG,
            "safetySettings": SAFETY_SETTINGS,
        }

        def on_error(model: str, error: Exception) -> None:
            logger.warning(f"Gemini model {model} failed, trying next: {error}")

        return self.router.run(
            lambda model: self.generate(model, payload), on_error=on_error
        )
