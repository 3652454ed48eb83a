"""
Azure OpenAI provider.

Same request shape as OpenAI; the model is the configured deployment.
"""

import os
from typing import Any

from openai import AzureOpenAI

from config import get_api_key, get_settings
from errors import ConfigurationError

from .openai_provider import OpenAIChatProvider

DEFAULT_API_VERSION = "2024-06-01"


class AzureOpenAIChatProvider(OpenAIChatProvider):
    """Provider for Azure-hosted OpenAI deployments."""

    name = "azure"
    api_key_env = "AZURE_OPENAI_API_KEY"
    temperature = 0.7
    max_tokens = 1024

    def __init__(self, client: Any = None):
        super().__init__(client=client)

    @property
    def model(self) -> str:
        return os.environ.get("AZURE_OPENAI_DEPLOYMENT_ID", "")

    def missing_configuration(self) -> list[str]:
        missing = []
        if not get_api_key(self.api_key_env):
            missing.append(self.api_key_env)
        for env_var in ("AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_DEPLOYMENT_ID"):
            if not os.environ.get(env_var):
                missing.append(env_var)
        return missing

    def get_client(self) -> AzureOpenAI:
        """Get or create the Azure OpenAI client."""
        if self._client is None:
            self.ensure_configured()
            api_key = get_api_key(self.api_key_env)
            if not api_key:
                raise ConfigurationError(f"{self.api_key_env} is required for {self.name}")
            self._client = AzureOpenAI(
                api_key=api_key,
                azure_endpoint=os.environ["AZURE_OPENAI_ENDPOINT"],
                api_version=os.environ.get("AZURE_OPENAI_API_VERSION", DEFAULT_API_VERSION),
                timeout=get_settings().http_timeout_seconds,
            )
        return self._client
