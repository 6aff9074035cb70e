"""Pydantic AI model provider.

Builds the pydantic-ai ``Model`` for the configured LLM provider. API keys
come from the application settings; a provider without a key cannot be
used.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_ai import ModelSettings
from pydantic_ai.models import Model
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.openai import OpenAIResponsesModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.providers.openai import OpenAIProvider

from transparent_trust.server.core.config import Settings, settings

logger = logging.getLogger(__name__)


class ModelConfig(BaseModel):
    """Model selection and generation parameters.

    Attributes:
        provider: AI provider name (openai, anthropic, google)
        model: Model name
        temperature: Sampling temperature (0.0-2.0)
        max_tokens: Maximum output tokens
        top_p: Top-p sampling (0.0-1.0)
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    provider: str = Field(..., description="AI provider name")
    model: str = Field(..., description="Model name")
    temperature: float = Field(default=0.2, ge=0, le=2, description="Model temperature (0.0-2.0)")
    max_tokens: Optional[int] = Field(None, ge=1, description="Maximum output tokens")
    top_p: Optional[float] = Field(default=None, ge=0, le=1, description="Top-p sampling (0.0-1.0)")

    @classmethod
    def from_settings(cls, app_settings: Optional[Settings] = None) -> "ModelConfig":
        """Default configuration for the active provider."""
        app_settings = app_settings or settings
        llm = app_settings.llm
        provider = llm.provider.lower()
        models = {
            "openai": app_settings.openai.model,
            "anthropic": app_settings.anthropic.model,
            "google": app_settings.google.model,
        }
        return cls(
            provider=provider,
            model=models.get(provider, ""),
            temperature=llm.temperature,
            max_tokens=llm.max_tokens,
        )


class PydanticAIModelProvider:
    """Create pydantic-ai models from a ``ModelConfig``."""

    def __init__(self, app_settings: Optional[Settings] = None):
        self.settings = app_settings or settings

    def get_supported_providers(self) -> List[str]:
        return ["openai", "anthropic", "google"]

    def validate_config(self, config: ModelConfig) -> None:
        if not config.provider:
            raise ValueError("Provider is required")
        if not config.model:
            raise ValueError("Model is required")
        if config.provider.lower() not in self.get_supported_providers():
            raise ValueError(f"Unsupported provider: {config.provider}")

    def _model_settings(self, config: ModelConfig) -> ModelSettings:
        model_settings = ModelSettings(
            temperature=config.temperature,
            max_tokens=config.max_tokens or self.settings.llm.max_tokens,
        )
        if config.top_p is not None:
            model_settings["top_p"] = config.top_p
        return model_settings

    def create_model(self, config: ModelConfig) -> Model:
        """Create a pydantic-ai model instance from configuration.

        Raises:
            ValueError: The provider is not supported.
            RuntimeError: The provider's API key is not configured.
        """
        self.validate_config(config)
        provider = config.provider.lower()
        if provider == "openai":
            return self._create_openai_model(config)
        if provider == "anthropic":
            return self._create_anthropic_model(config)
        return self._create_google_model(config)

    def _create_openai_model(self, config: ModelConfig) -> Model:
        openai = self.settings.openai
        if not openai.api_key:
            raise RuntimeError("OPENAI_API_KEY environment variable is not set")

        logger.debug(f"Creating OpenAI model: {config.model} with Pydantic AI")
        return OpenAIResponsesModel(
            config.model,
            provider=OpenAIProvider(api_key=openai.api_key, base_url=openai.base_url),
            settings=self._model_settings(config),
        )

    def _create_anthropic_model(self, config: ModelConfig) -> Model:
        anthropic = self.settings.anthropic
        if not anthropic.api_key:
            raise RuntimeError("ANTHROPIC_API_KEY environment variable is not set")

        logger.debug(f"Creating Anthropic model: {config.model} with Pydantic AI")
        return AnthropicModel(
            config.model,
            provider=AnthropicProvider(api_key=anthropic.api_key),
            settings=self._model_settings(config),
        )

    def _create_google_model(self, config: ModelConfig) -> Model:
        google = self.settings.google
        if not google.api_key:
            raise RuntimeError("GOOGLE_API_KEY environment variable is not set")

        logger.debug(f"Creating Google model: {config.model} with Pydantic AI")
        return GoogleModel(
            config.model,
            provider=GoogleProvider(api_key=google.api_key),
            settings=self._model_settings(config),
        )
