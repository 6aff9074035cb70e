"""
LLM completion service.

Wraps a pydantic-ai ``Agent`` for single-shot system + user prompt
completions and keeps a token usage ledger (``tt_llm_usage``) per feature.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic_ai import Agent, ModelSettings
from pydantic_ai.models import Model
from pydantic_ai.usage import RunUsage
from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.database.entities.llm_usage import LlmUsage
from transparent_trust.core.logging_config import get_logger
from transparent_trust.core.models.domain import CurrentUser
from transparent_trust.core.monitoring import log_llm_call

from .parsing import parse_json_response
from .provider import ModelConfig, PydanticAIModelProvider

logger = get_logger(__name__)


@dataclass
class LLMResult:
    """Text reply plus the token accounting of one completion."""

    text: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


def _usage_tokens(usage: RunUsage) -> tuple[int, int]:
    return usage.input_tokens or 0, usage.output_tokens or 0


class LLMService:
    """
    Run completions against the configured model.

    A model can be injected (tests use pydantic-ai's ``FunctionModel``);
    otherwise it is built lazily from the settings on first use, so a
    missing API key only fails the request that needs the LLM.
    """

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        model: Optional[Model] = None,
        config: Optional[ModelConfig] = None,
        provider: Optional[PydanticAIModelProvider] = None,
    ):
        self.session = session
        self.config = config or ModelConfig.from_settings()
        self.provider = provider or PydanticAIModelProvider()
        self._model = model

    @property
    def model(self) -> Model:
        if self._model is None:
            self._model = self.provider.create_model(self.config)
        return self._model

    @property
    def model_name(self) -> str:
        return getattr(self._model, "model_name", None) or self.config.model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        feature: str = "general",
        user: Optional[CurrentUser] = None,
    ) -> LLMResult:
        """
        Run one completion.

        Args:
            system_prompt: Instructions for the model
            user_prompt: The request itself
            temperature: Overrides the configured temperature
            max_tokens: Overrides the configured output budget
            feature: Feature name recorded in the usage ledger
            user: Caller recorded in the usage ledger

        Returns:
            The reply text and token usage.
        """
        agent = Agent(self.model, system_prompt=system_prompt)
        run_settings = ModelSettings(
            temperature=self.config.temperature if temperature is None else temperature,
            max_tokens=max_tokens or self.config.max_tokens or 4096,
        )

        result = await agent.run(user_prompt, model_settings=run_settings)
        input_tokens, output_tokens = _usage_tokens(result.usage)

        llm_result = LLMResult(
            text=str(result.output),
            model=self.model_name,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
        await self._record_usage(llm_result, feature, user)
        return llm_result

    async def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Run a completion and parse its reply as a JSON object.

        Raises:
            ValueError: The reply did not contain a JSON object.
        """
        result = await self.complete(system_prompt, user_prompt, **kwargs)
        return parse_json_response(result.text)

    async def _record_usage(self, result: LLMResult, feature: str, user: Optional[CurrentUser]) -> None:
        log_llm_call(feature, result.model, result.input_tokens, result.output_tokens)
        if self.session is None:
            return

        usage = LlmUsage(
            user_id=user.id if user else None,
            user_email=user.email if user else None,
            feature=feature,
            provider=self.config.provider,
            model=result.model,
            input_tokens=result.input_tokens,
            output_tokens=result.output_tokens,
            total_tokens=result.total_tokens,
        )
        try:
            self.session.add(usage)
            await self.session.commit()
        except Exception as e:
            logger.warning(f"Failed to record LLM usage for {feature}: {e}")
            await self.session.rollback()
