"""LLM access through pydantic-ai."""

from .parsing import parse_json_response, strip_code_fences
from .provider import ModelConfig, PydanticAIModelProvider
from .service import LLMResult, LLMService

__all__ = [
    "LLMResult",
    "LLMService",
    "ModelConfig",
    "PydanticAIModelProvider",
    "parse_json_response",
    "strip_code_fences",
]
