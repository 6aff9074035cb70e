"""Prompt blocks, providers and composition.

- ``PromptProvider``: protocol describing the provider API.
- ``BuiltinPromptProvider``: in-repo default blocks.
- ``DatabasePromptProvider``: admin overrides from ``tt_prompt_blocks``.
- ``StackedPromptProvider``: overrides layered on a fallback provider.
- ``load_system_prompt``: compose the system prompt of a feature.
"""

from .base import PromptBlock, PromptComposition, PromptProvider
from .builder import (
    KEY_TO_CONTEXT,
    build_prompt_from_blocks,
    compose_prompt,
    get_composition,
    load_system_prompt,
    render_prompt,
)
from .builtin import DEFAULT_BLOCKS, DEFAULT_COMPOSITIONS, BuiltinPromptProvider
from .database import DatabasePromptProvider
from .stacked import StackedPromptProvider

__all__ = [
    "DEFAULT_BLOCKS",
    "DEFAULT_COMPOSITIONS",
    "KEY_TO_CONTEXT",
    "BuiltinPromptProvider",
    "DatabasePromptProvider",
    "PromptBlock",
    "PromptComposition",
    "PromptProvider",
    "StackedPromptProvider",
    "build_prompt_from_blocks",
    "compose_prompt",
    "get_composition",
    "load_system_prompt",
    "render_prompt",
]
