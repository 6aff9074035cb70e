"""
Prompt composition and rendering.

``load_system_prompt`` is the entry point used by the LLM features: it
composes the system prompt of a context from the builtin blocks, layered
with any admin overrides stored in the database.
"""

from __future__ import annotations

import re
from typing import Dict, List, Mapping, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.logging_config import get_logger

from .base import PromptBlock, PromptComposition, PromptProvider
from .builtin import DEFAULT_COMPOSITIONS, BuiltinPromptProvider
from .database import DatabasePromptProvider
from .stacked import StackedPromptProvider

logger = get_logger(__name__)

_VARIABLE_PATTERN = re.compile(r"\{\{\s*([a-zA-Z_][a-zA-Z0-9_]*)\s*\}\}")

# Legacy prompt keys accepted by load_system_prompt.
KEY_TO_CONTEXT: Dict[str, str] = {
    "template_fill": "template_fill",
    "templates": "template_fill",
    "skill_refresh": "skill_refresh",
    "skill_organize": "skill_organize",
    "skill_merge": "skill_organize",
    "customer_profile": "customer_profile",
    "instruction_builder": "instruction_builder",
}


def build_prompt_from_blocks(blocks: Sequence[PromptBlock], composition: PromptComposition) -> str:
    """Render the composition's blocks, in order, as ``## name`` sections.

    Blocks that are missing or whose text is blank are skipped.
    """
    by_id = {b.id: b for b in blocks}
    parts: List[str] = []
    for block_id in composition.block_ids:
        block = by_id.get(block_id)
        if block is None:
            continue
        content = block.text_for(composition.context)
        if content.strip():
            parts.append(f"## {block.name}\n{content}")
    return "\n\n".join(parts)


def render_prompt(text: str, variables: Mapping[str, object]) -> str:
    """Replace ``{{var}}`` tokens. Unknown variables are left untouched."""

    def _replace(match: re.Match) -> str:
        key = match.group(1)
        if key in variables and variables[key] is not None:
            return str(variables[key])
        return match.group(0)

    return _VARIABLE_PATTERN.sub(_replace, text)


def get_composition(context: str) -> Optional[PromptComposition]:
    return next((c for c in DEFAULT_COMPOSITIONS if c.context == context), None)


def compose_prompt(provider: PromptProvider, context: str) -> str:
    """Compose the system prompt of ``context`` from ``provider``'s blocks."""
    composition = get_composition(context)
    if composition is None:
        return ""
    blocks = []
    for block_id in composition.block_ids:
        try:
            blocks.append(provider.get_block(block_id))
        except KeyError:
            logger.debug(f"Prompt block {block_id!r} not available for context {context!r}")
    return build_prompt_from_blocks(blocks, composition)


async def load_system_prompt(session: Optional[AsyncSession], key: str, fallback: str) -> str:
    """
    Load the system prompt for a feature.

    Args:
        session: Database session used to read overrides (optional)
        key: Prompt key, e.g. ``"skill_refresh"``
        fallback: Returned when the key is unknown or nothing could be composed

    Returns:
        The composed prompt text.
    """
    context = KEY_TO_CONTEXT.get(key)
    if context is None:
        return fallback

    provider: PromptProvider = BuiltinPromptProvider()
    if session is not None:
        try:
            overrides = await DatabasePromptProvider.load(session)
            provider = StackedPromptProvider(overrides, provider)
        except Exception as e:
            logger.warning(f"Failed to load prompt block overrides, using builtin blocks: {e}")
            await session.rollback()

    prompt = compose_prompt(provider, context).strip()
    logger.debug(f"Loaded system prompt for {key!r} (version={provider.version()})")
    return prompt or fallback
