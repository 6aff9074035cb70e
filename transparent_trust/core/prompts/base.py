"""Core prompt types and the PromptProvider protocol.

System prompts are composed from reusable blocks. Each
:class:`PromptBlock` has a ``default`` text plus optional variants keyed
by prompt context (e.g. ``"skill_refresh"``). A :class:`PromptComposition`
lists, for one context, which blocks are used and in which order.
"""

from __future__ import annotations

from typing import Dict, List, Protocol, runtime_checkable

from pydantic import BaseModel, Field

DEFAULT_VARIANT = "default"


class PromptBlock(BaseModel):
    """A reusable prompt building block with context-specific variants."""

    id: str = Field(..., description="Stable block identifier")
    name: str = Field(..., description="Heading used when the block is rendered")
    description: str = Field(default="")
    variants: Dict[str, str] = Field(default_factory=dict, description="context -> text, plus 'default'")

    def text_for(self, context: str) -> str:
        """Variant for ``context``, falling back to the default text."""
        if context in self.variants:
            return self.variants[context]
        return self.variants.get(DEFAULT_VARIANT, "")


class PromptComposition(BaseModel):
    """Which blocks make up the system prompt of one context, in order."""

    context: str
    block_ids: List[str] = Field(default_factory=list)


@runtime_checkable
class PromptProvider(Protocol):
    """Protocol for prompt block sources.

    Prompt text is addressed by ``"<block_id>"`` (the default variant) or
    ``"<block_id>/<context>"``.

    - ``get`` returns prompt text and raises ``KeyError`` when unknown.
    - ``get_block`` returns the whole block and raises ``KeyError`` when unknown.
    - ``version`` returns a short identifier safe to log.
    - ``refresh`` reloads caches when supported, and is a no-op otherwise.
    """

    def get(self, name: str) -> str: ...

    def get_block(self, block_id: str) -> PromptBlock: ...

    def version(self) -> str: ...

    def refresh(self) -> None: ...


def split_prompt_name(name: str) -> tuple[str, str]:
    block_id, _, context = name.partition("/")
    return block_id, context or DEFAULT_VARIANT


def lookup_variant(block: PromptBlock, name: str, context: str) -> str:
    try:
        return block.variants[context]
    except KeyError as exc:
        raise KeyError(f"prompt not found: name={name!r}") from exc
