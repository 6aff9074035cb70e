from __future__ import annotations

from .base import PromptBlock, PromptProvider, lookup_variant, split_prompt_name


class StackedPromptProvider(PromptProvider):
    """Chains providers with fallback semantics.

    Typically used as ``StackedPromptProvider(database, builtin)`` so that
    admin overrides win while the builtin blocks remain a working baseline.
    Blocks known to both providers are merged variant by variant, the
    primary's variants on top.
    """

    def __init__(self, primary: PromptProvider, fallback: PromptProvider) -> None:
        self._primary = primary
        self._fallback = fallback

    def get(self, name: str) -> str:
        block_id, context = split_prompt_name(name)
        return lookup_variant(self.get_block(block_id), name, context)

    def get_block(self, block_id: str) -> PromptBlock:
        try:
            base = self._fallback.get_block(block_id)
        except KeyError:
            return self._primary.get_block(block_id)
        try:
            override = self._primary.get_block(block_id)
        except KeyError:
            return base
        return PromptBlock(
            id=base.id,
            name=override.name or base.name,
            description=override.description or base.description,
            variants={**base.variants, **override.variants},
        )

    def version(self) -> str:
        return f"stacked:{self._primary.version()}+{self._fallback.version()}"

    def refresh(self) -> None:
        self._primary.refresh()
        self._fallback.refresh()
