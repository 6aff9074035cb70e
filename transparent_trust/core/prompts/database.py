"""Prompt block overrides stored in ``tt_prompt_blocks``."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.database.base import as_utc
from transparent_trust.core.database.entities.prompt_blocks import PromptBlockOverride

from .base import PromptBlock, PromptProvider, lookup_variant, split_prompt_name


class DatabasePromptProvider(PromptProvider):
    """Serve admin overrides loaded from the database.

    Rows are loaded with :meth:`load`; ``refresh`` is a no-op because a
    reload needs a database session. Create a new provider per request
    instead.
    """

    def __init__(self, overrides: Optional[Iterable[PromptBlockOverride]] = None) -> None:
        self._blocks: Dict[str, PromptBlock] = {}
        latest = None
        for row in overrides or []:
            self._blocks[row.block_id] = PromptBlock(
                id=row.block_id,
                name=row.name or "",
                description=row.description or "",
                variants=dict(row.variants or {}),
            )
            if row.updated_at:
                stamp = as_utc(row.updated_at)
                if latest is None or stamp > latest:
                    latest = stamp
        self._version = f"db:{len(self._blocks)}:{latest.isoformat() if latest else 'none'}"

    @classmethod
    async def load(cls, session: AsyncSession) -> "DatabasePromptProvider":
        result = await session.execute(select(PromptBlockOverride))
        return cls(result.scalars().all())

    def get(self, name: str) -> str:
        block_id, context = split_prompt_name(name)
        return lookup_variant(self.get_block(block_id), name, context)

    def get_block(self, block_id: str) -> PromptBlock:
        try:
            return self._blocks[block_id]
        except KeyError as exc:
            raise KeyError(f"prompt block override not found: {block_id!r}") from exc

    def version(self) -> str:
        return self._version

    def refresh(self) -> None:
        return None
