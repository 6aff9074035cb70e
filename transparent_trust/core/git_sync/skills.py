"""Git mirror of knowledge skills (``skills/<slug>.md``)."""

from __future__ import annotations

from typing import Any, Dict

from transparent_trust.core.database.entities.skills import Skill

from .base import BaseGitSyncService
from .frontmatter import FrontmatterDocument, slugify


class SkillGitSyncService(BaseGitSyncService[Skill]):
    directory = "skills"
    kind = "Skill"

    def generate_slug(self, entity: Skill) -> str:
        return slugify(entity.title)

    def to_document(self, entity: Skill) -> FrontmatterDocument:
        return FrontmatterDocument(
            metadata={
                "id": entity.id,
                "slug": self.generate_slug(entity),
                "title": entity.title,
                "categories": list(entity.categories or []),
                "owners": list(entity.owners or []),
                "sources": list(entity.source_urls or []),
                "status": entity.status,
                "tier": entity.tier,
                "created": entity.created_at.isoformat() if entity.created_at else None,
                "updated": entity.updated_at.isoformat() if entity.updated_at else None,
                "active": entity.is_active,
            },
            content=entity.content,
        )

    def from_document(self, slug: str, document: FrontmatterDocument) -> Dict[str, Any]:
        meta = document.metadata
        return {
            "id": meta.get("id"),
            "slug": meta.get("slug") or slug,
            "title": meta.get("title"),
            "categories": meta.get("categories") or [],
            "owners": meta.get("owners") or [],
            "source_urls": meta.get("sources") or [],
            "status": meta.get("status") or "PUBLISHED",
            "tier": meta.get("tier"),
            "created": meta.get("created"),
            "updated": meta.get("updated"),
            "is_active": meta.get("active") is not False,
            "content": document.content.strip(),
        }
