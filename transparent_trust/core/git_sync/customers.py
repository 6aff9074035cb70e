"""Git mirror of customer profiles (``customers/<slug>.md``)."""

from __future__ import annotations

from typing import Any, Dict, List

from transparent_trust.core.database.entities.customers import CustomerProfile

from .base import BaseGitSyncService
from .frontmatter import FrontmatterDocument, slugify


def _render_body(entity: CustomerProfile) -> str:
    """Profiles with ``content`` are written as is; older ones are assembled from their sections."""
    if entity.content:
        return entity.content
    sections: List[str] = [f"## Overview\n\n{entity.overview}"]
    if entity.products:
        sections.append(f"## Products\n\n{entity.products}")
    if entity.challenges:
        sections.append(f"## Challenges\n\n{entity.challenges}")
    if entity.key_facts:
        facts = "\n".join(f"- **{f.get('label', '')}**: {f.get('value', '')}" for f in entity.key_facts)
        sections.append(f"## Key Facts\n\n{facts}")
    return "\n\n".join(sections)


class CustomerGitSyncService(BaseGitSyncService[CustomerProfile]):
    directory = "customers"
    kind = "Customer"

    def generate_slug(self, entity: CustomerProfile) -> str:
        return slugify(entity.name)

    def to_document(self, entity: CustomerProfile) -> FrontmatterDocument:
        return FrontmatterDocument(
            metadata={
                "id": entity.id,
                "slug": self.generate_slug(entity),
                "name": entity.name,
                "industry": entity.industry,
                "website": entity.website,
                "region": entity.region,
                "tier": entity.tier,
                "tags": list(entity.tags or []) or None,
                "owners": list(entity.owners or []),
                "sources": list(entity.source_urls or []),
                "considerations": list(entity.considerations or []),
                "created": entity.created_at.isoformat() if entity.created_at else None,
                "updated": entity.updated_at.isoformat() if entity.updated_at else None,
                "active": entity.is_active,
            },
            content=_render_body(entity),
        )

    def from_document(self, slug: str, document: FrontmatterDocument) -> Dict[str, Any]:
        meta = document.metadata
        return {
            "id": meta.get("id"),
            "slug": meta.get("slug") or slug,
            "name": meta.get("name"),
            "industry": meta.get("industry"),
            "website": meta.get("website"),
            "region": meta.get("region"),
            "tier": meta.get("tier"),
            "tags": meta.get("tags") or [],
            "owners": meta.get("owners") or [],
            "source_urls": meta.get("sources") or [],
            "considerations": meta.get("considerations") or [],
            "created": meta.get("created"),
            "updated": meta.get("updated"),
            "is_active": meta.get("active") is not False,
            "content": document.content.strip(),
        }
