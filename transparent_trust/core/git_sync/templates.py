"""Git mirror of document templates (``templates/<slug>.md``)."""

from __future__ import annotations

from typing import Any, Dict

from transparent_trust.core.database.entities.templates import Template

from .base import BaseGitSyncService
from .frontmatter import FrontmatterDocument, slugify


def _iso(value: Any) -> Any:
    return value.isoformat() if value is not None else None


class TemplateGitSyncService(BaseGitSyncService[Template]):
    directory = "templates"
    kind = "Template"

    def generate_slug(self, entity: Template) -> str:
        return slugify(entity.name)

    def to_document(self, entity: Template) -> FrontmatterDocument:
        return FrontmatterDocument(
            metadata={
                "id": entity.id,
                "slug": self.generate_slug(entity),
                "name": entity.name,
                "description": entity.description,
                "category": entity.category,
                "outputFormat": entity.output_format,
                "placeholderHint": entity.placeholder_hint,
                "instructionPresetId": entity.instruction_preset_id,
                "isActive": entity.is_active,
                "sortOrder": entity.sort_order,
                "created": _iso(entity.created_at),
                "updated": _iso(entity.updated_at),
                "createdBy": entity.created_by,
                "updatedBy": entity.updated_by,
            },
            content=entity.content,
        )

    def from_document(self, slug: str, document: FrontmatterDocument) -> Dict[str, Any]:
        meta = document.metadata
        return {
            "id": meta.get("id"),
            "slug": meta.get("slug") or slug,
            "name": meta.get("name"),
            "description": meta.get("description"),
            "category": meta.get("category"),
            "output_format": meta.get("outputFormat") or "markdown",
            "placeholder_hint": meta.get("placeholderHint"),
            "instruction_preset_id": meta.get("instructionPresetId"),
            "is_active": meta.get("isActive") is not False,
            "sort_order": meta.get("sortOrder") or 0,
            "created": meta.get("created"),
            "updated": meta.get("updated"),
            "created_by": meta.get("createdBy"),
            "updated_by": meta.get("updatedBy"),
            "content": document.content.strip(),
        }
