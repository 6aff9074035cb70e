"""
Markdown files with YAML frontmatter.

A mirrored entity is stored as::

    ---
    id: 1f0c...
    name: Sales Battlecard
    ---
    <markdown body>
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml

_DELIMITER = "---"
_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """URL-safe slug, e.g. ``"Compliance & Certifications"`` -> ``"compliance-and-certifications"``."""
    slug = text.lower().replace("&", "and")
    slug = _SLUG_INVALID.sub("-", slug)
    return slug.strip("-")


@dataclass
class FrontmatterDocument:
    """YAML metadata plus a markdown body."""

    metadata: Dict[str, Any] = field(default_factory=dict)
    content: str = ""

    @classmethod
    def parse(cls, text: str) -> "FrontmatterDocument":
        """Split ``text`` into frontmatter and body. Text without frontmatter is all body."""
        lines = text.splitlines(keepends=True)
        if not lines or lines[0].strip() != _DELIMITER:
            return cls(metadata={}, content=text)
        for index in range(1, len(lines)):
            if lines[index].strip() == _DELIMITER:
                metadata = yaml.safe_load("".join(lines[1:index])) or {}
                if not isinstance(metadata, dict):
                    raise ValueError("Frontmatter must be a YAML mapping")
                return cls(metadata=metadata, content="".join(lines[index + 1 :]))
        raise ValueError("Unterminated frontmatter block")

    def dumps(self) -> str:
        """Serialize back to text. Metadata keys with ``None`` values are dropped."""
        metadata = {k: v for k, v in self.metadata.items() if v is not None}
        header = yaml.safe_dump(metadata, sort_keys=False, allow_unicode=True, default_flow_style=False)
        body = self.content if self.content.endswith("\n") else self.content + "\n"
        return f"{_DELIMITER}\n{header}{_DELIMITER}\n{body}"


def read_frontmatter_file(path: Path, missing_message: str) -> FrontmatterDocument:
    if not path.is_file():
        raise FileNotFoundError(missing_message)
    return FrontmatterDocument.parse(path.read_text(encoding="utf-8"))


def write_frontmatter_file(path: Path, document: FrontmatterDocument) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(document.dumps(), encoding="utf-8")
