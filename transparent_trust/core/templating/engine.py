"""
Template engine.

Templates contain placeholders of the form ``{{type.field}}`` (or
``{{type:field}}``). Supported types:

- ``customer``: a (dotted) field of the customer profile
- ``gtm``: go-to-market data, with the summaries ``recent_calls_summary``,
  ``recent_activities`` and ``metrics_summary``
- ``skill``: ``all``, ``titles`` or ``<index>.<field>``
- ``date``: ``today``, ``now``, ``iso``, ``year``, ``month``, ``quarter``
- ``custom``: caller-supplied values
- ``llm``: free-form instruction, left in place for the LLM to fill

Unknown types resolve to an empty string.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

PLACEHOLDER_PATTERN = re.compile(r"\{\{([a-zA-Z_]+)[.:]([^}]+)\}\}")

SKILL_SEPARATOR = "\n\n---\n\n"

_SKILL_INDEX_PATTERN = re.compile(r"^(\d+)\.(.+)$")


@dataclass(frozen=True)
class Placeholder:
    """A placeholder occurrence in template content."""

    full_match: str
    type: str
    field: str


@dataclass
class FillResult:
    """Outcome of a local (non-LLM) template fill."""

    content: str
    placeholders_resolved: List[str] = field(default_factory=list)
    placeholders_missing: List[str] = field(default_factory=list)
    llm_placeholders: List[Placeholder] = field(default_factory=list)


class TemplateFillContext(BaseModel):
    """Data available to placeholders while filling a template."""

    customer: Optional[Dict[str, Any]] = Field(default=None, description="Customer profile fields")
    gtm: Optional[Dict[str, Any]] = Field(
        default=None,
        description="GTM data: gong_calls, hubspot_activities, looker_metrics and free-form keys",
    )
    skills: List[Dict[str, Any]] = Field(default_factory=list, description="Selected skills, in order")
    custom: Dict[str, str] = Field(default_factory=dict, description="Caller-supplied custom values")
    now: Optional[datetime] = Field(default=None, description="Reference time for date placeholders")


def parse_placeholders(content: str) -> List[Placeholder]:
    """Return every placeholder in ``content`` in order of appearance."""
    return [
        Placeholder(full_match=m.group(0), type=m.group(1).lower(), field=m.group(2).strip())
        for m in PLACEHOLDER_PATTERN.finditer(content)
    ]


def get_nested_value(obj: Any, path: str) -> Any:
    """Resolve a dotted ``path`` against nested dicts / objects.

    Returns ``None`` as soon as a segment is missing.
    """
    current = obj
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, dict):
            if part not in current:
                return None
            current = current[part]
        elif isinstance(current, (list, tuple)) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return None
            current = current[index]
        elif hasattr(current, part):
            current = getattr(current, part)
        else:
            return None
    return current


def format_value(value: Any) -> str:
    """Render a context value as template text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, indent=2, default=str)
    return str(value)


def _format_long_date(moment: datetime) -> str:
    return f"{moment.strftime('%B')} {moment.day}, {moment.year}"


def _resolve_date(field_name: str, now: datetime) -> str:
    if field_name == "now":
        return f"{_format_long_date(now)} {now.strftime('%H:%M')}"
    if field_name == "iso":
        return now.isoformat()
    if field_name == "year":
        return str(now.year)
    if field_name == "month":
        return now.strftime("%B")
    if field_name == "quarter":
        return f"Q{math.ceil(now.month / 3)}"
    # "today" and anything unrecognised
    return _format_long_date(now)


def _resolve_gtm(field_name: str, gtm: Dict[str, Any]) -> str:
    if field_name == "recent_calls_summary" and gtm.get("gong_calls"):
        return "\n".join(
            f"- {call.get('title', '')} ({call.get('date', '')}): {call.get('summary') or 'No summary'}"
            for call in gtm["gong_calls"][:3]
        )
    if field_name == "recent_activities" and gtm.get("hubspot_activities"):
        return "\n".join(
            f"- {activity.get('type', '')}: {activity.get('subject', '')} ({activity.get('date', '')})"
            for activity in gtm["hubspot_activities"][:5]
        )
    if field_name == "metrics_summary" and gtm.get("looker_metrics"):
        lines = []
        for entry in gtm["looker_metrics"]:
            metrics = ", ".join(f"{k}: {v}" for k, v in (entry.get("metrics") or {}).items())
            lines.append(f"{entry.get('period', '')}: {metrics}")
        return "\n".join(lines)
    return format_value(get_nested_value(gtm, field_name))


def _resolve_skill(field_name: str, skills: List[Dict[str, Any]]) -> str:
    if not skills:
        return ""
    if field_name == "all":
        return SKILL_SEPARATOR.join(s.get("content", "") for s in skills)
    if field_name == "titles":
        return ", ".join(s.get("title", "") for s in skills)
    match = _SKILL_INDEX_PATTERN.match(field_name)
    if match:
        index = int(match.group(1))
        if index < len(skills):
            return format_value(skills[index].get(match.group(2)))
    return ""


def resolve_placeholder(placeholder: Placeholder, context: TemplateFillContext) -> Optional[str]:
    """Resolve one placeholder against ``context``.

    Returns:
        The replacement text, ``""`` when no value is available, or ``None``
        for ``llm`` placeholders that must be generated.
    """
    kind, field_name = placeholder.type, placeholder.field

    if kind == "customer":
        if not context.customer:
            return ""
        return format_value(get_nested_value(context.customer, field_name))
    if kind == "gtm":
        if not context.gtm:
            return ""
        return _resolve_gtm(field_name, context.gtm)
    if kind == "skill":
        return _resolve_skill(field_name, context.skills)
    if kind == "date":
        return _resolve_date(field_name, context.now or datetime.now())
    if kind == "custom":
        return context.custom.get(field_name) or ""
    if kind == "llm":
        return None
    return ""


def fill_template(content: str, context: TemplateFillContext) -> FillResult:
    """Fill every non-LLM placeholder of ``content``.

    Each occurrence is replaced once, in order. Placeholders without a value
    are removed and reported as missing. ``llm`` placeholders stay in the
    content and are returned for a later generation pass.
    """
    result = FillResult(content=content)
    filled = content

    for placeholder in parse_placeholders(content):
        if placeholder.type == "llm":
            result.llm_placeholders.append(placeholder)
            continue

        value = resolve_placeholder(placeholder, context)
        filled = filled.replace(placeholder.full_match, value or "", 1)
        if value:
            result.placeholders_resolved.append(placeholder.full_match)
        else:
            result.placeholders_missing.append(placeholder.full_match)

    result.content = filled
    return result


def build_llm_fill_prompt(
    partially_filled: str,
    llm_placeholders: List[Placeholder],
    context: TemplateFillContext,
    instructions: Optional[str] = None,
) -> str:
    """Build the user prompt asking the LLM to fill the remaining placeholders."""
    placeholder_list = "\n".join(f"{i + 1}. {p.full_match} - {p.field}" for i, p in enumerate(llm_placeholders))

    context_lines: List[str] = []
    if context.customer:
        industry = context.customer.get("industry") or "Industry not specified"
        context_lines.append(f"Customer: {context.customer.get('name', '')} ({industry})")
        overview = context.customer.get("content") or context.customer.get("overview")
        if overview:
            context_lines.append(f"Customer Overview:\n{overview}")
    if context.gtm and context.gtm.get("gong_calls"):
        context_lines.append(f"Recent Calls: {len(context.gtm['gong_calls'])} calls available")
    if context.skills:
        context_lines.append(f"Skills Available: {', '.join(s.get('title', '') for s in context.skills)}")

    sections = [
        "You are filling out a document template. Please generate content for the following "
        "placeholders based on the context provided.",
        f"## Placeholders to Fill\n{placeholder_list}",
        f"## Context\n{chr(10).join(context_lines) if context_lines else 'No additional context provided.'}",
    ]
    if instructions:
        sections.append(f"## Additional Instructions\n{instructions}")
    sections.append(f"## Partially Filled Template\n{partially_filled}")
    sections.append(
        "## Instructions\n"
        "For each {{llm:instruction}} placeholder, generate appropriate content based on the instruction "
        "and context.\n"
        "Return ONLY the filled template with all placeholders replaced. Do not include any explanation "
        "or commentary."
    )
    return "\n\n".join(sections)


_HINT_FORMATS = {
    "customer": "Customer field: {field}",
    "gtm": "GTM data: {field}",
    "skill": "Skill content: {field}",
    "llm": "LLM will generate: {field}",
    "date": "Date format: {field}",
    "custom": "Custom value: {field} (user-provided)",
}


def extract_placeholder_hints(content: str) -> Dict[str, str]:
    """Map each known placeholder to a short human-readable hint."""
    hints: Dict[str, str] = {}
    for placeholder in parse_placeholders(content):
        fmt = _HINT_FORMATS.get(placeholder.type)
        if fmt:
            hints[placeholder.full_match] = fmt.format(field=placeholder.field)
    return hints
