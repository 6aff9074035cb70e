"""Placeholder parsing and template filling."""

from .engine import (
    PLACEHOLDER_PATTERN,
    FillResult,
    Placeholder,
    TemplateFillContext,
    build_llm_fill_prompt,
    extract_placeholder_hints,
    fill_template,
    format_value,
    get_nested_value,
    parse_placeholders,
    resolve_placeholder,
)

__all__ = [
    "PLACEHOLDER_PATTERN",
    "FillResult",
    "Placeholder",
    "TemplateFillContext",
    "build_llm_fill_prompt",
    "extract_placeholder_hints",
    "fill_template",
    "format_value",
    "get_nested_value",
    "parse_placeholders",
    "resolve_placeholder",
]
