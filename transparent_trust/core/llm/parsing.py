"""Helpers for reading structured data out of free-form LLM replies."""

from __future__ import annotations

import json
import re
from typing import Any, Dict

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL | re.IGNORECASE)
_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


def strip_code_fences(text: str) -> str:
    stripped = text.strip()
    match = _FENCE_PATTERN.match(stripped)
    return match.group(1).strip() if match else stripped


def parse_json_response(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object from an LLM reply.

    Markdown code fences are removed first. When the remaining text is not
    valid JSON, the outermost ``{...}`` block is tried instead.

    Raises:
        ValueError: No JSON object could be parsed.
    """
    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _OBJECT_PATTERN.search(cleaned)
        if not match:
            raise ValueError("LLM response did not contain a JSON object")
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ValueError(f"LLM response contained invalid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise ValueError("LLM response JSON is not an object")
    return parsed
