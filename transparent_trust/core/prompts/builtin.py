from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .base import PromptBlock, PromptComposition, PromptProvider, lookup_variant, split_prompt_name

# Default prompt blocks. Admins can override any block (or single variants
# of it) through tt_prompt_blocks; see DatabasePromptProvider.

DEFAULT_BLOCKS: List[PromptBlock] = [
    PromptBlock(
        id="role_mission",
        name="Role & Mission",
        description="Who the model is and what its primary job is.",
        variants={
            "default": "You are a helpful assistant.",
            "template_fill": "\n".join(
                [
                    "You are a sales enablement writer completing customer-facing documents.",
                    "Write in a professional, concise tone grounded in the provided customer context and knowledge.",
                    "Never invent facts about the customer or the product.",
                ]
            ),
            "skill_refresh": "\n".join(
                [
                    "You are a knowledge extraction specialist reviewing an existing skill against refreshed source material.",
                    "Your goal is to make sure the skill covers ALL the concrete information from the source URLs.",
                ]
            ),
            "skill_organize": "\n".join(
                [
                    "You are a knowledge management expert helping organize documentation into a structured skill library.",
                    "Prefer updating existing skills over creating new ones. Consolidate related information.",
                    "Every skill should be substantial enough to answer multiple related questions.",
                ]
            ),
            "customer_profile": "\n".join(
                [
                    "You are creating a customer profile document from publicly available information about a company.",
                    "The profile gives context when responding to RFPs, security questionnaires and sales conversations.",
                    "Think of yourself as a research analyst preparing a briefing document.",
                ]
            ),
            "instruction_builder": "\n".join(
                [
                    "You help users write instruction presets: reusable guidance that shapes how the assistant answers.",
                    "Ask clarifying questions when the goal is unclear and keep presets short and specific.",
                ]
            ),
        },
    ),
    PromptBlock(
        id="processing_guidelines",
        name="Processing Guidelines",
        description="How source material is handled.",
        variants={
            "default": "\n".join(
                [
                    "- Keep concrete facts: numbers, versions, limits, capabilities, compliance details.",
                    "- Remove marketing language and redundant explanations.",
                    "- Use markdown headers and bullet points so facts are easy to scan.",
                ]
            ),
            "skill_refresh": "\n".join(
                [
                    "Return hasChanges: true when the source contains facts, features, limitations or topics the skill does not cover.",
                    "Return hasChanges: false only when the skill already covers everything, or the differences are cosmetic.",
                    "Make surgical edits: preserve the original structure and add new sections for new topics at the end.",
                ]
            ),
            "skill_organize": "\n".join(
                [
                    "- Remove duplicate information; never repeat the same fact.",
                    "- Preserve all unique, valuable information from each skill.",
                    "- Organize content logically with clear markdown headers (##, ###).",
                ]
            ),
        },
    ),
    PromptBlock(
        id="quality_rules",
        name="Quality Rules",
        description="Validation checks and quality standards.",
        variants={
            "default": "\n".join(
                [
                    "Before finalizing, check:",
                    "- Is everything factual and traceable to the provided context?",
                    "- Are all requested sections present?",
                    "Never fabricate information or compliance claims.",
                ]
            ),
        },
    ),
    PromptBlock(
        id="output_format",
        name="Output Format",
        description="How the response is structured. Response parsing depends on it.",
        variants={
            "default": "Provide a clear, structured response.",
            "template_fill": "Return ONLY the complete filled template in markdown, with every placeholder replaced.",
            "skill_refresh": "\n".join(
                [
                    "Return ONLY a JSON object:",
                    "{",
                    '  "hasChanges": true/false,',
                    '  "summary": "What was added, or why no changes are needed",',
                    '  "title": "Keep the same title unless the scope genuinely changed",',
                    '  "content": "COMPLETE skill content, original and new information",',
                    '  "changeHighlights": ["Short description of each change"]',
                    "}",
                ]
            ),
            "skill_organize": "\n".join(
                [
                    "Return ONLY a JSON object with this structure:",
                    '{ "title": string, "content": string }',
                ]
            ),
            "customer_profile": "\n".join(
                [
                    "Return ONLY a JSON object:",
                    "{",
                    '  "name": string, "industry": string, "website": string,',
                    '  "overview": string, "products": string, "challenges": string,',
                    '  "keyFacts": [{ "label": string, "value": string }],',
                    '  "tags": string[]',
                    "}",
                ]
            ),
            "instruction_builder": "Return the finished instruction preset as plain text.",
        },
    ),
]

DEFAULT_COMPOSITIONS: List[PromptComposition] = [
    PromptComposition(context="template_fill", block_ids=["role_mission", "quality_rules", "output_format"]),
    PromptComposition(context="skill_refresh", block_ids=["role_mission", "processing_guidelines", "output_format"]),
    PromptComposition(context="skill_organize", block_ids=["role_mission", "processing_guidelines", "output_format"]),
    PromptComposition(
        context="customer_profile", block_ids=["role_mission", "processing_guidelines", "output_format"]
    ),
    PromptComposition(context="instruction_builder", block_ids=["role_mission", "output_format"]),
]


class BuiltinPromptProvider(PromptProvider):
    """In-repo default prompt blocks.

    The version is a static identifier so callers can record which builtin
    block set was used.
    """

    def __init__(self, *, blocks: Optional[Iterable[PromptBlock]] = None, version_id: str = "builtin-v1") -> None:
        self._blocks: Dict[str, PromptBlock] = {b.id: b for b in (blocks if blocks is not None else DEFAULT_BLOCKS)}
        self._version = version_id

    def get(self, name: str) -> str:
        block_id, context = split_prompt_name(name)
        return lookup_variant(self.get_block(block_id), name, context)

    def get_block(self, block_id: str) -> PromptBlock:
        try:
            return self._blocks[block_id]
        except KeyError as exc:
            raise KeyError(f"prompt block not found: {block_id!r}") from exc

    def version(self) -> str:
        return self._version

    def refresh(self) -> None:
        """Builtin provider has no external state to refresh."""
        return None
