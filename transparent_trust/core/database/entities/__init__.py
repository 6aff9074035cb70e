"""
Database entity models.

Each module holds one table, or a small family of related tables:

- templates: Document templates with placeholders
- customers: Customer profiles
- instruction_presets: Reusable, shareable prompt instructions
- collateral_outputs: Generated customer-facing documents
- auth_group_mappings: SSO group to capability mappings
- audit_logs: Audit trail
- skills: Knowledge skills
- projects: Bulk RFP projects and their rows
- prompt_blocks: Prompt block overrides
- llm_usage: Token accounting
"""

from . import (
    audit_logs,
    auth_group_mappings,
    collateral_outputs,
    customers,
    instruction_presets,
    llm_usage,
    projects,
    prompt_blocks,
    skills,
    templates,
)
from .audit_logs import AuditLog
from .auth_group_mappings import AuthGroupMapping
from .collateral_outputs import CollateralOutput
from .customers import CustomerProfile
from .instruction_presets import InstructionPreset
from .llm_usage import LlmUsage
from .projects import BulkProject, BulkRow
from .prompt_blocks import PromptBlockOverride
from .skills import Skill
from .templates import Template

__all__ = [
    "AuditLog",
    "AuthGroupMapping",
    "BulkProject",
    "BulkRow",
    "CollateralOutput",
    "CustomerProfile",
    "InstructionPreset",
    "LlmUsage",
    "PromptBlockOverride",
    "Skill",
    "Template",
    "audit_logs",
    "auth_group_mappings",
    "collateral_outputs",
    "customers",
    "instruction_presets",
    "llm_usage",
    "projects",
    "prompt_blocks",
    "skills",
    "templates",
]
