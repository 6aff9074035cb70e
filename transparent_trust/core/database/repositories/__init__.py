"""
Repository layer.

Each repository wraps an async session and one entity (or aggregate) and
exposes the queries the API needs beyond plain CRUD.
"""

from .audit_logs import AuditLogRepository
from .auth_group_mappings import AuthGroupMappingRepository
from .base import BaseRepository, QueryBuilder, SqlRepository
from .collateral_outputs import CollateralOutputRepository
from .customers import CustomerProfileRepository
from .instruction_presets import InstructionPresetRepository
from .projects import BulkProjectRepository, BulkRowRepository
from .reviews import ReviewInboxRepository, build_review_filter
from .skills import SkillRepository
from .templates import TemplateRepository

__all__ = [
    "AuditLogRepository",
    "AuthGroupMappingRepository",
    "BaseRepository",
    "BulkProjectRepository",
    "BulkRowRepository",
    "CollateralOutputRepository",
    "CustomerProfileRepository",
    "InstructionPresetRepository",
    "QueryBuilder",
    "ReviewInboxRepository",
    "SkillRepository",
    "SqlRepository",
    "TemplateRepository",
    "build_review_filter",
]
