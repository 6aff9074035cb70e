"""
I/O models for API requests and responses.

These Pydantic schemas define the contract between the API and its
clients, separate from the database entities so each can evolve on its own.

Modules:
- common: Response envelope and pagination
- templates, customers, instruction_presets, collateral, auth_groups,
  audit_log, skills, projects, reviews: Per-resource schemas
"""

from .audit_log import AuditLogRead
from .auth_groups import AuthGroupMappingCreate, AuthGroupMappingRead, AuthGroupMappingUpdate, SeedResult
from .collateral import (
    CollateralOutputCreate,
    CollateralOutputRead,
    CollateralOutputUpdate,
    ReviewableRead,
    ReviewWorkflowUpdate,
)
from .common import DataResponse, DeletedResponse, ErrorBody, ErrorResponse, FieldError, Pagination
from .customers import CustomerProfileCreate, CustomerProfileRead, CustomerProfileUpdate
from .instruction_presets import InstructionPresetCreate, InstructionPresetRead, InstructionPresetUpdate
from .projects import (
    BulkProjectCreate,
    BulkProjectDetailRead,
    BulkProjectRead,
    BulkRowCreate,
    BulkRowRead,
    BulkRowUpdate,
    ClarifyMessage,
    ClarifyRequest,
    ClarifyResult,
    FeedbackStats,
    ProjectFeedback,
    ReviewRequest,
    RowFeedback,
)
from .reviews import ReviewItem, ReviewProjectRef
from .skills import (
    SkillCreate,
    SkillHistoryCommit,
    SkillMergeRequest,
    SkillRead,
    SkillRefreshApply,
    SkillRefreshResult,
    SkillUpdate,
)
from .templates import (
    TemplateCreate,
    TemplateDetailRead,
    TemplateFillRequest,
    TemplateFillResponse,
    TemplateRead,
    TemplateSummary,
    TemplateUpdate,
)

__all__ = [
    "AuditLogRead",
    "AuthGroupMappingCreate",
    "AuthGroupMappingRead",
    "AuthGroupMappingUpdate",
    "BulkProjectCreate",
    "BulkProjectDetailRead",
    "BulkProjectRead",
    "BulkRowCreate",
    "BulkRowRead",
    "BulkRowUpdate",
    "ClarifyMessage",
    "ClarifyRequest",
    "ClarifyResult",
    "CollateralOutputCreate",
    "CollateralOutputRead",
    "CollateralOutputUpdate",
    "CustomerProfileCreate",
    "CustomerProfileRead",
    "CustomerProfileUpdate",
    "DataResponse",
    "DeletedResponse",
    "ErrorBody",
    "ErrorResponse",
    "FeedbackStats",
    "FieldError",
    "InstructionPresetCreate",
    "InstructionPresetRead",
    "InstructionPresetUpdate",
    "Pagination",
    "ProjectFeedback",
    "ReviewItem",
    "ReviewProjectRef",
    "ReviewRequest",
    "ReviewWorkflowUpdate",
    "ReviewableRead",
    "RowFeedback",
    "SeedResult",
    "SkillCreate",
    "SkillHistoryCommit",
    "SkillMergeRequest",
    "SkillRead",
    "SkillRefreshApply",
    "SkillRefreshResult",
    "SkillUpdate",
    "TemplateCreate",
    "TemplateDetailRead",
    "TemplateFillRequest",
    "TemplateFillResponse",
    "TemplateRead",
    "TemplateSummary",
    "TemplateUpdate",
]
