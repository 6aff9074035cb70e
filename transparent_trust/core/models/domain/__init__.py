"""Domain enums shared by entities, I/O schemas and services."""

from .user import CurrentUser
from .enums import (
    AuditAction,
    AuditEntityType,
    Capability,
    CollateralStatus,
    FeedbackRating,
    HistoryAction,
    OutputFormat,
    ProjectStatus,
    ReviewStatus,
    RowStatus,
    ShareStatus,
    SkillStatus,
    SyncStatus,
)

__all__ = [
    "CurrentUser",
    "AuditAction",
    "AuditEntityType",
    "Capability",
    "CollateralStatus",
    "FeedbackRating",
    "HistoryAction",
    "OutputFormat",
    "ProjectStatus",
    "ReviewStatus",
    "RowStatus",
    "ShareStatus",
    "SkillStatus",
    "SyncStatus",
]
