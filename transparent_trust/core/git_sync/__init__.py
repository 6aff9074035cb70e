"""
Git mirroring of templates, customer profiles and skills.

Each kind gets one service bound to the configured repository path.
"""

from transparent_trust.server.core.config import settings

from .base import BaseGitSyncService, GitAuthor, GitCommandError, GitCommitInfo
from .customers import CustomerGitSyncService
from .frontmatter import FrontmatterDocument, slugify
from .mirror import author_for, mirror_entity
from .skills import SkillGitSyncService
from .templates import TemplateGitSyncService

template_git_sync = TemplateGitSyncService(settings.git_sync.repo_path)
customer_git_sync = CustomerGitSyncService(settings.git_sync.repo_path)
skill_git_sync = SkillGitSyncService(settings.git_sync.repo_path)

__all__ = [
    "BaseGitSyncService",
    "CustomerGitSyncService",
    "FrontmatterDocument",
    "GitAuthor",
    "GitCommandError",
    "GitCommitInfo",
    "SkillGitSyncService",
    "TemplateGitSyncService",
    "author_for",
    "customer_git_sync",
    "mirror_entity",
    "skill_git_sync",
    "slugify",
    "template_git_sync",
]
