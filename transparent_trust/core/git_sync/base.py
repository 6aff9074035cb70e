"""
Base git sync service.

Mirrors database entities into a git working tree as markdown files and
commits every change, so each entity gets a browsable version history.
Git is driven through ``subprocess``; every method here is blocking and is
run in a worker thread by :func:`transparent_trust.core.git_sync.mirror.mirror_entity`.
"""

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar

from transparent_trust.core.logging_config import get_logger

from .frontmatter import FrontmatterDocument, read_frontmatter_file, slugify, write_frontmatter_file

logger = get_logger(__name__)

EntityT = TypeVar("EntityT")

_LOG_FIELD_SEPARATOR = "\x1f"


@dataclass(frozen=True)
class GitAuthor:
    name: str
    email: str

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass
class GitCommitInfo:
    sha: str
    author: str
    email: str
    date: str
    message: str


class GitCommandError(RuntimeError):
    """A git command exited with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"git {' '.join(args)} failed ({returncode}): {stderr.strip()}")


class BaseGitSyncService(ABC, Generic[EntityT]):
    """
    Abstract base class for git-mirrored entities.

    Subclasses define the directory, how a slug is derived from an entity,
    and how an entity maps to and from a frontmatter document.
    """

    #: Directory (relative to the repository root) holding the files.
    directory: str = ""
    #: File extension, without the dot.
    file_extension: str = "md"
    #: Human-readable entity kind used in error messages.
    kind: str = "Entity"

    def __init__(self, repo_path: str | Path = ".", committer: Optional[GitAuthor] = None):
        self.repo_path = Path(repo_path)
        self.committer = committer

    # ------------------------------------------------------------------
    # Entity specific hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def generate_slug(self, entity: EntityT) -> str:
        """Filename (without extension) for ``entity``."""

    @abstractmethod
    def to_document(self, entity: EntityT) -> FrontmatterDocument:
        """Frontmatter document written for ``entity``."""

    @abstractmethod
    def from_document(self, slug: str, document: FrontmatterDocument) -> Dict[str, Any]:
        """Entity fields read back from a file."""

    # ------------------------------------------------------------------
    # File operations
    # ------------------------------------------------------------------

    def slug_for(self, text: str) -> str:
        return slugify(text)

    def get_file_path(self, slug: str) -> str:
        """Path relative to the repository root, e.g. ``skills/onboarding.md``."""
        return f"{self.directory}/{slug}.{self.file_extension}"

    def _absolute(self, slug: str) -> Path:
        return self.repo_path / self.get_file_path(slug)

    def write_file(self, slug: str, entity: EntityT) -> None:
        write_frontmatter_file(self._absolute(slug), self.to_document(entity))

    def read_file(self, slug: str) -> Dict[str, Any]:
        document = read_frontmatter_file(
            self._absolute(slug), f"{self.kind} file not found: {slug}.{self.file_extension}"
        )
        return self.from_document(slug, document)

    def delete_file(self, slug: str) -> None:
        path = self._absolute(slug)
        if path.exists():
            path.unlink()

    def rename_file(self, old_slug: str, new_slug: str) -> None:
        if old_slug == new_slug:
            return
        old_path = self._absolute(old_slug)
        if old_path.exists():
            new_path = self._absolute(new_slug)
            new_path.parent.mkdir(parents=True, exist_ok=True)
            old_path.rename(new_path)

    def file_exists(self, slug: str) -> bool:
        return self._absolute(slug).is_file()

    def list_slugs(self) -> List[str]:
        """Slugs of every mirrored file, README.md excluded."""
        directory = self.repo_path / self.directory
        if not directory.is_dir():
            return []
        return sorted(
            p.stem
            for p in directory.glob(f"*.{self.file_extension}")
            if p.is_file() and p.name.lower() != "readme.md"
        )

    # ------------------------------------------------------------------
    # Git plumbing
    # ------------------------------------------------------------------

    def _run_git(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """
        Run a git command in the repository.

        Args:
            args: Git command arguments
            check: Raise GitCommandError on a non-zero exit status

        Returns:
            CompletedProcess result
        """
        result = subprocess.run(
            ["git", *args],
            cwd=self.repo_path,
            check=False,
            capture_output=True,
            text=True,
        )
        if check and result.returncode != 0:
            logger.error(f"Git command failed: git {' '.join(args)}: {result.stderr.strip()}")
            raise GitCommandError(args, result.returncode, result.stderr)
        return result

    def _git_add(self, paths: Sequence[str]) -> None:
        self._run_git(["add", "--all", "--", *paths])

    def _commit_staged_changes_if_any(self, message: str, author: GitAuthor) -> Optional[str]:
        """Commit the index when it has changes. Returns the new commit sha."""
        staged = self._run_git(["diff", "--cached", "--quiet"], check=False)
        if staged.returncode == 0:
            logger.debug(f"No staged changes for commit: {message}")
            return None

        committer = self.committer or author
        self._run_git(
            [
                "-c",
                f"user.name={committer.name}",
                "-c",
                f"user.email={committer.email}",
                "commit",
                "-m",
                message,
                "--author",
                str(author),
            ]
        )
        sha = self._run_git(["rev-parse", "HEAD"]).stdout.strip()
        logger.info(f"Created commit {sha[:8]}: {message[:60]}")
        return sha

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def save_and_commit(self, slug: str, entity: EntityT, message: str, author: GitAuthor) -> Optional[str]:
        """Write the entity file and commit it.

        Returns:
            The commit sha, or None when the file did not change.
        """
        self.write_file(slug, entity)
        self._git_add([self.get_file_path(slug)])
        return self._commit_staged_changes_if_any(message, author)

    def update_and_commit(self, old_slug: str, entity: EntityT, message: str, author: GitAuthor) -> Optional[str]:
        """Rewrite the entity file, renaming it first when its slug changed."""
        new_slug = self.generate_slug(entity)
        paths = [self.get_file_path(new_slug)]
        if old_slug and old_slug != new_slug:
            self.rename_file(old_slug, new_slug)
            paths.insert(0, self.get_file_path(old_slug))
        self.write_file(new_slug, entity)
        self._git_add(paths)
        return self._commit_staged_changes_if_any(message, author)

    def delete_and_commit(self, slug: str, message: str, author: GitAuthor) -> Optional[str]:
        self.delete_file(slug)
        self._git_add([self.get_file_path(slug)])
        return self._commit_staged_changes_if_any(message, author)

    def get_history(self, slug: str, limit: int = 10) -> List[GitCommitInfo]:
        """Commits touching the entity file, newest first."""
        fmt = _LOG_FIELD_SEPARATOR.join(["%H", "%an", "%ae", "%aI", "%s"])
        result = self._run_git(
            ["log", f"-n{limit}", f"--format={fmt}", "--follow", "--", self.get_file_path(slug)], check=False
        )
        if result.returncode != 0:
            return []
        commits = []
        for line in result.stdout.splitlines():
            parts = line.split(_LOG_FIELD_SEPARATOR)
            if len(parts) == 5:
                commits.append(GitCommitInfo(*parts))
        return commits

    def get_diff(self, slug: str, from_sha: str, to_sha: str = "HEAD") -> str:
        return self._run_git(["diff", from_sha, to_sha, "--", self.get_file_path(slug)]).stdout

    def is_clean(self) -> bool:
        return self._run_git(["status", "--porcelain"]).stdout.strip() == ""

    def get_current_branch(self) -> str:
        return self._run_git(["rev-parse", "--abbrev-ref", "HEAD"]).stdout.strip()

    def push_to_remote(self, remote: str = "origin", branch: Optional[str] = None) -> None:
        self._run_git(["push", remote, branch or self.get_current_branch()])
