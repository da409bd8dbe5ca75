"""Git operations used by the release pipeline.

Usage:
    from relpipe.git import Repository

    repo = Repository(Path("/path/to/repo"))
    branch = repo.current_branch()
"""

from relpipe.git.repository import (
    GitError,
    GitStatus,
    LogEntry,
    Repository,
    StatusEntry,
    github_slug,
)

__all__ = [
    "GitError",
    "GitStatus",
    "LogEntry",
    "Repository",
    "StatusEntry",
    "github_slug",
]
