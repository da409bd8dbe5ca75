"""Git repository abstraction.

Everything the release pipeline needs from git: the current branch, tags
reachable from HEAD, commit messages since a tag, working tree status, and
the add/commit/tag/push sequence of the commit-back stage. All operations
return Result types.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.log_since("v1.2.0"):
        case Ok(entries):
            for entry in entries:
                print(entry.short_sha, entry.subject)
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from relpipe.core.result import Err, Ok, Result
from relpipe.platform.process import ProcessError
from relpipe.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# Unit/record separators keep multi-line commit bodies intact in `git log`.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"

_GITHUB_URL_RE = re.compile(
    r"^(?:https?://(?:[^@/]+@)?github\.com/|git@github\.com:|ssh://git@github\.com/)"
    r"(?P<slug>[^/\s]+/[^/\s]+?)(?:\.git)?/?$"
)

__all__ = [
    "GitError",
    "GitStatus",
    "LogEntry",
    "Repository",
    "StatusEntry",
    "github_slug",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One commit from `git log`: full hash and raw message."""

    sha: str
    message: str

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0].strip()


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path relative to the repository root
    """

    xy: str
    path: str


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Working tree state from `git status --porcelain=v1`."""

    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def changed_paths(self) -> frozenset[str]:
        return frozenset(e.path for e in self.entries)


def github_slug(url: str) -> str | None:
    """Extract ``owner/name`` from a GitHub remote URL, None for other hosts."""
    m = _GITHUB_URL_RE.match(url.strip())
    if m is None:
        return None
    return m.group("slug")


def _git_error(command: str, e: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=e.stderr.strip() or e.stdout.strip() or fallback,
        returncode=e.returncode,
    )


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this is a valid git repository (worktrees included)."""
        return (self.path / ".git").exists()

    def current_branch(self) -> str | None:
        """Current branch name; None on detached HEAD or error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def head_sha(self) -> Result[str, GitError]:
        result = self._run(["rev-parse", "HEAD"])
        match result:
            case Err(e):
                return Err(_git_error("rev-parse", e, "cannot resolve HEAD"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def merged_tags(self) -> Result[list[str], GitError]:
        """Tags reachable from HEAD."""
        result = self._run(["tag", "--merged", "HEAD"])
        match result:
            case Err(e):
                return Err(_git_error("tag --merged", e, "git tag failed"))
            case Ok(stdout):
                return Ok([t.strip() for t in stdout.splitlines() if t.strip()])

    def log_since(self, ref: str | None) -> Result[list[LogEntry], GitError]:
        """Commits in ``ref..HEAD`` (all of HEAD's history when ref is None).

        Newest first, as git prints them.
        """
        args = ["log", f"--format=%H{_FIELD_SEP}%B{_RECORD_SEP}"]
        if ref is not None:
            args.append(f"{ref}..HEAD")
        result = self._run(args)
        match result:
            case Err(e):
                return Err(_git_error("log", e, "git log failed"))
            case Ok(stdout):
                return Ok(self._parse_log(stdout))

    def status(self) -> Result[GitStatus, GitError]:
        result = self._run(["status", "--porcelain=v1", "--untracked-files=all"])
        match result:
            case Err(e):
                return Err(_git_error("status", e, "git status failed"))
            case Ok(stdout):
                return Ok(self._parse_status(stdout))

    def remote_url(self, remote: str = "origin") -> str | None:
        result = self._run(["remote", "get-url", remote])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def add(self, paths: list[str]) -> Result[None, GitError]:
        result = self._run(["add", "--", *paths])
        if isinstance(result, Err):
            return Err(_git_error("add", result.error, "git add failed"))
        return Ok(None)

    def commit(self, message: str) -> Result[str, GitError]:
        """Commit the index with ``message``; returns the new HEAD sha."""
        result = self._run(["commit", "-m", message])
        if isinstance(result, Err):
            return Err(_git_error("commit", result.error, "git commit failed"))
        return self.head_sha()

    def tag(self, name: str, message: str) -> Result[None, GitError]:
        result = self._run(["tag", "-a", name, "-m", message])
        if isinstance(result, Err):
            return Err(_git_error("tag", result.error, f"cannot create tag {name}"))
        return Ok(None)

    def push(self, refs: list[str], remote: str = "origin") -> Result[None, GitError]:
        result = self._run(["push", remote, *refs])
        if isinstance(result, Err):
            return Err(_git_error("push", result.error, "git push failed"))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    def _parse_log(self, output: str) -> list[LogEntry]:
        entries: list[LogEntry] = []
        for record in output.split(_RECORD_SEP):
            record = record.strip("\n")
            if not record.strip():
                continue
            sha, _, message = record.partition(_FIELD_SEP)
            entries.append(LogEntry(sha=sha.strip(), message=message.strip()))
        return entries

    def _parse_status(self, output: str) -> GitStatus:
        entries: list[StatusEntry] = []
        for line in output.splitlines():
            if len(line) < 4:
                continue
            xy = line[:2]
            path = line[3:]
            # Renames print "old -> new"; the new path is what gets committed.
            if " -> " in path:
                path = path.split(" -> ", 1)[1]
            entries.append(StatusEntry(xy=xy, path=path.strip('"')))
        return GitStatus(entries=tuple(entries))
