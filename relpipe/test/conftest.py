from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

GitRunner = Callable[..., str]
CommitMaker = Callable[..., str]


def _run_git(repo: Path, *args: str) -> str:
    proc = subprocess.run(
        ["git", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )
    return proc.stdout


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """An initialized repository on branch ``main`` with a local identity."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")

    repo = tmp_path / "repo"
    repo.mkdir()
    _run_git(repo, "init", "-q")
    _run_git(repo, "checkout", "-q", "-b", "main")
    _run_git(repo, "config", "user.email", "dev@example.com")
    _run_git(repo, "config", "user.name", "Dev")
    _run_git(repo, "config", "commit.gpgsign", "false")
    _run_git(repo, "config", "tag.gpgsign", "false")
    return repo


@pytest.fixture
def git(git_repo: Path) -> GitRunner:
    def run(*args: str) -> str:
        return _run_git(git_repo, *args)

    return run


@pytest.fixture
def make_commit(git_repo: Path) -> CommitMaker:
    """Commit ``message``, optionally writing ``files`` first; returns the sha."""

    def commit(message: str, files: dict[str, str] | None = None) -> str:
        for rel, content in (files or {}).items():
            path = git_repo / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            _run_git(git_repo, "add", rel)
        _run_git(git_repo, "commit", "-q", "--allow-empty", "-m", message)
        return _run_git(git_repo, "rev-parse", "HEAD").strip()

    return commit
