from __future__ import annotations

import shutil
from pathlib import Path
from time import sleep

from relpipe.core.result import Err, Ok, Result
from relpipe.platform.process import ProcessError
from relpipe.platform.process import run as run_process
from relpipe.release.errors import ReleaseError, ReleaseErrorKind
from relpipe.release.timeouts import (
    GH_READ_RETRY_ATTEMPTS,
    GH_READ_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
)


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "network is unreachable",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    return any(marker in text for marker in markers)


def run_gh_read(
    *,
    cwd: Path,
    cmd: list[str],
    kind: ReleaseErrorKind,
    message: str,
    hint: str | None = None,
    retry_attempts: int = GH_READ_RETRY_ATTEMPTS,
) -> Result[str, ReleaseError]:
    """Run a read-only gh command, retrying transient network failures."""
    attempts = max(1, retry_attempts)
    for attempt in range(attempts):
        result = run_process(cmd, cwd=cwd, timeout=GH_TIMEOUT_SECONDS)
        if isinstance(result, Ok):
            return result

        error = result.error
        if attempt < attempts - 1 and _is_transient_gh_error(error):
            sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
            continue

        return Err(ReleaseError(kind=kind, message=message, hint=error.stderr.strip() or hint))

    return Err(ReleaseError(kind=kind, message=message, hint=hint))


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def ensure_gh_auth(*, cwd: Path) -> Result[None, ReleaseError]:
    result = run_gh_read(
        cwd=cwd,
        cmd=["gh", "auth", "status"],
        kind="gh_auth_required",
        message="gh auth required",
        hint="Run: gh auth login (or set GH_TOKEN)",
    )
    if isinstance(result, Err):
        return result
    return Ok(None)


def create_release(
    *,
    cwd: Path,
    repo: str,
    tag: str,
    target: str,
    notes: str,
    draft: bool,
    assets: list[str],
) -> Result[str, ReleaseError]:
    """Create a GitHub release (and its tag) and return the release URL.

    Not retried: a timeout may still have created the release remotely.
    """
    cmd = [
        "gh",
        "release",
        "create",
        tag,
        "--repo",
        repo,
        "--title",
        tag,
        "--target",
        target,
        "--notes",
        notes,
    ]
    if draft:
        cmd.append("--draft")
    cmd.extend(assets)

    result = run_process(cmd, cwd=cwd, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        e = result.error
        return Err(
            ReleaseError(
                kind="publish_failed",
                message=f"failed to create GitHub release {tag}",
                hint=e.stderr.strip() or None,
            )
        )

    lines = [ln.strip() for ln in result.value.splitlines() if ln.strip()]
    url = lines[-1] if lines else f"https://github.com/{repo}/releases/tag/{tag}"
    return Ok(url)
