from __future__ import annotations

from pathlib import Path

from relpipe.core.config import ReleaseConfig
from relpipe.core.result import Err, Ok, Result
from relpipe.git.repository import GitError, Repository, github_slug
from relpipe.output.console import ConsoleProtocol, Style
from relpipe.release.context import LastRelease, ReleaseContext
from relpipe.release.errors import ReleaseError
from relpipe.release.model import Commit
from relpipe.release.plugins import build_stages
from relpipe.release.runner import NoRelease, Outcome, run_pipeline
from relpipe.release.semver import latest_tag


def _git_failed(error: GitError) -> ReleaseError:
    return ReleaseError(kind="git_failed", message=f"git {error.command} failed", hint=error.message)


def find_last_release(repo: Repository, tag_format: str) -> Result[LastRelease | None, ReleaseError]:
    tags = repo.merged_tags()
    if isinstance(tags, Err):
        return Err(_git_failed(tags.error))
    latest = latest_tag(tags.value, tag_format)
    if latest is None:
        return Ok(None)
    version, tag = latest
    return Ok(LastRelease(version=version, git_tag=tag))


def build_context(
    *,
    cwd: Path,
    config: ReleaseConfig,
    dry_run: bool,
) -> Result[ReleaseContext, ReleaseError]:
    """Read branch, last release and pending commits from the repository."""
    repo = Repository(cwd)
    if not repo.exists():
        return Err(
            ReleaseError(
                kind="git_failed",
                message=f"not a git repository: {cwd}",
                hint="Run relpipe from the repository root or pass --cwd",
            )
        )

    branch = repo.current_branch()
    if branch is None:
        return Err(
            ReleaseError(
                kind="git_failed",
                message="cannot release from a detached HEAD",
                hint="Check out a release branch",
            )
        )

    last = find_last_release(repo, config.tag_format)
    if isinstance(last, Err):
        return last

    log = repo.log_since(last.value.git_tag if last.value is not None else None)
    if isinstance(log, Err):
        return Err(_git_failed(log.error))

    remote = repo.remote_url()
    return Ok(
        ReleaseContext(
            cwd=cwd,
            branch=branch,
            tag_format=config.tag_format,
            repo_slug=github_slug(remote) if remote is not None else None,
            dry_run=dry_run,
            last_release=last.value,
            commits=[Commit(sha=e.sha, message=e.message) for e in log.value],
        )
    )


def run_release(
    *,
    cwd: Path,
    config: ReleaseConfig,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[Outcome, ReleaseError]:
    """Build the configured pipeline and run it against the repository at ``cwd``.

    Errors preparing the run (bad plugin options, unreadable repository)
    are returned as Err; failures of the pipeline itself are a Failed outcome.
    """
    stages = build_stages(config.plugins)
    if isinstance(stages, Err):
        return Err(ReleaseError(kind="config_invalid", message=stages.error.message))

    context = build_context(cwd=cwd, config=config, dry_run=dry_run)
    if isinstance(context, Err):
        return context
    ctx = context.value

    if ctx.branch not in config.branches:
        reason = f"branch '{ctx.branch}' is not a release branch ({', '.join(config.branches)})"
        console.info(reason)
        ctx.outcome = "no_release"
        return Ok(NoRelease(context=ctx, reason=reason))

    last = ctx.last_release
    console.print(f"branch: {ctx.branch}", Style.DIM)
    console.print(f"last release: {last.git_tag if last else '(none)'}", Style.DIM)
    console.print(f"commits since: {len(ctx.commits)}", Style.DIM)
    return Ok(run_pipeline(stages.value, ctx, console))
