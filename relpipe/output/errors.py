"""Error and outcome presentation.

Centralized formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relpipe.core.errors import ErrorCode
from relpipe.output.console import Style
from relpipe.release.errors import ReleaseError
from relpipe.release.runner import Failed, NoRelease, Outcome, Released

if TYPE_CHECKING:
    from relpipe.output.console import ConsoleProtocol

__all__ = ["outcome_exit_code", "print_outcome", "print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        for line in error.hint.splitlines():
            console.print(f"  {line}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    match error.kind:
        case "config_invalid" | "template_invalid":
            return int(ErrorCode.USER_ERROR)
        case "verify_failed" | "gh_missing" | "gh_auth_required":
            return int(ErrorCode.ENV_ERROR)
        case "publish_failed":
            return int(ErrorCode.NETWORK_ERROR)
        case "external_tool_failed":
            return int(ErrorCode.EXTERNAL_ERROR)
        case "stage_failed" | "git_failed":
            return int(ErrorCode.STAGE_ERROR)


def print_outcome(outcome: Outcome, console: ConsoleProtocol) -> None:
    match outcome:
        case Released(context=ctx):
            next_release = ctx.next_release
            version = str(next_release.version) if next_release else "?"
            if ctx.dry_run:
                console.success(f"dry run complete: would release {version}")
            else:
                console.success(f"released {version}")
            for published in ctx.releases:
                console.print(f"{published.name}: {published.url}", Style.DIM)
        case NoRelease(reason=reason):
            console.success(f"no release: {reason}")
        case Failed(stage=stage, error=error):
            console.newline()
            console.error(f"release failed in stage '{stage}'")
            print_release_error(error, console)
            if outcome.context.releases:
                console.warning("already published before the failure:")
                for published in outcome.context.releases:
                    console.print(f"{published.name}: {published.url}", Style.DIM)


def outcome_exit_code(outcome: Outcome) -> int:
    match outcome:
        case Released() | NoRelease():
            return int(ErrorCode.OK)
        case Failed(error=error):
            return release_error_exit_code(error)
