from __future__ import annotations

from pathlib import Path

import typer

from relpipe.cli.context import build_context
from relpipe.core.result import Err
from relpipe.output.console import Style
from relpipe.output.errors import (
    outcome_exit_code,
    print_outcome,
    print_release_error,
    release_error_exit_code,
)
from relpipe.release.runner import Released
from relpipe.release.service import run_release


def _release(
    *,
    cwd: Path | None,
    config_path: Path | None,
    dry_run: bool,
    show_notes: bool,
) -> None:
    ctx = build_context(cwd=cwd, config_path=config_path)
    console = ctx.console

    result = run_release(cwd=ctx.cwd, config=ctx.config, console=console, dry_run=dry_run)
    if isinstance(result, Err):
        print_release_error(result.error, console)
        raise typer.Exit(code=release_error_exit_code(result.error))

    outcome = result.value
    print_outcome(outcome, console)

    if show_notes and isinstance(outcome, Released) and outcome.context.next_release:
        console.header("Release notes")
        console.print(outcome.context.next_release.notes.rstrip(), Style.DEFAULT)

    code = outcome_exit_code(outcome)
    if code != 0:
        raise typer.Exit(code=code)


def run(
    dry_run: bool = typer.Option(False, "--dry-run", help="Skip publish, exec and git stages."),
    cwd: Path | None = typer.Option(None, "--cwd", help="Repository root (default: current dir)."),
    config_path: Path | None = typer.Option(None, "--config", help="Explicit config file."),
) -> None:
    """Run the release pipeline."""
    _release(cwd=cwd, config_path=config_path, dry_run=dry_run, show_notes=dry_run)


def plan(
    cwd: Path | None = typer.Option(None, "--cwd", help="Repository root (default: current dir)."),
    config_path: Path | None = typer.Option(None, "--config", help="Explicit config file."),
) -> None:
    """Show the next version and release notes without side effects."""
    _release(cwd=cwd, config_path=config_path, dry_run=True, show_notes=True)
