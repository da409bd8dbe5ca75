from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from relpipe.core.config import ReleaseConfig, load_release_config
from relpipe.core.errors import ErrorCode
from relpipe.core.result import Err
from relpipe.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    cwd: Path
    config: ReleaseConfig
    console: ConsoleProtocol


def build_context(*, cwd: Path | None, config_path: Path | None) -> CLIContext:
    try:
        root = (cwd or Path.cwd()).expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --cwd: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not root.is_dir():
        typer.echo(f"error: --cwd '{root}' is not a directory", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if config_path is not None and not config_path.is_file():
        typer.echo(f"error: config file not found: {config_path}", err=True)
        raise typer.Exit(code=int(ErrorCode.IO_ERROR))

    config_result = load_release_config(root, config_path)
    if isinstance(config_result, Err):
        error = config_result.error
        where = f" ({error.path})" if error.path else ""
        typer.echo(f"error: {error.message}{where}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(cwd=root, config=config_result.value, console=RichConsole())
