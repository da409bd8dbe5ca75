from __future__ import annotations

import json
from pathlib import Path

import typer

from relpipe.cli.context import build_context
from relpipe.core.errors import ErrorCode
from relpipe.core.result import Err
from relpipe.output.console import Style
from relpipe.release.plugins import build_stages


def show_config(
    cwd: Path | None = typer.Option(None, "--cwd", help="Repository root (default: current dir)."),
    config_path: Path | None = typer.Option(None, "--config", help="Explicit config file."),
) -> None:
    """Print the resolved plugin pipeline."""
    ctx = build_context(cwd=cwd, config_path=config_path)
    console = ctx.console
    config = ctx.config

    source = str(config.source) if config.source else "(built-in defaults)"
    console.print(f"config: {source}", Style.DIM)
    console.print(f"branches: {', '.join(config.branches)}")
    console.print(f"tagFormat: {config.tag_format}")

    console.header("Plugins")
    for index, spec in enumerate(config.plugins, start=1):
        if spec.options:
            console.print(f"{index}. {spec.name} {json.dumps(spec.options, sort_keys=True)}")
        else:
            console.print(f"{index}. {spec.name}")

    stages = build_stages(config.plugins)
    if isinstance(stages, Err):
        console.error(stages.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    console.success("plugin options valid")
