"""Run configured external commands at pipeline steps.

Commands are split with shell-style quoting *before* placeholders are
substituted and are executed without a shell, so ``${nextRelease.version}``
always arrives as exactly one argument.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path

from relpipe.core.config import ConfigError
from relpipe.core.result import Err, Ok, Result
from relpipe.core.structured import StrDict, get_str
from relpipe.core.template import render
from relpipe.output.console import ConsoleProtocol, Style
from relpipe.platform.process import run as run_process
from relpipe.release.context import ReleaseContext
from relpipe.release.errors import ReleaseError
from relpipe.release.runner import PROCEED, StageSignal

_COMMAND_OPTIONS = ("verifyConditionsCmd", "prepareCmd")


def split_command(template: str) -> Result[list[str], str]:
    try:
        argv = shlex.split(template)
    except ValueError as e:
        return Err(str(e))
    if not argv:
        return Err("empty command")
    return Ok(argv)


def render_command(argv: list[str], values: StrDict) -> Result[list[str], ReleaseError]:
    out: list[str] = []
    for token in argv:
        rendered = render(token, values)
        if isinstance(rendered, Err):
            return Err(
                ReleaseError(
                    kind="template_invalid",
                    message=rendered.error.message,
                    hint=" ".join(argv),
                )
            )
        out.append(rendered.value)
    return Ok(out)


@dataclass(frozen=True, slots=True)
class ExecStage:
    prepare_cmd: tuple[str, ...] | None = None
    verify_cmd: tuple[str, ...] | None = None
    exec_cwd: str | None = None
    name: str = "exec"
    side_effects: bool = True

    @classmethod
    def from_options(cls, options: StrDict) -> Result[ExecStage, ConfigError]:
        commands: dict[str, tuple[str, ...]] = {}
        for key in _COMMAND_OPTIONS:
            if key not in options:
                continue
            raw = get_str(options, key)
            if raw is None:
                return Err(ConfigError(f"exec: '{key}' must be a non-empty string"))
            argv = split_command(raw)
            if isinstance(argv, Err):
                return Err(ConfigError(f"exec: invalid '{key}': {argv.error}"))
            commands[key] = tuple(argv.value)

        if not commands:
            return Err(ConfigError("exec: configure at least one of prepareCmd, verifyConditionsCmd"))

        return Ok(
            cls(
                prepare_cmd=commands.get("prepareCmd"),
                verify_cmd=commands.get("verifyConditionsCmd"),
                exec_cwd=get_str(options, "execCwd"),
            )
        )

    def _cwd(self, context: ReleaseContext) -> Path:
        if self.exec_cwd is None:
            return context.cwd
        return context.cwd / self.exec_cwd

    def _execute(
        self, argv: tuple[str, ...], context: ReleaseContext, option: str
    ) -> Result[str, ReleaseError]:
        rendered = render_command(list(argv), context.template_values())
        if isinstance(rendered, Err):
            return rendered

        result = run_process(rendered.value, cwd=self._cwd(context))
        if isinstance(result, Err):
            e = result.error
            return Err(
                ReleaseError(
                    kind="external_tool_failed",
                    message=f"{option} failed (exit {e.returncode}): {shlex.join(rendered.value)}",
                    hint=e.stderr.strip() or e.stdout.strip() or None,
                )
            )
        return result

    def verify(self, context: ReleaseContext) -> Result[None, ReleaseError]:
        if not self._cwd(context).is_dir():
            return Err(
                ReleaseError(
                    kind="verify_failed",
                    message=f"exec: execCwd is not a directory: {self.exec_cwd}",
                )
            )
        if self.prepare_cmd is not None:
            preview = render_command(list(self.prepare_cmd), context.template_preview())
            if isinstance(preview, Err):
                return preview
        if self.verify_cmd is None:
            return Ok(None)
        result = self._execute(self.verify_cmd, context, "verifyConditionsCmd")
        if isinstance(result, Err):
            return result
        return Ok(None)

    def run(
        self, context: ReleaseContext, console: ConsoleProtocol
    ) -> Result[StageSignal, ReleaseError]:
        if self.prepare_cmd is None:
            return Ok(PROCEED)

        console.print(f"$ {shlex.join(self.prepare_cmd)}", Style.DIM)
        result = self._execute(self.prepare_cmd, context, "prepareCmd")
        if isinstance(result, Err):
            return result

        for line in result.value.splitlines():
            console.print(line, Style.DIM)
        console.success("prepareCmd")
        return Ok(PROCEED)
