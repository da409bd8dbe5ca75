"""Commit release assets back to the release branch."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relpipe.core.config import ConfigError
from relpipe.core.result import Err, Ok, Result
from relpipe.core.structured import StrDict, as_obj_list, get_bool, get_str
from relpipe.core.template import render
from relpipe.git.repository import GitError, Repository
from relpipe.output.console import ConsoleProtocol, Style
from relpipe.release.context import ReleaseContext
from relpipe.release.errors import ReleaseError
from relpipe.release.runner import PROCEED, StageSignal

DEFAULT_ASSETS: tuple[str, ...] = ("CHANGELOG.md",)
DEFAULT_MESSAGE = "chore(release): ${nextRelease.version} [skip ci]\n\n${nextRelease.notes}"

_GLOB_CHARS = frozenset("*?[")


def parse_assets(value: object) -> Result[tuple[str, ...], str]:
    """Flatten ``[["a", "b"], "c"]`` style asset groups into patterns."""
    groups = as_obj_list(value)
    if groups is None:
        return Err("'assets' must be a list")

    patterns: list[str] = []
    for i, group in enumerate(groups):
        if isinstance(group, str):
            patterns.append(group)
            continue
        items = as_obj_list(group)
        if items is None or not all(isinstance(item, str) for item in items):
            return Err(f"assets[{i}]: expected a path or a list of paths")
        patterns.extend(str(item) for item in items)
    return Ok(tuple(p for p in patterns if p.strip()))


def expand_assets(root: Path, patterns: tuple[str, ...]) -> list[str]:
    """Resolve patterns to repo-relative posix paths, in declared order.

    A directory stands for every file beneath it.
    """
    seen: set[str] = set()
    out: list[str] = []
    for pattern in patterns:
        if _GLOB_CHARS & set(pattern):
            matches = sorted(
                p.relative_to(root).as_posix() for p in root.glob(pattern) if p.is_file()
            )
        elif (root / pattern).is_dir():
            matches = sorted(
                p.relative_to(root).as_posix() for p in (root / pattern).rglob("*") if p.is_file()
            )
        else:
            matches = [Path(pattern).as_posix()]
        for rel in matches:
            if rel not in seen:
                seen.add(rel)
                out.append(rel)
    return out


def _git_failed(error: GitError) -> ReleaseError:
    return ReleaseError(
        kind="git_failed",
        message=f"git {error.command} failed",
        hint=error.message,
    )


@dataclass(frozen=True, slots=True)
class GitCommitBack:
    assets: tuple[str, ...] = DEFAULT_ASSETS
    message: str = DEFAULT_MESSAGE
    push: bool = True
    tag: bool = False
    name: str = "git"
    side_effects: bool = True

    @classmethod
    def from_options(cls, options: StrDict) -> Result[GitCommitBack, ConfigError]:
        assets = DEFAULT_ASSETS
        if "assets" in options:
            parsed = parse_assets(options["assets"])
            if isinstance(parsed, Err):
                return Err(ConfigError(f"git: {parsed.error}"))
            assets = parsed.value

        message = DEFAULT_MESSAGE
        if "message" in options:
            raw = get_str(options, "message")
            if raw is None:
                return Err(ConfigError("git: 'message' must be a non-empty string"))
            message = raw

        for key in ("push", "tag"):
            if key in options and get_bool(options, key) is None:
                return Err(ConfigError(f"git: '{key}' must be a boolean"))

        push = get_bool(options, "push")
        tag = get_bool(options, "tag")
        return Ok(
            cls(
                assets=assets,
                message=message,
                push=True if push is None else push,
                tag=bool(tag),
            )
        )

    def verify(self, context: ReleaseContext) -> Result[None, ReleaseError]:
        if not Repository(context.cwd).exists():
            return Err(
                ReleaseError(
                    kind="verify_failed",
                    message=f"git: not a git repository: {context.cwd}",
                )
            )
        preview = render(self.message, context.template_preview())
        if isinstance(preview, Err):
            return Err(
                ReleaseError(
                    kind="template_invalid",
                    message=f"git: {preview.error.message} in message",
                )
            )
        return Ok(None)

    def run(
        self, context: ReleaseContext, console: ConsoleProtocol
    ) -> Result[StageSignal, ReleaseError]:
        next_release = context.next_release
        if next_release is None:
            return Err(
                ReleaseError(
                    kind="stage_failed",
                    message="no next release to commit",
                    hint="commit-analyzer must come before git",
                )
            )

        rendered = render(self.message, context.template_values())
        if isinstance(rendered, Err):
            return Err(ReleaseError(kind="template_invalid", message=rendered.error.message))
        message = rendered.value

        repo = Repository(context.cwd)
        status = repo.status()
        if isinstance(status, Err):
            return Err(_git_failed(status.error))

        changed = status.value.changed_paths
        to_commit = [p for p in expand_assets(context.cwd, self.assets) if p in changed]

        refs: list[str] = []
        if to_commit:
            console.print(f"git add {' '.join(to_commit)}", Style.DIM)
            added = repo.add(to_commit)
            if isinstance(added, Err):
                return Err(_git_failed(added.error))
            committed = repo.commit(message)
            if isinstance(committed, Err):
                return Err(_git_failed(committed.error))
            console.success(f"committed {committed.value[:7]}: {message.splitlines()[0]}")
            refs.append(f"HEAD:refs/heads/{context.branch}")
        else:
            console.info("no release assets changed; nothing to commit")

        if self.tag:
            tagged = repo.tag(next_release.git_tag, message)
            if isinstance(tagged, Err):
                return Err(_git_failed(tagged.error))
            console.success(f"tagged {next_release.git_tag}")
            refs.append(f"refs/tags/{next_release.git_tag}")

        if self.push and refs:
            console.print(f"git push origin {' '.join(refs)}", Style.DIM)
            pushed = repo.push(refs)
            if isinstance(pushed, Err):
                return Err(_git_failed(pushed.error))
            console.success("pushed")

        return Ok(PROCEED)
