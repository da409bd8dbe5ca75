"""Markdown release notes in the angular changelog layout.

Example output::

    ## [1.3.0](https://github.com/acme/app/compare/v1.2.0...v1.3.0) (2026-10-17)

    ### Features

    * **parser:** accept tabs ([abc1234](https://github.com/acme/app/commit/abc1234...))

    ### BREAKING CHANGES

    * **parser:** tabs are now significant
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from relpipe.core.config import ConfigError
from relpipe.core.result import Err, Ok, Result
from relpipe.core.structured import StrDict
from relpipe.output.console import ConsoleProtocol, Style
from relpipe.release.commits import ParsedCommit
from relpipe.release.context import ReleaseContext
from relpipe.release.errors import ReleaseError
from relpipe.release.runner import PROCEED, StageSignal

SECTIONS: tuple[tuple[str, str], ...] = (
    ("feat", "Features"),
    ("fix", "Bug Fixes"),
    ("perf", "Performance Improvements"),
    ("revert", "Reverts"),
)


def _commit_ref(parsed: ParsedCommit, slug: str | None) -> str:
    short = parsed.commit.short_sha
    if slug is None:
        return short
    return f"[{short}](https://github.com/{slug}/commit/{parsed.commit.sha})"


def _entry(parsed: ParsedCommit, text: str, slug: str | None, *, with_ref: bool) -> str:
    scope = f"**{parsed.scope}:** " if parsed.scope else ""
    line = f"* {scope}{text}"
    if with_ref:
        line += f" ({_commit_ref(parsed, slug)})"
    return line


def render_notes(context: ReleaseContext, *, today: date) -> str:
    """Render notes for ``context.next_release`` from ``context.parsed_commits``."""
    next_release = context.next_release
    assert next_release is not None

    slug = context.repo_slug
    version = str(next_release.version)
    if slug is not None and context.last_release is not None:
        compare = (
            f"https://github.com/{slug}/compare/"
            f"{context.last_release.git_tag}...{next_release.git_tag}"
        )
        title = f"## [{version}]({compare}) ({today.isoformat()})"
    else:
        title = f"## {version} ({today.isoformat()})"

    lines: list[str] = [title]
    for kind, heading in SECTIONS:
        entries = [p for p in context.parsed_commits if p.type == kind]
        if not entries:
            continue
        lines.extend(["", f"### {heading}", ""])
        lines.extend(_entry(p, p.subject, slug, with_ref=True) for p in entries)

    breaking = [(p, note) for p in context.parsed_commits for note in p.notes]
    if breaking:
        lines.extend(["", "### BREAKING CHANGES", ""])
        lines.extend(_entry(p, note, slug, with_ref=False) for p, note in breaking)

    return "\n".join(lines) + "\n"


def _today() -> date:
    return date.today()


@dataclass(frozen=True, slots=True)
class ReleaseNotesGenerator:
    today: Callable[[], date] = field(default=_today)
    name: str = "release-notes-generator"
    side_effects: bool = False

    @classmethod
    def from_options(cls, options: StrDict) -> Result[ReleaseNotesGenerator, ConfigError]:
        del options
        return Ok(cls())

    def verify(self, context: ReleaseContext) -> Result[None, ReleaseError]:
        return Ok(None)

    def run(
        self, context: ReleaseContext, console: ConsoleProtocol
    ) -> Result[StageSignal, ReleaseError]:
        if context.next_release is None:
            return Err(
                ReleaseError(
                    kind="stage_failed",
                    message="no next release to describe",
                    hint="commit-analyzer must come before release-notes-generator",
                )
            )

        notes = render_notes(context, today=self.today())
        context.next_release.notes = notes
        console.print(f"{len(notes.splitlines())} lines of release notes", Style.DIM)
        return Ok(PROCEED)
