from __future__ import annotations

from dataclasses import dataclass

from relpipe.core.config import ConfigError
from relpipe.core.result import Err, Ok, Result
from relpipe.core.structured import StrDict, get_str
from relpipe.output.console import ConsoleProtocol, Style
from relpipe.release.commits import PRESETS, CommitGrammar, is_skipped, parse_commit
from relpipe.release.context import NextRelease, ReleaseContext
from relpipe.release.errors import ReleaseError
from relpipe.release.rules import ReleaseRule, classify, classify_commit, parse_release_rules
from relpipe.release.runner import PROCEED, NoReleaseNeeded, StageSignal
from relpipe.release.semver import FIRST_RELEASE, format_tag


@dataclass(frozen=True, slots=True)
class CommitAnalyzer:
    """Classify commits since the last release and compute the next version."""

    grammar: CommitGrammar
    release_rules: tuple[ReleaseRule, ...] = ()
    name: str = "commit-analyzer"
    side_effects: bool = False

    @classmethod
    def from_options(cls, options: StrDict) -> Result[CommitAnalyzer, ConfigError]:
        preset = get_str(options, "preset") or "angular"
        grammar = PRESETS.get(preset)
        if grammar is None:
            known = ", ".join(sorted(PRESETS))
            return Err(ConfigError(f"commit-analyzer: unknown preset '{preset}' (known: {known})"))

        rules: tuple[ReleaseRule, ...] = ()
        if "releaseRules" in options:
            parsed = parse_release_rules(options["releaseRules"])
            if isinstance(parsed, Err):
                return Err(ConfigError(f"commit-analyzer: {parsed.error}"))
            rules = parsed.value

        return Ok(cls(grammar=grammar, release_rules=rules))

    def verify(self, context: ReleaseContext) -> Result[None, ReleaseError]:
        return Ok(None)

    def run(
        self, context: ReleaseContext, console: ConsoleProtocol
    ) -> Result[StageSignal, ReleaseError]:
        if not context.commits:
            return Ok(NoReleaseNeeded("no commits since last release"))

        considered = [c for c in context.commits if not is_skipped(c)]
        parsed = [parse_commit(c, self.grammar) for c in considered]
        context.parsed_commits = parsed

        for p in parsed:
            level = classify_commit(p, self.release_rules)
            console.print(f"{p.commit.short_sha} {level:<5} {p.commit.subject}", Style.DIM)

        release_type = classify(parsed, self.release_rules)
        context.release_type = release_type
        if release_type == "none":
            return Ok(NoReleaseNeeded("no release necessary: no relevant changes"))

        if context.last_release is None:
            version = FIRST_RELEASE
        else:
            version = context.last_release.version.bump(release_type)

        context.next_release = NextRelease(
            version=version,
            git_tag=format_tag(version, context.tag_format),
            type=release_type,
        )
        console.success(f"{release_type} release: {version}")
        return Ok(PROCEED)
