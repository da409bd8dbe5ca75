"""The release context threaded through every pipeline stage.

One context is created per run from the repository state. Stages read what
earlier stages computed (the analyzer's next version, the generator's notes)
and write their own results in place. Exactly one stage touches it at a
time; it is discarded when the pipeline terminates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from relpipe.core.config import DEFAULT_TAG_FORMAT
from relpipe.core.structured import StrDict
from relpipe.release.commits import ParsedCommit
from relpipe.release.model import Commit, PublishedRelease, ReleaseType
from relpipe.release.semver import SemVer

OutcomeState = Literal["pending", "released", "no_release", "failed"]

_NEXT_RELEASE_FIELDS = ("version", "gitTag", "type", "notes")


@dataclass(frozen=True, slots=True)
class LastRelease:
    version: SemVer
    git_tag: str


@dataclass(slots=True)
class NextRelease:
    version: SemVer
    git_tag: str
    type: ReleaseType
    notes: str = ""


def _empty_commits() -> list[Commit]:
    return []


def _empty_parsed() -> list[ParsedCommit]:
    return []


def _empty_releases() -> list[PublishedRelease]:
    return []


@dataclass(slots=True)
class ReleaseContext:
    """Mutable record shared by the stages of one pipeline run.

    Attributes:
        cwd: Repository root; commands run from here.
        branch: Branch being released.
        tag_format: Tag template with a single ``${version}``.
        repo_slug: GitHub ``owner/name`` of the origin remote, if any.
        dry_run: Side-effecting stages are skipped when set.
        last_release: Highest released version reachable from HEAD.
        commits: Commits since ``last_release``, newest first.
        parsed_commits: Commits as interpreted by the analyzer's grammar.
        release_type: Classification of ``commits``.
        next_release: Version/tag/notes of the release being cut.
        releases: Artifacts published so far.
        outcome: Set by the runner when the pipeline terminates.
    """

    cwd: Path
    branch: str
    tag_format: str = DEFAULT_TAG_FORMAT
    repo_slug: str | None = None
    dry_run: bool = False
    last_release: LastRelease | None = None
    commits: list[Commit] = field(default_factory=_empty_commits)
    parsed_commits: list[ParsedCommit] = field(default_factory=_empty_parsed)
    release_type: ReleaseType = "none"
    next_release: NextRelease | None = None
    releases: list[PublishedRelease] = field(default_factory=_empty_releases)
    outcome: OutcomeState = "pending"

    def template_values(self) -> StrDict:
        """Values visible to ``${...}`` placeholders in plugin options.

        ``lastRelease`` fields are empty strings on a first release.
        """
        values: StrDict = {"branch": {"name": self.branch}}
        last = self.last_release
        values["lastRelease"] = {
            "version": str(last.version) if last is not None else "",
            "gitTag": last.git_tag if last is not None else "",
        }
        if self.next_release is not None:
            values["nextRelease"] = {
                "version": str(self.next_release.version),
                "gitTag": self.next_release.git_tag,
                "type": self.next_release.type,
                "notes": self.next_release.notes,
            }
        return values

    def template_preview(self) -> StrDict:
        """``template_values`` with every ``nextRelease`` field present.

        Lets verify hooks reject a template before the release is computed.
        """
        values = self.template_values()
        values.setdefault("nextRelease", dict.fromkeys(_NEXT_RELEASE_FIELDS, ""))
        return values
