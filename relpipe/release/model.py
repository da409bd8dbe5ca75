from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


BumpType = Literal["major", "minor", "patch"]
ReleaseType = Literal["none", "patch", "minor", "major"]

# Severity order used to pick the highest classification over a commit set.
RELEASE_TYPE_ORDER: tuple[ReleaseType, ...] = ("none", "patch", "minor", "major")


def release_rank(kind: ReleaseType) -> int:
    return RELEASE_TYPE_ORDER.index(kind)


def highest(kinds: list[ReleaseType]) -> ReleaseType:
    if not kinds:
        return "none"
    return max(kinds, key=release_rank)


@dataclass(frozen=True, slots=True)
class Commit:
    sha: str
    message: str

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0].strip()


@dataclass(frozen=True, slots=True)
class PublishedRelease:
    """Reference to an artifact a publish stage created."""

    name: str
    url: str
