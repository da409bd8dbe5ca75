from __future__ import annotations

import re
from dataclasses import dataclass

from relpipe.release.model import BumpType


_VERSION_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, kind: BumpType) -> SemVer:
        match kind:
            case "major":
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                return SemVer(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")


FIRST_RELEASE = SemVer(1, 0, 0)


def parse_version(text: str) -> SemVer | None:
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def _tag_regex(tag_format: str) -> re.Pattern[str]:
    prefix, _, suffix = tag_format.partition("${version}")
    return re.compile(rf"^{re.escape(prefix)}(?P<version>.+){re.escape(suffix)}$")


def format_tag(version: SemVer, tag_format: str) -> str:
    return tag_format.replace("${version}", str(version))


def parse_tag(tag: str, tag_format: str) -> SemVer | None:
    """Version encoded in ``tag``; None for tags of another format or prereleases."""
    m = _tag_regex(tag_format).match(tag)
    if m is None:
        return None
    return parse_version(m.group("version"))


def latest_tag(tags: list[str], tag_format: str) -> tuple[SemVer, str] | None:
    """Highest stable version among ``tags``, with the tag it came from."""
    parsed = [(v, t) for t in tags if (v := parse_tag(t, tag_format)) is not None]
    if not parsed:
        return None
    return max(parsed, key=lambda item: item[0])
