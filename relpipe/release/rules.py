"""Release rules: mapping parsed commits to a release type.

Custom rules are consulted first for every commit. If at least one custom
rule matches, the highest matching level is that commit's classification
and the default rules are ignored for it; ``release: false`` lets a rule
declare matching commits as not releasable. Otherwise the default rules
apply. The classification of a commit set is the highest over its commits.
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Literal

from relpipe.core.result import Err, Ok, Result
from relpipe.core.structured import as_obj_list, as_str_dict
from relpipe.release.commits import ParsedCommit
from relpipe.release.model import ReleaseType, highest

__all__ = ["DEFAULT_RULES", "ReleaseRule", "classify", "classify_commit", "parse_release_rules"]

RuleRelease = ReleaseType | Literal[False]

_RULE_KEYS = frozenset({"type", "scope", "subject", "breaking", "revert", "release"})
_RELEASE_LEVELS: frozenset[str] = frozenset({"patch", "minor", "major"})


@dataclass(frozen=True, slots=True)
class ReleaseRule:
    """One ``{type?, scope?, subject?, breaking?, revert?, release}`` entry.

    Unset matchers match anything. ``breaking``/``revert`` only constrain
    when True. ``type``, ``scope`` and ``subject`` accept shell-style globs.
    """

    release: RuleRelease
    type: str | None = None
    scope: str | None = None
    subject: str | None = None
    breaking: bool = False
    revert: bool = False

    def matches(self, parsed: ParsedCommit) -> bool:
        if self.breaking and not parsed.breaking:
            return False
        if self.revert and not parsed.revert:
            return False
        if self.type is not None and (parsed.type is None or not fnmatchcase(parsed.type, self.type)):
            return False
        if self.scope is not None and (
            parsed.scope is None or not fnmatchcase(parsed.scope, self.scope)
        ):
            return False
        if self.subject is not None and not fnmatchcase(parsed.subject, self.subject):
            return False
        return True


DEFAULT_RULES: tuple[ReleaseRule, ...] = (
    ReleaseRule(release="major", breaking=True),
    ReleaseRule(release="patch", revert=True),
    ReleaseRule(release="minor", type="feat"),
    ReleaseRule(release="patch", type="fix"),
    ReleaseRule(release="patch", type="perf"),
)


def _parse_rule(entry: object, index: int) -> Result[ReleaseRule, str]:
    table = as_str_dict(entry)
    if table is None:
        return Err(f"releaseRules[{index}]: expected a table")

    unknown = sorted(set(table) - _RULE_KEYS)
    if unknown:
        return Err(f"releaseRules[{index}]: unknown keys: {', '.join(unknown)}")

    release = table.get("release")
    if release is not False and not (isinstance(release, str) and release in _RELEASE_LEVELS):
        return Err(f"releaseRules[{index}]: 'release' must be patch, minor, major or false")

    for key in ("type", "scope", "subject"):
        if key in table and not isinstance(table[key], str):
            return Err(f"releaseRules[{index}]: '{key}' must be a string")
    for key in ("breaking", "revert"):
        if key in table and not isinstance(table[key], bool):
            return Err(f"releaseRules[{index}]: '{key}' must be a boolean")

    kind = table.get("type")
    scope = table.get("scope")
    subject = table.get("subject")
    return Ok(
        ReleaseRule(
            release=release,  # type: ignore[arg-type]
            type=kind if isinstance(kind, str) else None,
            scope=scope if isinstance(scope, str) else None,
            subject=subject if isinstance(subject, str) else None,
            breaking=table.get("breaking") is True,
            revert=table.get("revert") is True,
        )
    )


def parse_release_rules(value: object) -> Result[tuple[ReleaseRule, ...], str]:
    entries = as_obj_list(value)
    if entries is None:
        return Err("releaseRules must be a list")

    rules: list[ReleaseRule] = []
    for i, entry in enumerate(entries):
        result = _parse_rule(entry, i)
        if isinstance(result, Err):
            return result
        rules.append(result.value)
    return Ok(tuple(rules))


def _level(rules: list[ReleaseRule]) -> ReleaseType:
    levels: list[ReleaseType] = [r.release for r in rules if r.release is not False]
    return highest(levels)


def classify_commit(parsed: ParsedCommit, custom: tuple[ReleaseRule, ...] = ()) -> ReleaseType:
    matched = [r for r in custom if r.matches(parsed)]
    if matched:
        return _level(matched)
    return _level([r for r in DEFAULT_RULES if r.matches(parsed)])


def classify(commits: list[ParsedCommit], custom: tuple[ReleaseRule, ...] = ()) -> ReleaseType:
    return highest([classify_commit(c, custom) for c in commits])
