"""Commit message grammars.

A preset decides how a commit header is split into type, scope and subject
and how breaking changes are announced:

- ``angular``: ``type(scope): subject``; breaking changes only through a
  ``BREAKING CHANGE:`` (or ``BREAKING CHANGES:``) note in the body.
- ``conventionalcommits``: the angular grammar plus ``type(scope)!: subject``
  and the ``BREAKING-CHANGE:`` note spelling.

Reverts are recognised in both presets, either as a ``revert:`` typed header
or as git's own ``Revert "..."`` subject.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from relpipe.release.model import Commit

__all__ = ["PRESETS", "CommitGrammar", "ParsedCommit", "is_skipped", "parse_commit"]

_SKIP_MARKERS = ("[skip release]", "[release skip]")


@dataclass(frozen=True, slots=True)
class CommitGrammar:
    name: str
    header: re.Pattern[str]
    note_keywords: tuple[str, ...]
    allow_bang: bool


@dataclass(frozen=True, slots=True)
class ParsedCommit:
    """A commit interpreted by a grammar.

    ``type`` is None when the header does not follow the grammar; such
    commits only count if they are reverts or carry breaking notes.
    """

    commit: Commit
    type: str | None
    scope: str | None
    subject: str
    notes: tuple[str, ...] = ()
    revert: bool = False

    @property
    def breaking(self) -> bool:
        return len(self.notes) > 0


PRESETS: dict[str, CommitGrammar] = {
    "angular": CommitGrammar(
        name="angular",
        header=re.compile(r"^(?P<type>\w*)(?:\((?P<scope>[^()]*)\))?: (?P<subject>.*)$"),
        note_keywords=("BREAKING CHANGE", "BREAKING CHANGES"),
        allow_bang=False,
    ),
    "conventionalcommits": CommitGrammar(
        name="conventionalcommits",
        header=re.compile(
            r"^(?P<type>\w*)(?:\((?P<scope>[^()]*)\))?(?P<bang>!)?: (?P<subject>.*)$"
        ),
        note_keywords=("BREAKING CHANGE", "BREAKING CHANGES", "BREAKING-CHANGE"),
        allow_bang=True,
    ),
}

_GIT_REVERT_RE = re.compile(r'^Revert "(?P<subject>.*)"$')


def is_skipped(commit: Commit) -> bool:
    """True when the message opts out of release analysis."""
    lowered = commit.message.lower()
    return any(marker in lowered for marker in _SKIP_MARKERS)


def _parse_notes(body: str, keywords: tuple[str, ...]) -> list[str]:
    pattern = re.compile(
        r"^(?:" + "|".join(re.escape(k) for k in keywords) + r"):[ \t]*",
        re.MULTILINE,
    )
    matches = list(pattern.finditer(body))
    notes: list[str] = []
    for i, m in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(body)
        text = body[m.end() : end].strip()
        if text:
            notes.append(text)
    return notes


def parse_commit(commit: Commit, grammar: CommitGrammar) -> ParsedCommit:
    header, _, body = commit.message.partition("\n")
    header = header.strip()
    notes = _parse_notes(body, grammar.note_keywords)

    git_revert = _GIT_REVERT_RE.match(header)
    if git_revert is not None:
        return ParsedCommit(
            commit=commit,
            type="revert",
            scope=None,
            subject=git_revert.group("subject"),
            notes=tuple(notes),
            revert=True,
        )

    m = grammar.header.match(header)
    if m is None:
        return ParsedCommit(commit=commit, type=None, scope=None, subject=header, notes=tuple(notes))

    kind = m.group("type") or None
    subject = m.group("subject").strip()
    if grammar.allow_bang and m.group("bang") and not notes:
        notes.append(subject)

    return ParsedCommit(
        commit=commit,
        type=kind,
        scope=m.group("scope") or None,
        subject=subject,
        notes=tuple(notes),
        revert=kind == "revert",
    )
