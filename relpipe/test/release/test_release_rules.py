from __future__ import annotations

import itertools

import pytest

from relpipe.core.result import Err, Ok
from relpipe.release.commits import PRESETS, ParsedCommit, parse_commit
from relpipe.release.model import Commit
from relpipe.release.rules import ReleaseRule, classify, classify_commit, parse_release_rules

ANGULAR = PRESETS["angular"]
BREAKING_AS_MINOR = (ReleaseRule(release="minor", breaking=True),)


def _p(message: str) -> ParsedCommit:
    return parse_commit(Commit(sha="b" * 40, message=message), ANGULAR)


class TestDefaultRules:
    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("feat: x", "minor"),
            ("fix: x", "patch"),
            ("perf: x", "patch"),
            ("revert: feat: x", "patch"),
            ("docs: x", "none"),
            ("chore(deps): bump", "none"),
            ("Update README", "none"),
            ("feat: x\n\nBREAKING CHANGE: y", "major"),
            ("docs: x\n\nBREAKING CHANGE: y", "major"),
        ],
    )
    def test_classify_commit(self, message: str, expected: str) -> None:
        assert classify_commit(_p(message)) == expected

    def test_highest_wins(self) -> None:
        assert classify([_p("fix: a"), _p("feat: b"), _p("docs: c")]) == "minor"

    def test_empty_is_none(self) -> None:
        assert classify([]) == "none"


class TestConfiguredBreakingOverride:
    def test_breaking_feature_is_minor(self) -> None:
        parsed = _p("feat(api): drop v1\n\nBREAKING CHANGE: removed")
        assert classify_commit(parsed, BREAKING_AS_MINOR) == "minor"

    def test_breaking_fix_is_minor(self) -> None:
        parsed = _p("fix: x\n\nBREAKING CHANGE: removed")
        assert classify_commit(parsed, BREAKING_AS_MINOR) == "minor"

    def test_non_breaking_commits_keep_defaults(self) -> None:
        assert classify_commit(_p("fix: x"), BREAKING_AS_MINOR) == "patch"
        assert classify_commit(_p("feat: x"), BREAKING_AS_MINOR) == "minor"

    def test_any_set_with_breaking_commit_is_minor_never_major(self) -> None:
        pool = [
            "fix: a",
            "feat: b",
            "perf: c",
            "docs: d",
            "revert: e",
            "feat(x): f\n\nBREAKING CHANGE: g",
            "chore: h\n\nBREAKING CHANGES: i",
        ]
        breaking = [m for m in pool if "BREAKING" in m]
        for size in range(1, 4):
            for combo in itertools.combinations(pool, size):
                commits = [_p(m) for m in combo]
                result = classify(commits, BREAKING_AS_MINOR)
                assert result != "major"
                if any(m in breaking for m in combo):
                    assert result == "minor"

    def test_fix_only_sets_are_patch_or_none(self) -> None:
        pool = ["fix: a", "fix(core): b", "docs: c", "chore: d", "style: e", "test: f"]
        for size in range(0, 4):
            for combo in itertools.combinations(pool, size):
                result = classify([_p(m) for m in combo], BREAKING_AS_MINOR)
                assert result in {"patch", "none"}


class TestCustomRules:
    def test_custom_match_replaces_defaults(self) -> None:
        rules = (ReleaseRule(release="patch", type="feat", scope="docs*"),)
        assert classify_commit(_p("feat(docs-site): x"), rules) == "patch"
        assert classify_commit(_p("feat(core): x"), rules) == "minor"

    def test_release_false_suppresses(self) -> None:
        rules = (ReleaseRule(release=False, scope="no-release"),)
        assert classify_commit(_p("fix(no-release): x"), rules) == "none"

    def test_highest_custom_match(self) -> None:
        rules = (
            ReleaseRule(release="patch", type="refactor"),
            ReleaseRule(release="minor", scope="core"),
        )
        assert classify_commit(_p("refactor(core): x"), rules) == "minor"

    def test_revert_rule(self) -> None:
        rules = (ReleaseRule(release="minor", revert=True),)
        assert classify_commit(_p("revert: x"), rules) == "minor"
        assert classify_commit(_p("fix: x"), rules) == "patch"

    def test_subject_glob(self) -> None:
        rules = (ReleaseRule(release=False, subject="wip *"),)
        assert classify_commit(_p("feat: wip tweak docs"), rules) == "none"
        assert classify_commit(_p("feat: tweak docs"), rules) == "minor"


class TestParseReleaseRules:
    def test_configured_rules(self) -> None:
        result = parse_release_rules([{"breaking": True, "release": "minor"}])
        assert result == Ok(BREAKING_AS_MINOR)

    def test_subject_rule(self) -> None:
        result = parse_release_rules([{"subject": "*hotfix*", "release": "patch"}])
        assert result == Ok((ReleaseRule(release="patch", subject="*hotfix*"),))

    def test_full_rule(self) -> None:
        result = parse_release_rules(
            [{"type": "docs", "scope": "README", "release": "patch"}, {"release": False}]
        )
        assert result == Ok(
            (
                ReleaseRule(release="patch", type="docs", scope="README"),
                ReleaseRule(release=False),
            )
        )

    @pytest.mark.parametrize(
        "value",
        [
            "nope",
            ["nope"],
            [{"release": "huge"}],
            [{"release": True}],
            [{"release": ["minor"]}],
            [{"breaking": "yes", "release": "minor"}],
            [{"type": 1, "release": "minor"}],
            [{"subject": 1, "release": "minor"}],
            [{"footer": "x", "release": "minor"}],
        ],
    )
    def test_invalid(self, value: object) -> None:
        assert isinstance(parse_release_rules(value), Err)
