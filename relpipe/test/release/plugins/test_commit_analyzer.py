from __future__ import annotations

from pathlib import Path

import pytest

from relpipe.core.result import Err, Ok
from relpipe.output.console import MockConsole
from relpipe.release.context import LastRelease, ReleaseContext
from relpipe.release.model import Commit
from relpipe.release.plugins.commit_analyzer import CommitAnalyzer
from relpipe.release.runner import PROCEED, NoReleaseNeeded
from relpipe.release.semver import SemVer

CONFIGURED = {"preset": "angular", "releaseRules": [{"breaking": True, "release": "minor"}]}


def _analyzer(options: dict[str, object] | None = None) -> CommitAnalyzer:
    result = CommitAnalyzer.from_options(dict(CONFIGURED if options is None else options))
    assert isinstance(result, Ok)
    return result.value


def _ctx(tmp_path: Path, messages: list[str], *, last: str | None = "2.2.1") -> ReleaseContext:
    last_release = None
    if last is not None:
        major, minor, patch = (int(x) for x in last.split("."))
        last_release = LastRelease(version=SemVer(major, minor, patch), git_tag=f"v{last}")
    return ReleaseContext(
        cwd=tmp_path,
        branch="main",
        last_release=last_release,
        commits=[Commit(sha=f"{i:040x}", message=m) for i, m in enumerate(messages)],
    )


class TestFromOptions:
    def test_defaults_to_angular(self) -> None:
        analyzer = _analyzer({})
        assert analyzer.grammar.name == "angular"
        assert analyzer.release_rules == ()

    def test_unknown_preset(self) -> None:
        result = CommitAnalyzer.from_options({"preset": "eslint"})
        assert isinstance(result, Err)
        assert "unknown preset" in result.error.message

    def test_invalid_rules(self) -> None:
        result = CommitAnalyzer.from_options({"releaseRules": [{"release": "giant"}]})
        assert isinstance(result, Err)
        assert result.error.message.startswith("commit-analyzer:")


class TestRun:
    def test_empty_commit_set_is_no_release(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, [])
        result = _analyzer().run(ctx, MockConsole())
        assert isinstance(result, Ok)
        assert isinstance(result.value, NoReleaseNeeded)
        assert ctx.next_release is None

    def test_only_irrelevant_commits_is_no_release(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ["docs: readme", "chore: deps"])
        result = _analyzer().run(ctx, MockConsole())
        assert isinstance(result, Ok)
        assert isinstance(result.value, NoReleaseNeeded)
        assert ctx.release_type == "none"

    def test_patch_release(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ["fix: crash", "docs: readme"])
        result = _analyzer().run(ctx, MockConsole())
        assert result == Ok(PROCEED)
        assert ctx.release_type == "patch"
        assert ctx.next_release is not None
        assert str(ctx.next_release.version) == "2.2.2"
        assert ctx.next_release.git_tag == "v2.2.2"
        assert len(ctx.parsed_commits) == 2

    def test_breaking_change_is_minor_with_configured_rule(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ["feat(api): drop v1\n\nBREAKING CHANGE: v1 removed", "fix: x"])
        _analyzer().run(ctx, MockConsole())
        assert ctx.release_type == "minor"
        assert ctx.next_release is not None
        assert str(ctx.next_release.version) == "2.3.0"

    def test_breaking_change_is_major_without_override(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ["feat(api): drop v1\n\nBREAKING CHANGE: v1 removed"])
        _analyzer({"preset": "angular"}).run(ctx, MockConsole())
        assert ctx.release_type == "major"
        assert ctx.next_release is not None
        assert str(ctx.next_release.version) == "3.0.0"

    def test_first_release_is_1_0_0(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ["fix: initial"], last=None)
        _analyzer().run(ctx, MockConsole())
        assert ctx.next_release is not None
        assert str(ctx.next_release.version) == "1.0.0"

    def test_custom_tag_format(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ["feat: x"])
        ctx.tag_format = "release-${version}"
        _analyzer().run(ctx, MockConsole())
        assert ctx.next_release is not None
        assert ctx.next_release.git_tag == "release-2.3.0"

    def test_skipped_commits_are_ignored(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ["feat: experimental [skip release]", "fix: real"])
        _analyzer().run(ctx, MockConsole())
        assert ctx.release_type == "patch"
        assert [p.subject for p in ctx.parsed_commits] == ["real"]

    @pytest.mark.parametrize("preset", ["angular", "conventionalcommits"])
    def test_presets_classify_features(self, tmp_path: Path, preset: str) -> None:
        ctx = _ctx(tmp_path, ["feat: x"])
        _analyzer({"preset": preset}).run(ctx, MockConsole())
        assert ctx.release_type == "minor"
