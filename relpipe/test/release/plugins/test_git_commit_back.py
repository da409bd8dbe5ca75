from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path

from relpipe.core.result import Err, Ok
from relpipe.output.console import MockConsole
from relpipe.release.context import LastRelease, NextRelease, ReleaseContext
from relpipe.release.plugins.git import GitCommitBack, expand_assets, parse_assets
from relpipe.release.runner import PROCEED
from relpipe.release.semver import SemVer

CommitMaker = Callable[..., str]
GitRunner = Callable[..., str]

POM = "<project><version>2.2.1</version></project>\n"
FIRST_RELEASE_MESSAGE = "release ${nextRelease.version} (from ${lastRelease.version})"


def _ctx(repo: Path, *, first: bool = False) -> ReleaseContext:
    return ReleaseContext(
        cwd=repo,
        branch="main",
        last_release=None if first else LastRelease(version=SemVer(2, 2, 1), git_tag="v2.2.1"),
        next_release=NextRelease(
            version=SemVer(2, 3, 0), git_tag="v2.3.0", type="minor", notes="## 2.3.0\n"
        ),
    )


def _stage(options: dict[str, object]) -> GitCommitBack:
    result = GitCommitBack.from_options(options)
    assert isinstance(result, Ok)
    return result.value


class TestOptions:
    def test_defaults(self) -> None:
        stage = _stage({})
        assert stage.assets == ("CHANGELOG.md",)
        assert stage.push is True
        assert stage.tag is False

    def test_nested_asset_groups(self) -> None:
        assert parse_assets([["pom.xml"], "docs/*.md"]) == Ok(("pom.xml", "docs/*.md"))

    def test_invalid_assets(self) -> None:
        assert isinstance(parse_assets("pom.xml"), Err)
        assert isinstance(parse_assets([["pom.xml", 3]]), Err)

    def test_invalid_push(self) -> None:
        assert isinstance(GitCommitBack.from_options({"push": "yes"}), Err)

    def test_expand_assets(self, tmp_path: Path) -> None:
        (tmp_path / "docs").mkdir()
        (tmp_path / "docs" / "b.md").write_text("b")
        (tmp_path / "docs" / "a.md").write_text("a")
        assert expand_assets(tmp_path, ("pom.xml", "docs/*.md", "docs/a.md")) == [
            "pom.xml",
            "docs/a.md",
            "docs/b.md",
        ]

    def test_expand_directory_asset(self, tmp_path: Path) -> None:
        (tmp_path / "dist" / "lib").mkdir(parents=True)
        (tmp_path / "dist" / "lib" / "b.jar").write_text("b")
        (tmp_path / "dist" / "a.txt").write_text("a")
        assert expand_assets(tmp_path, ("dist",)) == ["dist/a.txt", "dist/lib/b.jar"]


class TestVerify:
    def test_ok_in_repository(self, git_repo: Path) -> None:
        assert _stage({}).verify(_ctx(git_repo)) == Ok(None)

    def test_not_a_repository(self, tmp_path: Path) -> None:
        result = _stage({}).verify(_ctx(tmp_path))
        assert isinstance(result, Err)
        assert result.error.kind == "verify_failed"

    def test_unknown_placeholder_in_message(self, git_repo: Path) -> None:
        result = _stage({"message": "release ${version}"}).verify(_ctx(git_repo))
        assert isinstance(result, Err)
        assert result.error.kind == "template_invalid"

    def test_unknown_release_field_rejected_before_release_is_computed(
        self, git_repo: Path
    ) -> None:
        context = ReleaseContext(cwd=git_repo, branch="main")
        result = _stage({"message": "release ${nextRelease.channel}"}).verify(context)
        assert isinstance(result, Err)
        assert result.error.kind == "template_invalid"

    def test_first_release_may_reference_last_release(self, git_repo: Path) -> None:
        context = _ctx(git_repo, first=True)
        stage = _stage({"message": FIRST_RELEASE_MESSAGE})
        assert stage.verify(context) == Ok(None)


class TestRun:
    def test_commits_changed_assets_with_configured_message(
        self, git_repo: Path, git: GitRunner, make_commit: CommitMaker
    ) -> None:
        make_commit("chore: init", {"pom.xml": POM, "README.md": "hi\n"})
        (git_repo / "pom.xml").write_text(POM.replace("2.2.1", "2.3.0"))
        (git_repo / "README.md").write_text("changed\n")
        stage = _stage(
            {"assets": [["pom.xml"]], "message": "release: ${nextRelease.version}", "push": False}
        )

        result = stage.run(_ctx(git_repo), MockConsole())

        assert result == Ok(PROCEED)
        assert git("log", "-1", "--format=%B").strip() == "release: 2.3.0"
        assert git("show", "--name-only", "--format=", "HEAD").split() == ["pom.xml"]
        assert git("status", "--porcelain").strip() == "M README.md"

    def test_nothing_changed_is_not_an_error(
        self, git_repo: Path, git: GitRunner, make_commit: CommitMaker
    ) -> None:
        head = make_commit("chore: init", {"pom.xml": POM})
        console = MockConsole()

        result = _stage({"assets": ["pom.xml"], "push": False}).run(_ctx(git_repo), console)

        assert result == Ok(PROCEED)
        assert git("rev-parse", "HEAD").strip() == head
        assert console.find("nothing to commit")

    def test_tag_option_creates_annotated_tag(
        self, git_repo: Path, git: GitRunner, make_commit: CommitMaker
    ) -> None:
        make_commit("chore: init")

        _stage({"tag": True, "push": False}).run(_ctx(git_repo), MockConsole())

        assert git("tag", "--list").split() == ["v2.3.0"]
        assert git("cat-file", "-t", "v2.3.0").strip() == "tag"

    def test_pushes_release_commit_to_branch(
        self, tmp_path: Path, git_repo: Path, git: GitRunner, make_commit: CommitMaker
    ) -> None:
        remote = tmp_path / "remote.git"
        subprocess.run(["git", "init", "-q", "--bare", str(remote)], check=True)
        git("remote", "add", "origin", str(remote))
        make_commit("chore: init", {"pom.xml": POM})
        git("push", "-q", "origin", "main")
        (git_repo / "pom.xml").write_text(POM.replace("2.2.1", "2.3.0"))

        result = _stage({"assets": ["pom.xml"]}).run(_ctx(git_repo), MockConsole())

        assert result == Ok(PROCEED)
        local = git("rev-parse", "HEAD").strip()
        pushed = subprocess.run(
            ["git", "--git-dir", str(remote), "rev-parse", "refs/heads/main"],
            check=True,
            capture_output=True,
            text=True,
        ).stdout.strip()
        assert pushed == local

    def test_push_failure_is_git_failed(self, git_repo: Path, make_commit: CommitMaker) -> None:
        make_commit("chore: init", {"pom.xml": POM})
        (git_repo / "pom.xml").write_text("changed\n")

        result = _stage({"assets": ["pom.xml"]}).run(_ctx(git_repo), MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "git_failed"
        assert result.error.message == "git push failed"

    def test_first_release_renders_empty_last_release(
        self, git_repo: Path, git: GitRunner, make_commit: CommitMaker
    ) -> None:
        make_commit("chore: init", {"pom.xml": POM})
        (git_repo / "pom.xml").write_text(POM.replace("2.2.1", "2.3.0"))
        stage = _stage({"assets": ["pom.xml"], "message": FIRST_RELEASE_MESSAGE, "push": False})

        result = stage.run(_ctx(git_repo, first=True), MockConsole())

        assert result == Ok(PROCEED)
        assert git("log", "-1", "--format=%B").strip() == "release 2.3.0 (from )"

    def test_directory_asset_commits_files_beneath_it(
        self, git_repo: Path, git: GitRunner, make_commit: CommitMaker
    ) -> None:
        make_commit("chore: init", {"dist/old.txt": "old\n"})
        (git_repo / "dist" / "old.txt").write_text("new\n")
        (git_repo / "dist" / "a.txt").write_text("a\n")
        stage = _stage(
            {"assets": ["dist"], "message": "release: ${nextRelease.version}", "push": False}
        )

        result = stage.run(_ctx(git_repo), MockConsole())

        assert result == Ok(PROCEED)
        assert sorted(git("show", "--name-only", "--format=", "HEAD").split()) == [
            "dist/a.txt",
            "dist/old.txt",
        ]
        assert git("status", "--porcelain").strip() == ""
