from __future__ import annotations

from dataclasses import dataclass

from relpipe.core.config import ConfigError
from relpipe.core.result import Err, Ok, Result
from relpipe.core.structured import StrDict, get_bool, get_str, get_str_list
from relpipe.output.console import ConsoleProtocol, Style
from relpipe.release import gh
from relpipe.release.context import ReleaseContext
from relpipe.release.errors import ReleaseError
from relpipe.release.model import PublishedRelease
from relpipe.release.runner import PROCEED, StageSignal


@dataclass(frozen=True, slots=True)
class GitHubPublisher:
    """Publish the release notes as a GitHub release through the gh CLI."""

    repo: str | None = None
    draft: bool = False
    assets: tuple[str, ...] = ()
    name: str = "github"
    side_effects: bool = True

    @classmethod
    def from_options(cls, options: StrDict) -> Result[GitHubPublisher, ConfigError]:
        if "draftRelease" in options and get_bool(options, "draftRelease") is None:
            return Err(ConfigError("github: 'draftRelease' must be a boolean"))
        assets: list[str] = []
        if "assets" in options:
            parsed = get_str_list(options, "assets")
            if parsed is None:
                return Err(ConfigError("github: 'assets' must be a list of paths"))
            assets = parsed
        repo = get_str(options, "repo")
        if repo is not None and repo.count("/") != 1:
            return Err(ConfigError(f"github: 'repo' must be owner/name, got '{repo}'"))
        return Ok(
            cls(
                repo=repo,
                draft=get_bool(options, "draftRelease") or False,
                assets=tuple(assets),
            )
        )

    def _slug(self, context: ReleaseContext) -> str | None:
        return self.repo or context.repo_slug

    def verify(self, context: ReleaseContext) -> Result[None, ReleaseError]:
        if self._slug(context) is None:
            return Err(
                ReleaseError(
                    kind="verify_failed",
                    message="github: cannot determine the GitHub repository",
                    hint="Set the origin remote to a github.com URL or configure 'repo'",
                )
            )
        for asset in self.assets:
            if not (context.cwd / asset).is_file():
                return Err(
                    ReleaseError(
                        kind="verify_failed",
                        message=f"github: asset not found: {asset}",
                        hint=str(context.cwd / asset),
                    )
                )
        available = gh.ensure_gh_available()
        if isinstance(available, Err):
            return available
        return gh.ensure_gh_auth(cwd=context.cwd)

    def run(
        self, context: ReleaseContext, console: ConsoleProtocol
    ) -> Result[StageSignal, ReleaseError]:
        next_release = context.next_release
        slug = self._slug(context)
        if next_release is None or slug is None:
            return Err(
                ReleaseError(
                    kind="stage_failed",
                    message="nothing to publish",
                    hint="commit-analyzer must come before github",
                )
            )

        console.print(f"gh release create {next_release.git_tag} --repo {slug}", Style.DIM)
        result = gh.create_release(
            cwd=context.cwd,
            repo=slug,
            tag=next_release.git_tag,
            target=context.branch,
            notes=next_release.notes,
            draft=self.draft,
            assets=list(self.assets),
        )
        if isinstance(result, Err):
            return result

        context.releases.append(PublishedRelease(name="GitHub release", url=result.value))
        console.success(f"published {result.value}")
        return Ok(PROCEED)
