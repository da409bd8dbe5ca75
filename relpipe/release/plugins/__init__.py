"""Built-in pipeline plugins and the name -> stage factory registry."""

from __future__ import annotations

from collections.abc import Callable

from relpipe.core.config import ConfigError, PluginSpec
from relpipe.core.result import Err, Ok, Result
from relpipe.core.structured import StrDict
from relpipe.release.plugins.commit_analyzer import CommitAnalyzer
from relpipe.release.plugins.exec import ExecStage
from relpipe.release.plugins.git import GitCommitBack
from relpipe.release.plugins.github import GitHubPublisher
from relpipe.release.plugins.notes_generator import ReleaseNotesGenerator
from relpipe.release.runner import Stage

__all__ = [
    "PLUGINS",
    "CommitAnalyzer",
    "ExecStage",
    "GitCommitBack",
    "GitHubPublisher",
    "ReleaseNotesGenerator",
    "build_stages",
]

StageFactory = Callable[[StrDict], Result[Stage, ConfigError]]

PLUGINS: dict[str, StageFactory] = {
    "commit-analyzer": CommitAnalyzer.from_options,
    "release-notes-generator": ReleaseNotesGenerator.from_options,
    "github": GitHubPublisher.from_options,
    "exec": ExecStage.from_options,
    "git": GitCommitBack.from_options,
}


def build_stages(specs: tuple[PluginSpec, ...]) -> Result[list[Stage], ConfigError]:
    """Instantiate configured plugins, preserving their order."""
    stages: list[Stage] = []
    for spec in specs:
        factory = PLUGINS.get(spec.name)
        if factory is None:
            known = ", ".join(PLUGINS)
            return Err(ConfigError(f"unknown plugin '{spec.name}' (known: {known})"))
        result = factory(spec.options)
        if isinstance(result, Err):
            return result
        stages.append(result.value)
    return Ok(stages)
