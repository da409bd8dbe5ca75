from __future__ import annotations

from relpipe.core.config import DEFAULT_PLUGINS, PluginSpec
from relpipe.core.result import Err, Ok
from relpipe.release.plugins import PLUGINS, build_stages


def test_default_plugins_build_in_order() -> None:
    result = build_stages(DEFAULT_PLUGINS)
    assert isinstance(result, Ok)
    assert [s.name for s in result.value] == [
        "commit-analyzer",
        "release-notes-generator",
        "github",
        "exec",
        "git",
    ]
    assert [s.side_effects for s in result.value] == [False, False, True, True, True]


def test_every_registered_plugin_has_a_matching_stage_name() -> None:
    options = {"exec": {"prepareCmd": "true"}}
    for name in PLUGINS:
        result = build_stages((PluginSpec(name, dict(options.get(name, {}))),))
        assert isinstance(result, Ok), name
        assert result.value[0].name == name


def test_unknown_plugin() -> None:
    result = build_stages((PluginSpec("npm"),))
    assert isinstance(result, Err)
    assert "unknown plugin 'npm'" in result.error.message


def test_invalid_options_propagate() -> None:
    result = build_stages((PluginSpec("commit-analyzer", {"preset": "nope"}),))
    assert isinstance(result, Err)
    assert result.error.message.startswith("commit-analyzer:")
