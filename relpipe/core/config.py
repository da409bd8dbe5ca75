"""Typed release configuration loading.

Configuration is looked up in the repository root, first match wins:

- ``release.toml`` (root table)
- ``pyproject.toml`` (``[tool.relpipe]`` table, skipped when absent)
- ``.releaserc.json`` (root object)

Without any of them the built-in defaults apply. They describe the classic
five-plugin setup: angular commit analysis with breaking changes capped at a
minor release, release notes, a GitHub release, a version bump script and a
commit of ``pom.xml`` back to the branch.

Example ``release.toml``::

    branches = ["main"]
    tagFormat = "v${version}"
    plugins = [
        ["commit-analyzer", { preset = "angular" }],
        "release-notes-generator",
        "github",
    ]
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_obj_list, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILES",
    "DEFAULT_BRANCHES",
    "DEFAULT_PLUGINS",
    "DEFAULT_TAG_FORMAT",
    "ConfigError",
    "PluginSpec",
    "ReleaseConfig",
    "load_release_config",
    "normalize_plugin_name",
    "parse_release_config",
]

CONFIG_FILES = ("release.toml", "pyproject.toml", ".releaserc.json")

_PLUGIN_PREFIX = "@semantic-release/"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when configuration cannot be loaded or is malformed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class PluginSpec:
    """One configured pipeline stage: plugin name plus its option map."""

    name: str
    options: StrDict = field(default_factory=dict)


def _default_plugins() -> tuple[PluginSpec, ...]:
    return (
        PluginSpec(
            "commit-analyzer",
            {
                "preset": "angular",
                "releaseRules": [{"breaking": True, "release": "minor"}],
            },
        ),
        PluginSpec("release-notes-generator"),
        PluginSpec("github"),
        PluginSpec("exec", {"prepareCmd": "bash ./bumpVersion.sh ${nextRelease.version}"}),
        PluginSpec(
            "git",
            {
                "assets": [["pom.xml"]],
                "message": "release: ${nextRelease.version}",
            },
        ),
    )


DEFAULT_BRANCHES: tuple[str, ...] = ("main", "master")
DEFAULT_TAG_FORMAT = "v${version}"
DEFAULT_PLUGINS: tuple[PluginSpec, ...] = _default_plugins()


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Resolved release configuration.

    Attributes:
        branches: Branch names a release may be cut from.
        tag_format: Git tag template; must contain ``${version}`` once.
        plugins: Ordered stage list; order is execution order.
        source: File the config was read from, None for built-in defaults.
    """

    branches: tuple[str, ...] = DEFAULT_BRANCHES
    tag_format: str = DEFAULT_TAG_FORMAT
    plugins: tuple[PluginSpec, ...] = DEFAULT_PLUGINS
    source: Path | None = None


def normalize_plugin_name(name: str) -> str:
    """Strip the upstream package scope: ``@semantic-release/git`` -> ``git``."""
    name = name.strip()
    if name.startswith(_PLUGIN_PREFIX):
        return name[len(_PLUGIN_PREFIX) :]
    return name


def _parse_plugin(entry: object, index: int) -> Result[PluginSpec, str]:
    if isinstance(entry, str):
        name = normalize_plugin_name(entry)
        if not name:
            return Err(f"plugins[{index}]: empty plugin name")
        return Ok(PluginSpec(name))

    items = as_obj_list(entry)
    if items is not None:
        if not 1 <= len(items) <= 2 or not isinstance(items[0], str):
            return Err(f"plugins[{index}]: expected [name] or [name, options]")
        name = normalize_plugin_name(items[0])
        if not name:
            return Err(f"plugins[{index}]: empty plugin name")
        if len(items) == 1:
            return Ok(PluginSpec(name))
        options = as_str_dict(items[1])
        if options is None:
            return Err(f"plugins[{index}]: options for '{name}' must be a table")
        return Ok(PluginSpec(name, dict(options)))

    table = as_str_dict(entry)
    if table is not None:
        raw_name = get_str(table, "name")
        if raw_name is None:
            return Err(f"plugins[{index}]: plugin table requires a 'name'")
        options = {k: v for k, v in table.items() if k != "name"}
        return Ok(PluginSpec(normalize_plugin_name(raw_name), options))

    return Err(f"plugins[{index}]: unsupported entry {entry!r}")


def parse_release_config(data: StrDict, *, source: Path | None = None) -> Result[ReleaseConfig, ConfigError]:
    """Validate a parsed config table and build a ReleaseConfig."""
    branches: tuple[str, ...] = DEFAULT_BRANCHES
    if "branches" in data:
        names = get_str_list(data, "branches")
        if not names:
            return Err(ConfigError("'branches' must be a non-empty list of strings", path=source))
        branches = tuple(n.strip() for n in names)

    tag_format = DEFAULT_TAG_FORMAT
    if "tagFormat" in data:
        raw = get_str(data, "tagFormat")
        if raw is None or raw.count("${version}") != 1:
            return Err(
                ConfigError("'tagFormat' must contain '${version}' exactly once", path=source)
            )
        tag_format = raw

    plugins: tuple[PluginSpec, ...] = DEFAULT_PLUGINS
    if "plugins" in data:
        entries = as_obj_list(data["plugins"])
        if entries is None:
            return Err(ConfigError("'plugins' must be a list", path=source))
        parsed: list[PluginSpec] = []
        for i, entry in enumerate(entries):
            result = _parse_plugin(entry, i)
            if isinstance(result, Err):
                return Err(ConfigError(result.error, path=source))
            parsed.append(result.value)
        plugins = tuple(parsed)

    return Ok(ReleaseConfig(branches=branches, tag_format=tag_format, plugins=plugins, source=source))


def _read_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a table", path=path))
    return Ok(data)


def _read_json(path: Path) -> Result[StrDict, ConfigError]:
    try:
        data_obj: object = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except json.JSONDecodeError as e:
        return Err(ConfigError(f"Invalid JSON syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be an object", path=path))
    return Ok(data)


def _read_config_table(path: Path) -> Result[StrDict | None, ConfigError]:
    """Read the relpipe table from ``path``; Ok(None) if pyproject has none."""
    if path.suffix == ".json":
        return _read_json(path)

    result = _read_toml(path)
    if isinstance(result, Err):
        return result
    if path.name != "pyproject.toml":
        return result

    tool = get_table(result.value, "tool") or {}
    return Ok(get_table(tool, "relpipe"))


def load_release_config(cwd: Path, path: Path | None = None) -> Result[ReleaseConfig, ConfigError]:
    """Load the release configuration.

    Args:
        cwd: Repository root searched for the known config files.
        path: Explicit config file; skips discovery when given.

    Returns:
        Ok(ReleaseConfig) on success (defaults when nothing is found),
        Err(ConfigError) when a file exists but is invalid.
    """
    if path is not None:
        table = _read_config_table(path)
        if isinstance(table, Err):
            return table
        if table.value is None:
            return Err(ConfigError("pyproject.toml has no [tool.relpipe] table", path=path))
        return parse_release_config(table.value, source=path)

    for name in CONFIG_FILES:
        candidate = cwd / name
        if not candidate.is_file():
            continue
        table = _read_config_table(candidate)
        if isinstance(table, Err):
            return table
        if table.value is None:
            continue
        return parse_release_config(table.value, source=candidate)

    return Ok(ReleaseConfig())
