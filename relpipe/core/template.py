"""``${dotted.path}`` template rendering for plugin options.

Commands and commit messages reference release data with placeholders such
as ``${nextRelease.version}``. Placeholders resolve against a nested mapping;
an unknown placeholder is an error rather than being left in the output.
A bare ``$NAME`` (no braces) is left untouched so shell-style text survives.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from .result import Err, Ok, Result

__all__ = ["TemplateError", "render"]

_PLACEHOLDER_RE = re.compile(r"\$\{\s*([^{}]*?)\s*\}")
_PATH_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


@dataclass(frozen=True, slots=True)
class TemplateError:
    """A placeholder could not be substituted."""

    template: str
    placeholder: str
    message: str


def _lookup(values: Mapping[str, object], path: str) -> object | None:
    current: object = values
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        if part not in current:
            return None
        current = current[part]
    return current


def render(template: str, values: Mapping[str, object]) -> Result[str, TemplateError]:
    """Substitute every ``${path}`` in ``template`` from ``values``.

    Args:
        template: Text containing zero or more placeholders.
        values: Nested mapping; ``a.b`` reads ``values["a"]["b"]``.

    Returns:
        Ok(rendered) when every placeholder resolves to a scalar,
        Err(TemplateError) for the first one that does not.
    """
    out: list[str] = []
    pos = 0
    for match in _PLACEHOLDER_RE.finditer(template):
        path = match.group(1)
        if not _PATH_RE.match(path):
            return Err(TemplateError(template, path, f"invalid placeholder: ${{{path}}}"))

        value = _lookup(values, path)
        if value is None:
            return Err(TemplateError(template, path, f"unknown placeholder: ${{{path}}}"))
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return Err(TemplateError(template, path, f"placeholder is not a scalar: ${{{path}}}"))

        out.append(template[pos : match.start()])
        out.append(str(value))
        pos = match.end()

    out.append(template[pos:])
    return Ok("".join(out))
