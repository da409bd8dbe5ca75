"""Result type used at every fallible boundary of relpipe.

Adapters (git, gh, subprocess, config) never raise for expected failures.
They return ``Ok(value)`` or ``Err(error)`` and callers branch with
``isinstance`` or structural pattern matching:

    match load_release_config(cwd):
        case Ok(config):
            ...
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful outcome carrying ``value``."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed outcome carrying ``error``."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
