"""Ordered stage pipeline.

``run_pipeline`` drives a fixed list of stages over one ReleaseContext:

1. every stage's ``verify`` hook runs, in declared order, before anything
   else; a failure aborts with no side effects;
2. stages run strictly in declared order, each only after the previous one
   returned;
3. a stage either proceeds, signals that no release is necessary (success,
   remaining stages never run) or fails (remaining stages never run, the
   context keeps whatever the failing stage wrote).

Nothing is retried. In dry-run mode stages with side effects are reported
and skipped, so analysis and notes can be previewed safely.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from relpipe.core.result import Err, Result
from relpipe.output.console import ConsoleProtocol, Style
from relpipe.release.context import ReleaseContext
from relpipe.release.errors import ReleaseError

__all__ = [
    "PROCEED",
    "Failed",
    "NoRelease",
    "NoReleaseNeeded",
    "Outcome",
    "Proceed",
    "Released",
    "Stage",
    "StageSignal",
    "run_pipeline",
]


@dataclass(frozen=True, slots=True)
class Proceed:
    """Stage finished; hand the context to the next stage."""


@dataclass(frozen=True, slots=True)
class NoReleaseNeeded:
    """Stage decided there is nothing to release; stop successfully."""

    reason: str


type StageSignal = Proceed | NoReleaseNeeded

PROCEED = Proceed()


class Stage(Protocol):
    """One configured plugin.

    Attributes:
        name: Plugin name as configured (e.g. ``commit-analyzer``).
        side_effects: True if ``run`` changes anything outside the context.
    """

    name: str
    side_effects: bool

    def verify(self, context: ReleaseContext) -> Result[None, ReleaseError]: ...

    def run(
        self, context: ReleaseContext, console: ConsoleProtocol
    ) -> Result[StageSignal, ReleaseError]: ...


@dataclass(frozen=True, slots=True)
class Released:
    context: ReleaseContext


@dataclass(frozen=True, slots=True)
class NoRelease:
    context: ReleaseContext
    reason: str


@dataclass(frozen=True, slots=True)
class Failed:
    context: ReleaseContext
    stage: str
    error: ReleaseError


type Outcome = Released | NoRelease | Failed


def _fail(context: ReleaseContext, stage: str, error: ReleaseError) -> Failed:
    context.outcome = "failed"
    return Failed(context=context, stage=stage, error=error)


def _verify(
    stages: Sequence[Stage], context: ReleaseContext, console: ConsoleProtocol
) -> Failed | None:
    for stage in stages:
        if context.dry_run and stage.side_effects:
            continue
        result = stage.verify(context)
        if isinstance(result, Err):
            console.error(f"{stage.name}: verify failed")
            return _fail(context, stage.name, result.error)
    return None


def run_pipeline(
    stages: Sequence[Stage],
    context: ReleaseContext,
    console: ConsoleProtocol,
) -> Outcome:
    """Run ``stages`` in order over ``context``.

    Args:
        stages: Stage order is execution order; it is never changed here.
        context: Mutated in place; also carried by the returned outcome.
        console: Progress output.

    Returns:
        Released when every stage proceeded, NoRelease when a stage said
        there is nothing to release, Failed for the first fatal error.
    """
    failed = _verify(stages, context, console)
    if failed is not None:
        return failed

    total = len(stages)
    for index, stage in enumerate(stages, start=1):
        console.header(f"[{index}/{total}] {stage.name}")

        if context.dry_run and stage.side_effects:
            console.print("skipped (dry run)", Style.DIM)
            continue

        result = stage.run(context, console)
        if isinstance(result, Err):
            console.error(f"{stage.name}: {result.error.message}")
            return _fail(context, stage.name, result.error)

        match result.value:
            case NoReleaseNeeded(reason=reason):
                console.info(reason)
                context.outcome = "no_release"
                return NoRelease(context=context, reason=reason)
            case Proceed():
                pass

    context.outcome = "released"
    return Released(context=context)
