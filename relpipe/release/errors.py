from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "config_invalid",
    "template_invalid",
    "verify_failed",
    "stage_failed",
    "external_tool_failed",
    "git_failed",
    "gh_missing",
    "gh_auth_required",
    "publish_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Fatal error reported by a stage or by release preparation.

    ``kind`` drives the process exit code; ``hint`` usually carries the
    stderr of the failing tool or a suggested fix.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
