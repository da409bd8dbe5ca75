"""Release pipeline.

- context / model / semver: the data threaded through a run
- commits / rules: commit grammar and release classification
- runner: ordered stage execution
- plugins: built-in stages (commit-analyzer, release-notes-generator,
  github, exec, git)
- service: repository inspection and pipeline assembly
"""

from __future__ import annotations
