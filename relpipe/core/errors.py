"""Process exit codes.

A failed release always ends the process with a non-zero code; the value
tells CI scripts which kind of failure stopped the pipeline.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for relpipe commands.

    These values are part of the command line contract and must stay stable:
    - 0: Success, including "no release necessary"
    - 1: User error (invalid config, bad template, bad arguments)
    - 2: Environment error (missing tool, missing credentials, verify failed)
    - 3: Stage failure (a pipeline stage reported a fatal error)
    - 4: Network error (publishing to the remote failed)
    - 5: I/O error (file not found, permission denied)
    - 6: External tool failure (a configured command exited non-zero)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    STAGE_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    EXTERNAL_ERROR = 6

