"""Exit codes for the relpub command line.

Only two codes are owned by relpub itself. Failures of the external tools
(``gh``, ``git``) propagate the tool's own non-zero status, see
:func:`exit_code_for`.
"""

from enum import IntEnum

__all__ = ["ErrorCode", "exit_code_for"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: Failure (bad input, missing tool, or a remote call without a usable status)
    """

    OK = 0
    FAILURE = 1

    def __str__(self) -> str:
        return self.name.lower()


def exit_code_for(returncode: int | None) -> int:
    """Map an external tool's status onto a process exit code.

    Spawn failures and timeouts report ``-1``; those (and a missing status)
    collapse to :attr:`ErrorCode.FAILURE`.
    """
    if returncode is None or returncode <= 0:
        return int(ErrorCode.FAILURE)
    return returncode
