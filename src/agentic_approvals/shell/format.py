"""Human-readable rendering of command vectors."""

import shlex
from collections.abc import Sequence

from agentic_approvals.constants import SHELL_INTERPRETER, SHELL_INTERPRETER_FLAG


def format_command_for_display(cmd: Sequence[str]) -> str:
    """Render a command vector for display in the approval UI.

    ["bash", "-lc", line] is shown as the inner line; any other vector is
    joined with POSIX shell quoting.
    """
    if (
        len(cmd) == 3
        and cmd[0] == SHELL_INTERPRETER
        and cmd[1] == SHELL_INTERPRETER_FLAG
        and isinstance(cmd[2], str)
    ):
        return cmd[2]
    return shlex.join(cmd)
