"""Command classifier deciding whether a flat command is safe to auto-run.

Only commands positively known to be read-only get a SafeCommandReason.
Anything else, including unknown programs and known programs used with
flags that write files or run other programs, gets None and goes to
human review.
"""

import re
import shlex
from collections.abc import Sequence

from agentic_approvals.shell.config import ShellApprovalConfig
from agentic_approvals.shell.models import SafeCommandReason

# Commands safe with any arguments
SAFE_COMMANDS: dict[str, SafeCommandReason] = {
    "cd": SafeCommandReason("Change directory", "Navigating"),
    "pwd": SafeCommandReason("Print working directory", "Navigating"),
    "ls": SafeCommandReason("List directory", "Searching"),
    "which": SafeCommandReason("Locate executable", "Searching"),
    "grep": SafeCommandReason("Text search (grep)", "Searching"),
    "cat": SafeCommandReason("View file contents", "Reading files"),
    "nl": SafeCommandReason("View file with line numbers", "Reading files"),
    "head": SafeCommandReason("Show file head", "Reading files"),
    "tail": SafeCommandReason("Show file tail", "Reading files"),
    "wc": SafeCommandReason("Word count", "Reading files"),
    "echo": SafeCommandReason("Echo string", "Printing"),
    "true": SafeCommandReason("No-op (true)", "Utility"),
}

# find options that delete files, write files or run other programs
UNSAFE_FIND_OPTIONS: frozenset[str] = frozenset(
    {
        "-exec",
        "-execdir",
        "-ok",
        "-okdir",
        "-delete",
        "-fls",
        "-fprint",
        "-fprint0",
        "-fprintf",
    }
)

# ripgrep options that run other programs or decompressors
UNSAFE_RIPGREP_OPTIONS: frozenset[str] = frozenset(
    {
        "--pre",
        "--hostname-bin",
        "--search-zip",
    }
)

# Short forms of the above; may be clustered, e.g. -uz
UNSAFE_RIPGREP_SHORT_FLAGS: frozenset[str] = frozenset({"z"})

GIT_SAFE_SUBCOMMANDS: dict[str, SafeCommandReason] = {
    "status": SafeCommandReason("Git status", "Versioning"),
    "log": SafeCommandReason("Git log", "Versioning"),
    "diff": SafeCommandReason("Git diff", "Versioning"),
    "show": SafeCommandReason("Git show", "Versioning"),
    "branch": SafeCommandReason("List Git branches", "Versioning"),
}

# Any other argument to "git branch" creates, moves or deletes a branch
GIT_BRANCH_LIST_FLAGS: frozenset[str] = frozenset(
    {
        "-a",
        "--all",
        "-r",
        "--remotes",
        "-v",
        "-vv",
        "--verbose",
        "--show-current",
        "--no-color",
    }
)

# sed -n "<N>p" or "<N>,<M>p"
_SED_PRINT_RANGE = re.compile(r"^(\d+,)?\d+p$")


class CommandClassifier:
    """Single-command oracle for auto-approval.

    User-configured deny rules win over everything; user allow rules win
    over the built-in rules.
    """

    def __init__(self, config: ShellApprovalConfig | None = None):
        """Initialize classifier with optional config.

        Args:
            config: Optional ShellApprovalConfig for custom rules.
        """
        self.config = config

        self._user_allow = set(config.allow_commands) if config else set()
        self._user_deny = set(config.deny_commands) if config else set()
        self._user_allow_patterns = (
            [re.compile(p) for p in config.allow_patterns] if config else []
        )
        self._user_deny_patterns = (
            [re.compile(p) for p in config.deny_patterns] if config else []
        )

    def __call__(self, cmd: Sequence[str]) -> SafeCommandReason | None:
        return self.is_safe_command(cmd)

    def is_safe_command(self, cmd: Sequence[str]) -> SafeCommandReason | None:
        """Classify a flat command vector.

        Args:
            cmd: argv-style command, program name first.

        Returns:
            SafeCommandReason if the command may run without review,
            otherwise None.
        """
        if not cmd:
            return None

        program = cmd[0]
        raw = shlex.join(cmd)

        if program in self._user_deny:
            return None
        if any(pattern.search(raw) for pattern in self._user_deny_patterns):
            return None

        if program in self._user_allow:
            return SafeCommandReason(f"'{program}' is in user allow list", "User allowed")
        for pattern in self._user_allow_patterns:
            if pattern.search(raw):
                return SafeCommandReason(
                    f"Matches user allow pattern '{pattern.pattern}'", "User allowed"
                )

        return self._classify_builtin(cmd)

    def _classify_builtin(self, cmd: Sequence[str]) -> SafeCommandReason | None:
        program, args = cmd[0], list(cmd[1:])

        if program in SAFE_COMMANDS:
            return SAFE_COMMANDS[program]

        if program == "find":
            if any(arg in UNSAFE_FIND_OPTIONS for arg in args):
                return None
            return SafeCommandReason("Find files", "Searching")

        if program == "rg":
            if any(_is_unsafe_ripgrep_arg(arg) for arg in args):
                return None
            return SafeCommandReason("Ripgrep search", "Searching")

        if program == "git":
            return self._classify_git(args)

        if program == "sed":
            if (
                len(args) == 3
                and args[0] == "-n"
                and _SED_PRINT_RANGE.match(args[1])
            ):
                return SafeCommandReason("Sed print subset", "Reading files")
            return None

        if program == "cargo" and args[:1] == ["check"]:
            return SafeCommandReason("Cargo check", "Building")

        return None

    def _classify_git(self, args: list[str]) -> SafeCommandReason | None:
        """Classify git commands based on subcommand."""
        if not args:
            return None

        subcommand = args[0]
        reason = GIT_SAFE_SUBCOMMANDS.get(subcommand)
        if reason is None:
            return None

        if subcommand == "branch" and any(
            arg not in GIT_BRANCH_LIST_FLAGS for arg in args[1:]
        ):
            return None

        # --output=<file> writes the result to disk
        if any(arg.startswith("--output") for arg in args[1:]):
            return None

        return reason


def _is_unsafe_ripgrep_arg(arg: str) -> bool:
    if arg.startswith("--"):
        # --pre=cmd and --hostname-bin=cmd forms
        return arg.split("=", 1)[0] in UNSAFE_RIPGREP_OPTIONS
    if arg.startswith("-"):
        return any(flag in UNSAFE_RIPGREP_SHORT_FLAGS for flag in arg[1:])
    return False
