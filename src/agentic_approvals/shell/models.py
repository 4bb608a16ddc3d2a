"""Data models for command review and auto-approval.

Provides dataclasses for execution requests and results, shell tokens,
oracle verdicts, and the review details handed to the approval flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class SafeCommandReason:
    """Why a flat command is considered safe to run without review."""

    reason: str  # e.g. "List directory"
    group: str  # e.g. "Searching"


@dataclass(frozen=True)
class ExecInput:
    """A command execution request extracted from a tool call."""

    cmd: tuple[str, ...]
    workdir: str | None = None
    timeout_in_millis: float | None = None


@dataclass(frozen=True)
class ExecOutputMetadata:
    """Metadata reported for a finished command execution."""

    exit_code: int
    duration_seconds: float


@dataclass(frozen=True)
class ExecOutput:
    """Decoded result of a finished command execution."""

    output: str
    metadata: ExecOutputMetadata

    @property
    def exit_code(self) -> int:
        return self.metadata.exit_code

    @property
    def duration_seconds(self) -> float:
        return self.metadata.duration_seconds


@dataclass(frozen=True)
class CommandReviewDetails:
    """Review record for one proposed command.

    auto_approval is None when the command requires human review.
    """

    cmd: tuple[str, ...]
    cmd_readable_text: str
    auto_approval: SafeCommandReason | None = None


# Shell tokens

@dataclass(frozen=True)
class Word:
    """A literal word after quote removal and expansion."""

    text: str


@dataclass(frozen=True)
class Operator:
    """A shell control or redirection operator, e.g. "&&" or ">"."""

    symbol: str


@dataclass(frozen=True)
class Glob:
    """A word subject to pathname or brace expansion (*, ?, [, {a,b}, {1..3})."""

    pattern: str


@dataclass(frozen=True)
class Comment:
    """An unquoted # comment running to the end of the line."""

    text: str


@dataclass(frozen=True)
class Substitution:
    """Command/process substitution or an unsupported expansion.

    text holds the remainder of the line from the start of the construct.
    """

    text: str


ShellToken = Union[Word, Operator, Glob, Comment, Substitution]


# Tool calls

@dataclass(frozen=True)
class FunctionToolCall:
    """A function call item from the Responses API."""

    call_id: str
    name: str
    arguments: str
    type: str = "function_call"


@dataclass(frozen=True)
class FunctionCall:
    """The function part of a Chat Completions tool call."""

    name: str
    arguments: str


@dataclass(frozen=True)
class ChatCompletionToolCall:
    """A tool call from a Chat Completions assistant message."""

    id: str
    function: FunctionCall
    type: str = "function"
