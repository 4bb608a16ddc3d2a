"""Parsing of agent tool calls and tool-call results.

Every function here is total over arbitrary input: malformed payloads
produce None (for requests) or a sentinel ExecOutput (for results), never
an exception.
"""

import json
import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from agentic_approvals.constants import PARSE_FAILURE_MESSAGE, truncate
from agentic_approvals.logging import Loggers, log_context
from agentic_approvals.shell.auto_approval import AutoApprovalEvaluator, resolve_evaluator
from agentic_approvals.shell.models import (
    CommandReviewDetails,
    ExecInput,
    ExecOutput,
    ExecOutputMetadata,
)

logger = Loggers.parsers()


class _ExecMetadataPayload(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    exit_code: int
    duration_seconds: float


class _ExecResultPayload(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    output: str
    metadata: _ExecMetadataPayload


def parse_tool_call_output(tool_call_output: str) -> ExecOutput:
    """Decode the JSON result of a finished command execution.

    Expects {"output": str, "metadata": {"exit_code": int,
    "duration_seconds": number}}. Anything else decodes to an ExecOutput
    with PARSE_FAILURE_MESSAGE, exit code 1 and zero duration.
    """
    try:
        payload = _ExecResultPayload.model_validate_json(tool_call_output)
    except (ValidationError, TypeError, ValueError):
        return ExecOutput(
            output=PARSE_FAILURE_MESSAGE,
            metadata=ExecOutputMetadata(exit_code=1, duration_seconds=0),
        )

    return ExecOutput(
        output=payload.output,
        metadata=ExecOutputMetadata(
            exit_code=payload.metadata.exit_code,
            duration_seconds=payload.metadata.duration_seconds,
        ),
    )


def parse_tool_call_arguments(tool_call_arguments: str) -> ExecInput | None:
    """Extract an execution request from tool-call argument JSON.

    The command is read from "cmd", falling back to "command"; it must be
    a non-empty array of strings. "timeout" (milliseconds) is kept only if
    it is a non-negative number and "workdir" only if it is a string.
    Other fields are ignored.

    Returns:
        ExecInput, or None if the arguments do not describe a command.
    """
    try:
        data = json.loads(tool_call_arguments)
    except (TypeError, ValueError, RecursionError):
        logger.warning(
            "tool_call_arguments_unparseable",
            arguments=truncate(str(tool_call_arguments)),
        )
        return None

    if not isinstance(data, dict):
        return None

    cmd = _to_string_list(data.get("cmd"))
    if cmd is None:
        cmd = _to_string_list(data.get("command"))
    if not cmd:
        return None

    workdir = data.get("workdir")
    return ExecInput(
        cmd=tuple(cmd),
        workdir=workdir if isinstance(workdir, str) else None,
        timeout_in_millis=_to_timeout(data.get("timeout")),
    )


def parse_tool_call(
    tool_call: Any,
    evaluator: AutoApprovalEvaluator | None = None,
) -> CommandReviewDetails | None:
    """Build review details for a Responses API function call.

    Args:
        tool_call: FunctionToolCall, an SDK object or a mapping with an
            "arguments" JSON string.
        evaluator: Evaluator to use; defaults to the process-wide one.

    Returns:
        CommandReviewDetails, or None if no command could be extracted.
    """
    arguments = _field(tool_call, "arguments")
    if not isinstance(arguments, str):
        return None
    with log_context(call_id=_field(tool_call, "call_id"), tool_name=_field(tool_call, "name")):
        return _review_arguments(arguments, evaluator)


def parse_tool_call_chat_completion(
    tool_call: Any,
    evaluator: AutoApprovalEvaluator | None = None,
) -> CommandReviewDetails | None:
    """Build review details for a Chat Completions tool call.

    Tool calls whose type is not "function" yield None.
    """
    if _field(tool_call, "type") != "function":
        return None
    function = _field(tool_call, "function")
    if function is None:
        return None
    arguments = _field(function, "arguments")
    if not isinstance(arguments, str):
        return None
    with log_context(call_id=_field(tool_call, "id"), tool_name=_field(function, "name")):
        return _review_arguments(arguments, evaluator)


def _review_arguments(
    arguments: str,
    evaluator: AutoApprovalEvaluator | None,
) -> CommandReviewDetails | None:
    exec_input = parse_tool_call_arguments(arguments)
    if exec_input is None:
        return None
    details = resolve_evaluator(evaluator).review(exec_input.cmd)
    logger.debug("tool_call_reviewed", auto_approved=details.auto_approval is not None)
    return details


def _to_string_list(value: object) -> list[str] | None:
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return value
    return None


def _to_timeout(value: object) -> float | None:
    # bool is an int subclass but not a JSON number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if value < 0:
        return None
    return value


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)
