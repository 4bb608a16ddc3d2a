"""Tests for tool-call argument extraction and result decoding."""

import json

import pytest
import structlog
from structlog.testing import capture_logs

from agentic_approvals.constants import PARSE_FAILURE_MESSAGE
from agentic_approvals.parsers import (
    parse_tool_call,
    parse_tool_call_arguments,
    parse_tool_call_chat_completion,
    parse_tool_call_output,
)
from agentic_approvals.shell import (
    AutoApprovalEvaluator,
    ChatCompletionToolCall,
    ExecInput,
    FunctionCall,
    FunctionToolCall,
    SafeCommandReason,
    ShellTokenizer,
)

LIST_DIR = SafeCommandReason("List directory", "Searching")


class TestParseToolCallArguments:
    """Tests for extracting an ExecInput from argument JSON."""

    def test_cmd_array(self):
        """Test that a cmd string array is recovered exactly."""
        result = parse_tool_call_arguments('{"cmd": ["ls", "-la", "my dir"]}')

        assert result == ExecInput(cmd=("ls", "-la", "my dir"))

    def test_command_fallback(self):
        """Test fallback to the command field when cmd is absent."""
        result = parse_tool_call_arguments('{"command": ["git", "status"]}')

        assert result is not None
        assert result.cmd == ("git", "status")

    def test_cmd_takes_precedence(self):
        """Test that cmd wins when both fields are valid."""
        result = parse_tool_call_arguments('{"cmd": ["pwd"], "command": ["ls"]}')

        assert result is not None
        assert result.cmd == ("pwd",)

    def test_invalid_cmd_falls_back_to_command(self):
        """Test that a cmd with non-string items falls back to command."""
        result = parse_tool_call_arguments('{"cmd": ["ls", 1], "command": ["pwd"]}')

        assert result is not None
        assert result.cmd == ("pwd",)

    @pytest.mark.parametrize(
        "payload",
        [
            '{"cmd": "ls -la"}',
            '{"cmd": ["ls", null]}',
            '{"command": {"argv": ["ls"]}}',
            '{"args": ["ls"]}',
            '{"cmd": []}',
            "{}",
        ],
    )
    def test_no_string_array_command(self, payload: str):
        """Test that payloads without a usable command yield None."""
        assert parse_tool_call_arguments(payload) is None

    @pytest.mark.parametrize("payload", ["[]", "null", '"ls"', "42", "true"])
    def test_non_object_json(self, payload: str):
        """Test that JSON values other than objects yield None."""
        assert parse_tool_call_arguments(payload) is None

    @pytest.mark.parametrize("payload", ["", "{not json", '{"cmd": ["ls"]', "ls -la"])
    def test_malformed_json(self, payload: str):
        """Test that malformed JSON yields None."""
        assert parse_tool_call_arguments(payload) is None

    def test_malformed_json_logs_warning(self):
        """Test that a parse failure emits a diagnostic."""
        with capture_logs() as logs:
            parse_tool_call_arguments("{not json")

        assert len(logs) == 1
        assert logs[0]["event"] == "tool_call_arguments_unparseable"
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["arguments"] == "{not json"

    def test_deeply_nested_json(self):
        """Test that pathological nesting yields None instead of raising."""
        assert parse_tool_call_arguments("[" * 200_000) is None

    def test_timeout_number(self):
        """Test that a numeric timeout is kept."""
        result = parse_tool_call_arguments('{"cmd": ["ls"], "timeout": 5000}')

        assert result is not None
        assert result.timeout_in_millis == 5000

    def test_timeout_float(self):
        """Test that a fractional timeout is kept."""
        result = parse_tool_call_arguments('{"cmd": ["ls"], "timeout": 1.5}')

        assert result is not None
        assert result.timeout_in_millis == 1.5

    @pytest.mark.parametrize("timeout", ['"5000"', "true", "null", "-1", "[1]"])
    def test_timeout_not_coerced(self, timeout: str):
        """Test that non-number or negative timeouts are left unset."""
        result = parse_tool_call_arguments(f'{{"cmd": ["ls"], "timeout": {timeout}}}')

        assert result is not None
        assert result.timeout_in_millis is None

    def test_workdir_string(self):
        """Test that a string workdir is kept."""
        result = parse_tool_call_arguments('{"cmd": ["ls"], "workdir": "/project"}')

        assert result is not None
        assert result.workdir == "/project"

    def test_workdir_not_string(self):
        """Test that a non-string workdir is left unset."""
        result = parse_tool_call_arguments('{"cmd": ["ls"], "workdir": 42}')

        assert result is not None
        assert result.workdir is None

    def test_extra_fields_ignored(self):
        """Test that unrecognized fields do not affect extraction."""
        payload = json.dumps(
            {"cmd": ["ls"], "justification": "look around", "with_escalated_permissions": True}
        )

        assert parse_tool_call_arguments(payload) == ExecInput(cmd=("ls",))


class TestParseToolCallOutput:
    """Tests for decoding execution results."""

    def test_well_formed_result(self):
        """Test decoding a complete result payload."""
        payload = json.dumps(
            {"output": "file.txt\n", "metadata": {"exit_code": 0, "duration_seconds": 0.25}}
        )

        result = parse_tool_call_output(payload)

        assert result.output == "file.txt\n"
        assert result.exit_code == 0
        assert result.duration_seconds == 0.25

    def test_integer_duration(self):
        """Test that an integral duration is accepted."""
        payload = '{"output": "", "metadata": {"exit_code": 2, "duration_seconds": 3}}'

        result = parse_tool_call_output(payload)

        assert result.exit_code == 2
        assert result.duration_seconds == 3

    def test_extra_fields_ignored(self):
        """Test that unrecognized fields are ignored."""
        payload = json.dumps(
            {
                "output": "ok",
                "metadata": {"exit_code": 0, "duration_seconds": 1.0, "signal": None},
                "truncated": False,
            }
        )

        assert parse_tool_call_output(payload).output == "ok"

    @pytest.mark.parametrize(
        "payload",
        [
            "not json",
            "",
            "null",
            "[]",
            '{"output": "x"}',
            '{"metadata": {"exit_code": 0, "duration_seconds": 0}}',
            '{"output": 5, "metadata": {"exit_code": 0, "duration_seconds": 0}}',
            '{"output": "x", "metadata": {"exit_code": "0", "duration_seconds": 0}}',
            '{"output": "x", "metadata": {"exit_code": true, "duration_seconds": 0}}',
            '{"output": "x", "metadata": {"exit_code": 0, "duration_seconds": "1"}}',
            '{"output": "x", "metadata": null}',
        ],
    )
    def test_sentinel_on_failure(self, payload: str):
        """Test that malformed results decode to the sentinel outcome."""
        result = parse_tool_call_output(payload)

        assert result.output == PARSE_FAILURE_MESSAGE
        assert result.exit_code == 1
        assert result.duration_seconds == 0


class TestParseToolCall:
    """Tests for building review details from tool calls."""

    @pytest.fixture
    def evaluator(self, static_oracle) -> AutoApprovalEvaluator:
        return AutoApprovalEvaluator(
            oracle=static_oracle({("ls", "-la"): LIST_DIR}),
            tokenizer=ShellTokenizer().tokenize,
        )

    def test_function_tool_call(self, evaluator: AutoApprovalEvaluator):
        """Test review details for a Responses API function call."""
        call = FunctionToolCall(
            call_id="call_1", name="shell", arguments='{"cmd": ["ls", "-la"]}'
        )

        details = parse_tool_call(call, evaluator=evaluator)

        assert details is not None
        assert details.cmd == ("ls", "-la")
        assert details.cmd_readable_text == "ls -la"
        assert details.auto_approval == LIST_DIR

    def test_mapping_tool_call(self, evaluator: AutoApprovalEvaluator):
        """Test that raw dict tool calls are accepted."""
        call = {"type": "function_call", "arguments": '{"command": ["rm", "-rf", "build"]}'}

        details = parse_tool_call(call, evaluator=evaluator)

        assert details is not None
        assert details.cmd == ("rm", "-rf", "build")
        assert details.auto_approval is None

    def test_unparseable_arguments(self, evaluator: AutoApprovalEvaluator):
        """Test that unusable arguments yield no review details."""
        call = FunctionToolCall(call_id="call_1", name="shell", arguments="oops")

        assert parse_tool_call(call, evaluator=evaluator) is None

    def test_missing_arguments(self, evaluator: AutoApprovalEvaluator):
        """Test that a call without an arguments string yields None."""
        assert parse_tool_call({"name": "shell"}, evaluator=evaluator) is None

    def test_default_evaluator(self):
        """Test review details with the built-in collaborators."""
        call = FunctionToolCall(
            call_id="call_1",
            name="shell",
            arguments='{"cmd": ["bash", "-lc", "ls && git status"]}',
        )

        details = parse_tool_call(call)

        assert details is not None
        assert details.cmd_readable_text == "ls && git status"
        assert details.auto_approval is not None
        assert details.auto_approval.reason == "List directory"


class TestParseToolCallChatCompletion:
    """Tests for Chat Completions tool calls."""

    def test_function_call(self, static_oracle):
        """Test review details for a function tool call."""
        evaluator = AutoApprovalEvaluator(oracle=static_oracle({("pwd",): LIST_DIR}))
        call = ChatCompletionToolCall(
            id="call_1",
            function=FunctionCall(name="shell", arguments='{"cmd": ["pwd"]}'),
        )

        details = parse_tool_call_chat_completion(call, evaluator=evaluator)

        assert details is not None
        assert details.cmd == ("pwd",)
        assert details.auto_approval == LIST_DIR

    def test_non_function_type(self):
        """Test that non-function tool calls are ignored."""
        call = ChatCompletionToolCall(
            id="call_1",
            function=FunctionCall(name="shell", arguments='{"cmd": ["pwd"]}'),
            type="custom",
        )

        assert parse_tool_call_chat_completion(call) is None

    def test_mapping_without_function(self):
        """Test that a function-typed call missing its function yields None."""
        assert parse_tool_call_chat_completion({"type": "function"}) is None


class TestReviewLogContext:
    """Tests for tool-call identifiers on review log events."""

    def test_responses_call_bound(self, log_entries):
        """Test that events during review carry call_id and tool_name."""
        call = FunctionToolCall(call_id="call_7", name="shell", arguments="{oops")

        assert parse_tool_call(call) is None

        assert log_entries[0]["event"] == "tool_call_arguments_unparseable"
        assert log_entries[0]["call_id"] == "call_7"
        assert log_entries[0]["tool_name"] == "shell"
        assert structlog.contextvars.get_contextvars() == {}

    def test_chat_completion_call_bound(self, log_entries, static_oracle):
        """Test the review event for a Chat Completions tool call."""
        evaluator = AutoApprovalEvaluator(oracle=static_oracle({("pwd",): LIST_DIR}))
        call = ChatCompletionToolCall(
            id="call_8",
            function=FunctionCall(name="shell", arguments='{"cmd": ["pwd"]}'),
        )

        parse_tool_call_chat_completion(call, evaluator=evaluator)

        reviewed = [e for e in log_entries if e["event"] == "tool_call_reviewed"]
        assert reviewed == [
            {
                "event": "tool_call_reviewed",
                "log_level": "debug",
                "auto_approved": True,
                "call_id": "call_8",
                "tool_name": "shell",
            }
        ]
