"""Agentic Approvals - auto-approval gate for agent-proposed shell commands.

Sits between an LLM's tool calls and a command executor:

- Parsers extract an execution request from loosely-structured tool-call
  arguments and decode execution results without raising
- The auto-approval evaluator decides, conservatively, whether a command
  (including ``bash -lc`` compound lines) may run without human review

Usage:
    from agentic_approvals import parse_tool_call

    details = parse_tool_call(tool_call)
    if details is not None and details.auto_approval is None:
        # Ask a human before running details.cmd
        ...
"""

from agentic_approvals.config import (
    ApprovalSettings,
    SettingsContext,
    SettingsValidationError,
    get_context_settings,
    get_settings,
    reload_settings,
    set_context_settings,
    set_settings,
    validate_settings,
)
from agentic_approvals.logging import configure_logging, get_logger, log_context
from agentic_approvals.parsers import (
    parse_tool_call,
    parse_tool_call_arguments,
    parse_tool_call_chat_completion,
    parse_tool_call_output,
)
from agentic_approvals.shell import (
    AutoApprovalEvaluator,
    CommandClassifier,
    CommandReviewDetails,
    ExecInput,
    ExecOutput,
    ExecOutputMetadata,
    SafeCommandReason,
    ShellApprovalConfig,
    ShellTokenizer,
    compute_auto_approval,
    format_command_for_display,
    get_default_evaluator,
    set_default_evaluator,
)

__all__ = [
    # Parsers
    "parse_tool_call",
    "parse_tool_call_arguments",
    "parse_tool_call_chat_completion",
    "parse_tool_call_output",
    # Auto-approval
    "AutoApprovalEvaluator",
    "CommandClassifier",
    "ShellTokenizer",
    "compute_auto_approval",
    "format_command_for_display",
    "get_default_evaluator",
    "set_default_evaluator",
    # Data models
    "CommandReviewDetails",
    "ExecInput",
    "ExecOutput",
    "ExecOutputMetadata",
    "SafeCommandReason",
    # Settings
    "ApprovalSettings",
    "ShellApprovalConfig",
    "SettingsContext",
    "SettingsValidationError",
    "get_settings",
    "set_settings",
    "set_context_settings",
    "get_context_settings",
    "validate_settings",
    "reload_settings",
    # Logging
    "configure_logging",
    "get_logger",
    "log_context",
]

__version__ = "0.1.0"
