"""Shared constants for agentic-approvals."""

# Log preview truncation limit for untrusted payloads
CONTENT_PREVIEW_LENGTH = 200

# Interpreter invocation whose inline script is decomposed into segments
SHELL_INTERPRETER = "bash"
SHELL_INTERPRETER_FLAG = "-lc"

# Output substituted when a tool-call result cannot be decoded
PARSE_FAILURE_MESSAGE = "Failed to parse JSON result"


def truncate(text: str, max_length: int = CONTENT_PREVIEW_LENGTH) -> str:
    """Truncate text with ellipsis if it exceeds max_length."""
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text
