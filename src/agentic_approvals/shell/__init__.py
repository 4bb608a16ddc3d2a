"""Shell command auto-approval.

Layers:
- Tokenizer: shell line to Word/Operator tokens
- Classifier: flat argv to SafeCommandReason or None
- Evaluator: decomposes ``bash -lc`` lines and combines segment verdicts

Usage:
    from agentic_approvals.shell import compute_auto_approval

    compute_auto_approval(["ls", "-la"])                   # SafeCommandReason
    compute_auto_approval(["bash", "-lc", "ls && pwd"])    # SafeCommandReason
    compute_auto_approval(["bash", "-lc", "ls > out.txt"]) # None, needs review
"""

from agentic_approvals.shell.auto_approval import (
    GROUPING_TOKENS,
    SAFE_SHELL_OPERATORS,
    AutoApprovalEvaluator,
    CommandFormatter,
    SafeCommandOracle,
    ShellLineTokenizer,
    build_default_evaluator,
    compute_auto_approval,
    get_default_evaluator,
    resolve_evaluator,
    set_default_evaluator,
)
from agentic_approvals.shell.classifier import CommandClassifier
from agentic_approvals.shell.config import ShellApprovalConfig
from agentic_approvals.shell.format import format_command_for_display
from agentic_approvals.shell.models import (
    ChatCompletionToolCall,
    CommandReviewDetails,
    Comment,
    ExecInput,
    ExecOutput,
    ExecOutputMetadata,
    FunctionCall,
    FunctionToolCall,
    Glob,
    Operator,
    SafeCommandReason,
    ShellToken,
    Substitution,
    Word,
)
from agentic_approvals.shell.tokenizer import ShellSyntaxError, ShellTokenizer

__all__ = [
    # Evaluator
    "AutoApprovalEvaluator",
    "compute_auto_approval",
    "build_default_evaluator",
    "get_default_evaluator",
    "set_default_evaluator",
    "resolve_evaluator",
    "SAFE_SHELL_OPERATORS",
    "GROUPING_TOKENS",
    # Collaborator types
    "SafeCommandOracle",
    "ShellLineTokenizer",
    "CommandFormatter",
    # Default collaborators
    "CommandClassifier",
    "ShellTokenizer",
    "ShellSyntaxError",
    "format_command_for_display",
    # Configuration
    "ShellApprovalConfig",
    # Data models
    "ChatCompletionToolCall",
    "CommandReviewDetails",
    "Comment",
    "ExecInput",
    "ExecOutput",
    "ExecOutputMetadata",
    "FunctionCall",
    "FunctionToolCall",
    "Glob",
    "Operator",
    "SafeCommandReason",
    "ShellToken",
    "Substitution",
    "Word",
]
