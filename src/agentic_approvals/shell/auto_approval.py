"""Auto-approval of shell commands proposed by an agent.

A command is auto-approved when the single-command oracle accepts it as
is, or when it is a ``bash -lc <line>`` invocation whose line consists
only of oracle-approved segments joined by operators from
SAFE_SHELL_OPERATORS. Every other shape returns None, which means the
command requires human review.

Usage:
    evaluator = AutoApprovalEvaluator(
        oracle=CommandClassifier().is_safe_command,
        tokenizer=ShellTokenizer().tokenize,
    )
    evaluator.compute_auto_approval(["bash", "-lc", "ls && pwd"])
    # SafeCommandReason(reason="List directory", group="Searching")
"""

import os
from collections.abc import Callable, Mapping, Sequence

from agentic_approvals.config import ApprovalSettings, get_settings
from agentic_approvals.constants import SHELL_INTERPRETER, SHELL_INTERPRETER_FLAG
from agentic_approvals.logging import Loggers
from agentic_approvals.shell.classifier import CommandClassifier
from agentic_approvals.shell.config import ShellApprovalConfig
from agentic_approvals.shell.format import format_command_for_display
from agentic_approvals.shell.models import (
    CommandReviewDetails,
    Operator,
    SafeCommandReason,
    ShellToken,
    Word,
)
from agentic_approvals.shell.tokenizer import ShellSyntaxError, ShellTokenizer

logger = Loggers.approvals()

SafeCommandOracle = Callable[[Sequence[str]], SafeCommandReason | None]
ShellLineTokenizer = Callable[[str, Mapping[str, str | None]], Sequence[ShellToken]]
CommandFormatter = Callable[[Sequence[str]], str]

# Operators with no side effects of their own. Redirections and grouping
# depend on context (file targets, subshell scope) a per-segment check
# cannot see.
SAFE_SHELL_OPERATORS: frozenset[str] = frozenset({"&&", "||", "|", ";"})

GROUPING_TOKENS: frozenset[str] = frozenset({"(", ")", "{", "}"})


class AutoApprovalEvaluator:
    """Decides whether a command vector may run without human review.

    Every collaborator is optional:
    - no oracle: every oracle check yields None
    - no tokenizer: bash -lc lines are not decomposed
    - no formatter: review text is the space-joined vector

    The evaluator holds no per-call state and is safe to share across
    threads.
    """

    def __init__(
        self,
        oracle: SafeCommandOracle | None = None,
        tokenizer: ShellLineTokenizer | None = None,
        formatter: CommandFormatter | None = None,
        env: Mapping[str, str | None] | None = None,
    ):
        """Initialize the evaluator.

        Args:
            oracle: Classifies a flat argv; returns a reason or None.
            tokenizer: Splits a shell line into tokens.
            formatter: Renders a command vector for display.
            env: Variables for shell expansion. Defaults to os.environ,
                read at call time.
        """
        self.oracle = oracle
        self.tokenizer = tokenizer
        self.formatter = formatter
        self._env = env

    def compute_auto_approval(self, cmd: Sequence[str]) -> SafeCommandReason | None:
        """Return the reason cmd is safe to auto-run, or None.

        For compound lines the reason of the first segment is returned.
        Never raises.
        """
        if not _is_command_vector(cmd):
            return None

        direct = self._check(cmd)
        if direct is not None:
            return direct

        if not _is_interpreter_line(cmd):
            return None

        if self.tokenizer is None:
            logger.debug("shell_decomposition_skipped", reason="no tokenizer")
            return None

        try:
            tokens = self.tokenizer(cmd[2], self._environment())
        except ShellSyntaxError as e:
            logger.debug("shell_line_unparseable", error=str(e))
            return None
        except Exception:
            logger.warning("shell_tokenizer_failed", exc_info=True)
            return None

        if not tokens:
            return None

        return self._evaluate_tokens(tokens)

    def review(self, cmd: Sequence[str]) -> CommandReviewDetails:
        """Build the review record for a command vector."""
        return CommandReviewDetails(
            cmd=tuple(cmd),
            cmd_readable_text=self._format(cmd),
            auto_approval=self.compute_auto_approval(cmd),
        )

    def _evaluate_tokens(self, tokens: Sequence[ShellToken]) -> SafeCommandReason | None:
        current: list[str] = []
        first: SafeCommandReason | None = None

        for token in tokens:
            if isinstance(token, Word):
                if token.text in GROUPING_TOKENS:
                    logger.debug("auto_approval_rejected", reason="grouping", token=token.text)
                    return None
                current.append(token.text)
            elif isinstance(token, Operator):
                if current:
                    verdict = self._check(current)
                    if verdict is None:
                        logger.debug("auto_approval_rejected", reason="unsafe segment", segment=current)
                        return None
                    if first is None:
                        first = verdict
                    current = []
                if token.symbol not in SAFE_SHELL_OPERATORS:
                    logger.debug("auto_approval_rejected", reason="operator", operator=token.symbol)
                    return None
            else:
                logger.debug("auto_approval_rejected", reason="token kind", token=type(token).__name__)
                return None

        if current:
            verdict = self._check(current)
            if verdict is None:
                logger.debug("auto_approval_rejected", reason="unsafe segment", segment=current)
                return None
            if first is None:
                first = verdict

        return first

    def _check(self, cmd: Sequence[str]) -> SafeCommandReason | None:
        if self.oracle is None:
            return None
        try:
            return self.oracle(cmd)
        except Exception:
            logger.warning("safe_command_oracle_failed", cmd=list(cmd), exc_info=True)
            return None

    def _format(self, cmd: Sequence[str]) -> str:
        if self.formatter is not None:
            try:
                return self.formatter(cmd)
            except Exception:
                logger.warning("command_formatter_failed", cmd=list(cmd), exc_info=True)
        return " ".join(cmd)

    def _environment(self) -> Mapping[str, str | None]:
        return os.environ if self._env is None else self._env


def _is_command_vector(cmd: object) -> bool:
    return (
        isinstance(cmd, Sequence)
        and not isinstance(cmd, str)
        and all(isinstance(part, str) for part in cmd)
    )


def _is_interpreter_line(cmd: Sequence[str]) -> bool:
    return (
        len(cmd) == 3
        and cmd[0] == SHELL_INTERPRETER
        and cmd[1] == SHELL_INTERPRETER_FLAG
        and isinstance(cmd[2], str)
    )


# Evaluator installed with set_default_evaluator (wins over settings)
_default_evaluator: AutoApprovalEvaluator | None = None

# Evaluator built from settings, kept only while those settings are active
_settings_evaluator: tuple[ApprovalSettings, AutoApprovalEvaluator] | None = None


def build_default_evaluator(settings: ApprovalSettings | None = None) -> AutoApprovalEvaluator:
    """Create an evaluator wired to the built-in collaborators.

    Args:
        settings: Settings to read classifier rules from. Defaults to
            get_settings().

    Raises:
        yaml.YAMLError: If the configured policy file is not valid YAML.
        re.error: If a configured allow/deny pattern is not a valid regex.
        SettingsValidationError: If the policy file has the wrong shape.
    """
    settings = settings if settings is not None else get_settings()
    classifier = CommandClassifier(ShellApprovalConfig.from_settings(settings))
    return AutoApprovalEvaluator(
        oracle=classifier.is_safe_command,
        tokenizer=ShellTokenizer().tokenize,
        formatter=format_command_for_display,
    )


def get_default_evaluator() -> AutoApprovalEvaluator:
    """Get the process-wide evaluator.

    Without an installed evaluator, one is built from the settings active
    in the current context and reused until different settings are
    active, so rules from a SettingsContext never outlive it.
    """
    global _settings_evaluator
    if _default_evaluator is not None:
        return _default_evaluator

    settings = get_settings()
    cached = _settings_evaluator
    if cached is not None and cached[0] is settings:
        return cached[1]

    evaluator = build_default_evaluator(settings)
    _settings_evaluator = (settings, evaluator)
    return evaluator


def set_default_evaluator(evaluator: AutoApprovalEvaluator | None) -> None:
    """Install a process-wide evaluator; None returns to the settings-built one."""
    global _default_evaluator, _settings_evaluator
    _default_evaluator = evaluator
    _settings_evaluator = None


def resolve_evaluator(evaluator: AutoApprovalEvaluator | None = None) -> AutoApprovalEvaluator:
    """Return evaluator, or the process-wide one.

    If the process-wide evaluator cannot be built, an evaluator with no
    collaborators is returned so that every command requires review.
    """
    if evaluator is not None:
        return evaluator
    try:
        return get_default_evaluator()
    except Exception:
        logger.error("default_evaluator_unavailable", exc_info=True)
        return AutoApprovalEvaluator()


def compute_auto_approval(cmd: Sequence[str]) -> SafeCommandReason | None:
    """Classify cmd with the process-wide evaluator. Never raises."""
    return resolve_evaluator().compute_auto_approval(cmd)
