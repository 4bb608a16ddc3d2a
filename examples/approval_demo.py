#!/usr/bin/env python
"""Standalone demo for the command auto-approval gate.

This demo walks through the approval pipeline without executing anything:
1. Single-command classification
2. bash -lc compound line decomposition
3. Tool-call argument parsing into review details
4. Execution result decoding
5. User allow/deny rules

Usage:
    python examples/approval_demo.py
"""

import json

from agentic_approvals import (
    AutoApprovalEvaluator,
    CommandClassifier,
    ShellApprovalConfig,
    ShellTokenizer,
    compute_auto_approval,
    configure_logging,
    format_command_for_display,
    get_settings,
    parse_tool_call,
    parse_tool_call_output,
)
from agentic_approvals.shell import FunctionToolCall


# =============================================================================
# Helpers
# =============================================================================


def section(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def show(cmd: list[str], evaluator: AutoApprovalEvaluator | None = None) -> None:
    verdict = (
        evaluator.compute_auto_approval(cmd)
        if evaluator is not None
        else compute_auto_approval(cmd)
    )
    text = format_command_for_display(cmd)
    if verdict is None:
        print(f"  [REVIEW]   {text}")
    else:
        print(f"  [APPROVED] {text}  ({verdict.group}: {verdict.reason})")


# =============================================================================
# Demo Functions
# =============================================================================


def demo_single_commands():
    """Demo classification of flat command vectors."""
    section("Single Commands")

    show(["ls", "-la"])
    show(["git", "status"])
    show(["git", "push", "origin", "main"])
    show(["find", ".", "-name", "*.pyc", "-delete"])
    show(["sed", "-n", "1,20p", "README.md"])
    show(["rm", "-rf", "build"])
    print()


def demo_compound_lines():
    """Demo bash -lc line decomposition."""
    section("Compound Lines (bash -lc)")

    for line in [
        "ls && pwd",
        "git log --oneline | head -5",
        "cat README.md; echo done",
        "ls > listing.txt",
        "ls && rm -rf build",
        "(cd src && ls)",
        "echo $(whoami)",
        "ls *.py",
        "echo 'a && b'",
        "echo 'unterminated",
    ]:
        show(["bash", "-lc", line])
    print()


def demo_tool_calls():
    """Demo review details built from tool calls."""
    section("Tool Call Review")

    calls = [
        FunctionToolCall(
            call_id="call_1",
            name="shell",
            arguments=json.dumps({"cmd": ["bash", "-lc", "ls && git diff"], "workdir": "/repo"}),
        ),
        FunctionToolCall(
            call_id="call_2",
            name="shell",
            arguments=json.dumps({"command": ["npm", "install"], "timeout": 60000}),
        ),
        FunctionToolCall(call_id="call_3", name="shell", arguments="{not json"),
    ]

    for call in calls:
        details = parse_tool_call(call)
        print(f"\n  {call.call_id}: {call.arguments}")
        if details is None:
            print("    No shell command found")
            continue
        print(f"    Display: {details.cmd_readable_text}")
        print(f"    Auto-approval: {details.auto_approval}")
    print()


def demo_result_decoding():
    """Demo execution result decoding."""
    section("Result Decoding")

    for payload in [
        json.dumps({"output": "README.md\n", "metadata": {"exit_code": 0, "duration_seconds": 0.01}}),
        '{"output": "partial"}',
    ]:
        result = parse_tool_call_output(payload)
        print(f"\n  Payload: {payload}")
        print(f"    Output: {result.output!r}")
        print(f"    Exit code: {result.exit_code}")
        print(f"    Duration: {result.duration_seconds}s")
    print()


def demo_user_rules():
    """Demo user allow/deny rules layered on the built-in rules."""
    section("User Rules")

    config = ShellApprovalConfig(
        allow_commands=["make"],
        deny_commands=["cat"],
        allow_patterns=[r"^npm test$"],
    )
    print(f"\n  Config: {config.to_dict()}\n")

    evaluator = AutoApprovalEvaluator(
        oracle=CommandClassifier(config),
        tokenizer=ShellTokenizer().tokenize,
    )
    show(["make", "all"], evaluator)
    show(["npm", "test"], evaluator)
    show(["cat", "README.md"], evaluator)
    show(["bash", "-lc", "make && npm test"], evaluator)
    print()


def main():
    """Run all demos."""
    configure_logging(get_settings())

    print("\n" + "=" * 60)
    print("Command Auto-Approval Demo")
    print("=" * 60)
    print("\nNothing in this demo is executed.")

    demo_single_commands()
    demo_compound_lines()
    demo_tool_calls()
    demo_result_decoding()
    demo_user_rules()


if __name__ == "__main__":
    main()
