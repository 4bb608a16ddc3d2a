"""Shared test fixtures for agentic-approvals tests.

Provides:
- Isolation from the user's environment, home directory and config files
- A static oracle for driving the evaluator deterministically
- Settings fixtures
- Log capture that keeps values bound with log_context
"""

import os
from collections.abc import Sequence
from pathlib import Path
from typing import Generator

import pytest
import structlog
from structlog.testing import LogCapture

from agentic_approvals.config import (
    ApprovalSettings,
    SettingsContext,
    reload_settings,
)
from agentic_approvals.shell import SafeCommandReason, set_default_evaluator


class StaticOracle:
    """Oracle answering from a fixed argv -> reason table.

    Records every command it is asked about, in order.
    """

    def __init__(self, verdicts: dict[tuple[str, ...], SafeCommandReason] | None = None):
        self.verdicts = dict(verdicts or {})
        self.calls: list[tuple[str, ...]] = []

    def __call__(self, cmd: Sequence[str]) -> SafeCommandReason | None:
        self.calls.append(tuple(cmd))
        return self.verdicts.get(tuple(cmd))


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Run each test with a clean home, cwd and process-wide evaluator."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for var in list(os.environ):
        if var.startswith("AGENTIC_APPROVALS_"):
            monkeypatch.delenv(var)

    set_default_evaluator(None)
    reload_settings()
    yield
    set_default_evaluator(None)
    reload_settings()


@pytest.fixture
def static_oracle() -> type[StaticOracle]:
    """Fixture providing the StaticOracle class."""
    return StaticOracle


@pytest.fixture
def settings() -> Generator[ApprovalSettings, None, None]:
    """Fixture providing default settings active in the current context."""
    with SettingsContext(ApprovalSettings()) as s:
        yield s


@pytest.fixture
def policy_file(tmp_path: Path) -> Path:
    """Fixture providing a YAML classifier policy file."""
    path = tmp_path / "shell_approvals.yaml"
    path.write_text(
        "allow_commands:\n"
        "  - make\n"
        "deny_commands:\n"
        "  - cat\n"
        "allow_patterns:\n"
        "  - '^npm test$'\n"
        "deny_patterns:\n"
        "  - 'secrets'\n"
    )
    return path


@pytest.fixture
def log_entries() -> Generator[list[dict], None, None]:
    """Fixture capturing log events, including values bound with log_context."""
    capture = LogCapture()
    structlog.configure(processors=[structlog.contextvars.merge_contextvars, capture])
    yield capture.entries
    structlog.reset_defaults()
