"""Configuration for the command classifier.

Provides user-configurable allow/deny lists and regex patterns layered
on top of the built-in safe command rules.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from agentic_approvals.config import SettingsValidationError
from agentic_approvals.logging import Loggers

if TYPE_CHECKING:
    from agentic_approvals.config import ApprovalSettings

logger = Loggers.config()


@dataclass
class ShellApprovalConfig:
    """Configuration for command auto-approval rules.

    Attributes:
        allow_commands: Programs always considered safe (any arguments).
        deny_commands: Programs never considered safe (override allow rules).
        allow_patterns: Regex patterns for commands considered safe.
        deny_patterns: Regex patterns for commands never considered safe.

    Patterns are searched in the shell-quoted form of the command vector,
    e.g. "git log --oneline".
    """

    allow_commands: list[str] = field(default_factory=list)
    deny_commands: list[str] = field(default_factory=list)
    allow_patterns: list[str] = field(default_factory=list)
    deny_patterns: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShellApprovalConfig":
        """Create config from dictionary.

        Args:
            data: Configuration dictionary.

        Returns:
            ShellApprovalConfig instance.

        Raises:
            SettingsValidationError: If data is not a mapping or a rule
                list is not a list of strings.
        """
        if not isinstance(data, dict):
            raise SettingsValidationError(
                f"Shell config must be a mapping, got {type(data).__name__}"
            )
        return cls(
            allow_commands=_string_list(data, "allow_commands"),
            deny_commands=_string_list(data, "deny_commands"),
            allow_patterns=_string_list(data, "allow_patterns"),
            deny_patterns=_string_list(data, "deny_patterns"),
        )

    @classmethod
    def from_yaml(cls, path: Path | str) -> "ShellApprovalConfig":
        """Load config from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            ShellApprovalConfig instance (defaults if the file is missing).

        Raises:
            yaml.YAMLError: If the file is not valid YAML.
            SettingsValidationError: If the rules have the wrong shape.
        """
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        logger.debug("shell_config_loaded", path=str(path))
        return cls.from_dict(data)

    @classmethod
    def load_default(cls) -> "ShellApprovalConfig":
        """Load configuration from default location.

        Looks for config in:
        1. ~/.config/agentic-approvals/shell_approvals.yaml
        2. ./shell_approvals.yaml (project local)
        """
        user_config = Path.home() / ".config" / "agentic-approvals" / "shell_approvals.yaml"
        if user_config.exists():
            return cls.from_yaml(user_config)

        local_config = Path("shell_approvals.yaml")
        if local_config.exists():
            return cls.from_yaml(local_config)

        return cls()

    @classmethod
    def from_settings(cls, settings: "ApprovalSettings") -> "ShellApprovalConfig":
        """Build config from settings.

        The YAML file named by settings.shell_config_path (or the default
        location when unset) is merged with the lists set directly on
        settings.
        """
        if settings.shell_config_path is not None:
            base = cls.from_yaml(settings.shell_config_path)
        else:
            base = cls.load_default()
        return base.merge_with(
            cls(
                allow_commands=list(settings.allow_commands),
                deny_commands=list(settings.deny_commands),
            )
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "allow_commands": self.allow_commands,
            "deny_commands": self.deny_commands,
            "allow_patterns": self.allow_patterns,
            "deny_patterns": self.deny_patterns,
        }

    def merge_with(self, other: "ShellApprovalConfig") -> "ShellApprovalConfig":
        """Merge this config with another.

        Lists are combined; order is preserved and duplicates dropped.
        """
        return ShellApprovalConfig(
            allow_commands=_merge_lists(self.allow_commands, other.allow_commands),
            deny_commands=_merge_lists(self.deny_commands, other.deny_commands),
            allow_patterns=_merge_lists(self.allow_patterns, other.allow_patterns),
            deny_patterns=_merge_lists(self.deny_patterns, other.deny_patterns),
        )


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise SettingsValidationError(f"Shell config '{key}' must be a list of strings")
    return list(value)


def _merge_lists(first: list[str], second: list[str]) -> list[str]:
    return list(dict.fromkeys([*first, *second]))
