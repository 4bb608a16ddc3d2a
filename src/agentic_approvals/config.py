"""Settings for agentic-approvals.

Provides the ApprovalSettings class plus global singleton and context-based
settings management:

    1. Global singleton (simple cases):
        set_settings(my_settings)
        settings = get_settings()

    2. Context-based (isolated contexts, tests):
        with SettingsContext(my_settings):
            settings = get_settings()  # Returns my_settings

Settings Loading Priority (highest to lowest):
    1. Environment variables (AGENTIC_APPROVALS_* prefix)
    2. Project config (./.{app_name}/settings.json)
    3. User config (~/.{app_name}/settings.json)
    4. .env file
    5. Default values
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from pathlib import Path
from typing import Generator, Literal, Tuple, Type

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings as PydanticBaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

__all__ = [
    "ApprovalSettings",
    "SettingsContext",
    "SettingsValidationError",
    "get_settings",
    "set_settings",
    "set_context_settings",
    "get_context_settings",
    "validate_settings",
    "reload_settings",
]

DEFAULT_APP_NAME = "agentic_approvals"


def _get_json_config_source(
    settings_cls: Type[PydanticBaseSettings],
    json_file: Path,
) -> PydanticBaseSettingsSource | None:
    """Create a JSON config source if the file exists."""
    if not json_file.exists():
        return None
    return JsonConfigSettingsSource(settings_cls, json_file=json_file)


class ApprovalSettings(PydanticBaseSettings):
    """Settings for command auto-approval.

    Settings are loaded from (in order of precedence):
    1. Environment variables (AGENTIC_APPROVALS_ prefix)
    2. Project config (./.agentic_approvals/settings.json)
    3. User config (~/.agentic_approvals/settings.json)
    4. .env file
    5. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="AGENTIC_APPROVALS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = Field(
        default=DEFAULT_APP_NAME,
        title="App Name",
        description="Application name, also used for config directory names",
    )

    # Logging configuration
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        title="Log Level",
        description="Logging verbosity level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        title="Log Format",
        description="Log output format (console for dev, json for production)",
    )

    # Oracle policy
    shell_config_path: Path | None = Field(
        default=None,
        title="Shell Config Path",
        description="YAML file with allow/deny rules for the command classifier",
    )
    allow_commands: list[str] = Field(
        default_factory=list,
        title="Allow Commands",
        description="Programs always considered safe to auto-approve",
    )
    deny_commands: list[str] = Field(
        default_factory=list,
        title="Deny Commands",
        description="Programs never auto-approved, even if built-in rules allow them",
    )

    @field_validator("shell_config_path", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path | None) -> Path | None:
        """Expand ~ in paths."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[PydanticBaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources for layered JSON configuration.

        Note: JSON sources are only included if the files exist.
        """
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
        ]

        app_name = DEFAULT_APP_NAME
        field_info = cls.model_fields.get("app_name")
        if field_info is not None and isinstance(field_info.default, str):
            app_name = field_info.default

        project_json = _get_json_config_source(
            settings_cls,
            Path.cwd() / f".{app_name}" / "settings.json",
        )
        if project_json:
            sources.append(project_json)

        user_json = _get_json_config_source(
            settings_cls,
            Path.home() / f".{app_name}" / "settings.json",
        )
        if user_json:
            sources.append(user_json)

        sources.append(dotenv_settings)

        return tuple(sources)


# Context variable for settings (takes precedence over global singleton)
_settings_context: ContextVar[ApprovalSettings | None] = ContextVar(
    "settings_context", default=None
)

# Global settings instance holder (fallback when no context)
_settings_instance: ApprovalSettings | None = None


def get_settings() -> ApprovalSettings:
    """Get the current settings instance.

    Settings resolution order:
    1. Context variable (set via SettingsContext or set_context_settings)
    2. Global singleton (set via set_settings)
    3. Fresh ApprovalSettings instance (created on first access)
    """
    context_settings = _settings_context.get()
    if context_settings is not None:
        return context_settings

    global _settings_instance
    if _settings_instance is None:
        _settings_instance = ApprovalSettings()
    return _settings_instance


def set_settings(settings: ApprovalSettings) -> None:
    """Set the global settings instance.

    Args:
        settings: Settings instance to use globally
    """
    global _settings_instance
    _settings_instance = settings


def set_context_settings(settings: ApprovalSettings | None) -> Token:
    """Set settings for the current context.

    Args:
        settings: Settings to use in current context, or None to clear

    Returns:
        Token that can be used to reset the context variable.
    """
    return _settings_context.set(settings)


def get_context_settings() -> ApprovalSettings | None:
    """Get settings from current context (if any)."""
    return _settings_context.get()


@contextmanager
def SettingsContext(settings: ApprovalSettings) -> Generator[ApprovalSettings, None, None]:
    """Context manager for isolated settings.

    Example:
        with SettingsContext(test_settings) as s:
            evaluator = get_default_evaluator()

    Args:
        settings: Settings to use within the context

    Yields:
        The settings instance
    """
    token = _settings_context.set(settings)
    try:
        yield settings
    finally:
        _settings_context.reset(token)


def reload_settings() -> ApprovalSettings:
    """Reload settings (clears global singleton and context cache).

    Returns:
        Fresh ApprovalSettings instance
    """
    global _settings_instance
    _settings_instance = None
    _settings_context.set(None)
    return get_settings()


class SettingsValidationError(Exception):
    """Raised when settings validation fails."""

    pass


def validate_settings(settings: ApprovalSettings) -> None:
    """Validate settings for runtime use.

    Args:
        settings: Settings to validate

    Raises:
        SettingsValidationError: If validation fails
    """
    errors = []

    path = settings.shell_config_path
    if path is not None and not path.is_file():
        errors.append(f"Shell config file not found: {path}")

    overlap = set(settings.allow_commands) & set(settings.deny_commands)
    if overlap:
        errors.append(
            "Commands listed in both allow_commands and deny_commands: "
            + ", ".join(sorted(overlap))
        )

    if errors:
        raise SettingsValidationError("\n".join(errors))
