"""Errors that stop a sync before any step runs (CLI exit code 2)."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Base for every problem with the settings a sync starts from."""


class MissingConfigurationError(ConfigurationError):
    """Tenant id or access token (or another required variable) is unset or blank."""


class InvalidConfigurationError(ConfigurationError):
    """Raised when a configuration value is present but cannot be used.

    ``name`` is the environment variable that carried the value.
    """

    def __init__(self, name: str, value: str, reason: str) -> None:
        super().__init__(f"Invalid value for {name}: {value!r} ({reason})")
        self.name = name
        self.value = value


class AuthenticationError(ConfigurationError):
    """Graph refused the configured access token, for example because it expired."""
