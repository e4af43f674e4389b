"""Errors raised while loading sync settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """The settings file or an override holds an invalid value."""


class MissingConfigurationError(ConfigurationError):
    """No settings file was given or it does not exist."""
