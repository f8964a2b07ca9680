"""Configuration management."""

from .config import (
    Config,
    ConfigurationError,
    GitHubInstanceConfig,
    LoggingConfig,
    RenameConfig,
)

__all__ = [
    'Config',
    'ConfigurationError',
    'GitHubInstanceConfig',
    'LoggingConfig',
    'RenameConfig',
]
