"""Configuration management for Branch Rename Tool."""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, validator

BRANCH_NAME_PATTERN = re.compile(r'^[A-Za-z0-9._/-]+$')


class ConfigurationError(Exception):
    """Invalid run configuration, detected before any remote call."""

    pass


def validate_branch_name(name: str) -> str:
    """Check a branch name against the characters git accepts in a ref."""
    if not name or not BRANCH_NAME_PATTERN.match(name):
        raise ValueError(f'Invalid branch name: {name!r}')
    if name.startswith('/') or name.endswith('/') or '..' in name:
        raise ValueError(f'Invalid branch name: {name!r}')
    return name


class GitHubInstanceConfig(BaseModel):
    """Configuration for the GitHub API endpoint."""

    url: str = Field(default='https://api.github.com', description='API base URL')
    token: Optional[str] = Field(default=None, description='Personal access token')
    timeout: int = Field(default=30, description='Request timeout in seconds')
    rate_limit_per_second: float = Field(
        default=10.0, description='API requests per second limit'
    )

    @validator('url')
    def validate_url(cls, v):
        """Validate API URL format."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v.rstrip('/')

    @validator('timeout')
    def validate_timeout(cls, v):
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError('Timeout must be positive')
        return v

    @validator('rate_limit_per_second')
    def validate_rate_limit(cls, v):
        """Validate rate limit is positive."""
        if v <= 0:
            raise ValueError('Rate limit must be positive')
        return v


class RenameConfig(BaseModel):
    """Branch rename settings shared by every repository in a run."""

    old_branch: str = Field(default='master', description='Branch to rename')
    new_branch: str = Field(default='main', description='Name of the new branch')
    keep_old: bool = Field(default=False, description='Keep the old branch')
    skip_forks: bool = Field(default=False, description='Skip forked repositories')
    skip_update_content: bool = Field(
        default=False, description='Do not rewrite content referencing old branch'
    )

    @validator('old_branch')
    def validate_old_branch(cls, v):
        return validate_branch_name(v)

    @validator('new_branch')
    def validate_new_branch(cls, v, values):
        validate_branch_name(v)
        if values.get('old_branch') == v:
            raise ValueError('New branch name must differ from the old one')
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default='WARNING', description='Log level')
    file: Optional[str] = Field(default=None, description='Log file path')
    format: Optional[str] = Field(default=None, description='Log format')

    @validator('level')
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()


class Config(BaseModel):
    """Main configuration class for Branch Rename Tool."""

    github: GitHubInstanceConfig = Field(
        default_factory=GitHubInstanceConfig, description='GitHub API settings'
    )
    rename: RenameConfig = Field(
        default_factory=RenameConfig, description='Branch rename settings'
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description='Logging settings'
    )

    class Config:
        """Pydantic configuration."""

        extra = 'forbid'

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """Load configuration from YAML file."""
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        if not isinstance(config_data, dict):
            raise ConfigurationError(
                f'Configuration file must contain a mapping: {config_path}'
            )

        return cls(**config_data)

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        load_dotenv()

        config_data = {
            'github': {
                'url': os.getenv('GITHUB_API_URL'),
                'token': os.getenv('GITHUB_TOKEN'),
            },
            'rename': {
                'old_branch': os.getenv('BRANCH_RENAME_OLD'),
                'new_branch': os.getenv('BRANCH_RENAME_NEW'),
            },
            'logging': {
                'level': os.getenv('LOG_LEVEL'),
                'file': os.getenv('LOG_FILE'),
            },
        }

        config_data = cls._remove_none_values(config_data)

        return cls(**config_data)

    @staticmethod
    def _remove_none_values(data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively remove None values from dictionary."""
        if isinstance(data, dict):
            return {
                k: Config._remove_none_values(v)
                for k, v in data.items()
                if v is not None
            }
        return data

    @staticmethod
    def create_template(output_path: str) -> None:
        """Create a configuration template file."""
        template_config = {
            'github': {
                'url': 'https://api.github.com',
                'token': 'your-personal-access-token',
                'timeout': 30,
                'rate_limit_per_second': 10.0,
            },
            'rename': {
                'old_branch': 'master',
                'new_branch': 'main',
                'keep_old': False,
                'skip_forks': False,
                'skip_update_content': False,
            },
            'logging': {
                'level': 'WARNING',
                'file': 'branch-rename.log',
            },
        }

        config_file = Path(output_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                template_config, f, default_flow_style=False, indent=2, sort_keys=False
            )
