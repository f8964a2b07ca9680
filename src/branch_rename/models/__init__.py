"""Data models for branch rename runs."""

from .pull_request import PullRequestRef
from .repository import RepositoryRef
from .request import ExecutionMode, MigrationRequest

__all__ = [
    'ExecutionMode',
    'MigrationRequest',
    'PullRequestRef',
    'RepositoryRef',
]
