"""GitHub API client."""

from .client import APIResponse, GitHubClient, GitHubClientFactory

__all__ = ['APIResponse', 'GitHubClient', 'GitHubClientFactory']
