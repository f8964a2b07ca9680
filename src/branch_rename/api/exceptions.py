"""Errors raised by the GitHub REST client.

Each subclass corresponds to the HTTP status GitHub answers with, see
``GitHubClient._handle_response``. Network failures surface as the base
``GitHubAPIError`` without a status code.
"""

from typing import Optional


class GitHubAPIError(Exception):
    """A GitHub request that failed or could not be sent."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[dict] = None,
    ):
        """Initialize GitHub API error.

        Args:
            message: Error message, usually GitHub's ``message`` field
            status_code: HTTP status code, None for network errors
            response_data: Decoded error body, when GitHub sent one
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class GitHubAuthenticationError(GitHubAPIError):
    """401: the personal access token is missing, expired or revoked."""


class GitHubRateLimitError(GitHubAPIError):
    """429, or 403 with ``X-RateLimit-Remaining: 0``: the quota is spent.

    ``retry_after`` comes from ``Retry-After`` when GitHub sends it (secondary
    limits), otherwise from the ``X-RateLimit-Reset`` epoch.
    """

    def __init__(self, message: str, retry_after: int = 60, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class GitHubNotFoundError(GitHubAPIError):
    """404: unknown repository, branch, pull request or file.

    GitHub also answers 404 for private repositories the token cannot see.
    """


class GitHubPermissionError(GitHubAPIError):
    """403 (quota left): the token lacks the ``repo`` scope or admin rights.

    Changing the default branch needs admin access to the repository.
    """


class GitHubValidationError(GitHubAPIError):
    """422: GitHub rejected the payload.

    Typical causes are creating a branch that already exists ("Reference
    already exists") or retargeting a pull request onto a missing base.
    """
