"""GitHub API client implementation."""

import base64
import time
from typing import Any, Dict, Iterator, Optional
from urllib.parse import quote, urljoin

import requests
from loguru import logger
from pydantic import BaseModel

from .. import __version__
from ..config.config import GitHubInstanceConfig
from ..models.pull_request import PullRequestRef
from ..models.repository import RepositoryRef
from .exceptions import (
    GitHubAPIError,
    GitHubAuthenticationError,
    GitHubNotFoundError,
    GitHubPermissionError,
    GitHubRateLimitError,
    GitHubValidationError,
)
from .rate_limiter import RateLimiter


class APIResponse(BaseModel):
    """Standard API response wrapper.

    Header names are lowercased, since HTTP header names are case-insensitive.
    """

    status_code: int
    data: Any
    headers: Dict[str, str]
    success: bool


class GitHubClient:
    """GitHub REST API client with token authentication."""

    def __init__(self, config: GitHubInstanceConfig):
        """Initialize GitHub client.

        Args:
            config: GitHub API configuration
        """
        if not config.token:
            raise GitHubAuthenticationError('No authentication token provided')

        self.config = config
        self.base_url = config.url.rstrip('/')
        self.rate_limiter = RateLimiter(config.rate_limit_per_second)
        self.session = requests.Session()

        self.session.headers.update(
            {
                'Authorization': f'token {config.token}',
                'Accept': 'application/vnd.github+json',
                'User-Agent': f'branch-rename/{__version__}',
            }
        )

        logger.debug(f'Initialized GitHub client for {config.url}')

    def _build_url(self, endpoint: str) -> str:
        """Build full API URL from endpoint.

        Args:
            endpoint: API endpoint path

        Returns:
            Full API URL
        """
        return urljoin(self.base_url + '/', endpoint.lstrip('/'))

    @staticmethod
    def _rate_limit_retry_after(headers: Dict[str, str]) -> int:
        if 'retry-after' in headers:
            return int(headers['retry-after'])
        reset = headers.get('x-ratelimit-reset')
        if reset:
            return max(int(reset) - int(time.time()), 0)
        return 60

    def _handle_response(self, response: requests.Response) -> APIResponse:
        """Handle API response and convert to standard format.

        Args:
            response: Raw HTTP response

        Returns:
            Standardized API response

        Raises:
            GitHubAPIError: For various API errors
        """
        headers = {name.lower(): value for name, value in response.headers.items()}
        status = response.status_code

        if status == 429 or (
            status == 403 and headers.get('x-ratelimit-remaining') == '0'
        ):
            retry_after = self._rate_limit_retry_after(headers)
            raise GitHubRateLimitError(
                f'Rate limit exceeded. Retry after {retry_after} seconds',
                retry_after=retry_after,
                status_code=status,
            )

        if status == 401:
            raise GitHubAuthenticationError('Authentication failed', status_code=401)

        if status >= 400:
            error_data = None
            try:
                error_data = response.json()
                message = error_data.get('message', f'HTTP {status}')
            except (ValueError, AttributeError):
                message = f'HTTP {status}: {response.text}'

            if status == 403:
                error_class = GitHubPermissionError
            elif status == 404:
                error_class = GitHubNotFoundError
            elif status == 422:
                error_class = GitHubValidationError
            else:
                error_class = GitHubAPIError

            raise error_class(
                f'API request failed: {message}',
                status_code=status,
                response_data=error_data,
            )

        try:
            data = response.json() if response.content else None
        except ValueError:
            data = response.text

        return APIResponse(
            status_code=status,
            data=data,
            headers=headers,
            success=200 <= status < 300,
        )

    def _request(self, method: str, endpoint: str, **kwargs) -> APIResponse:
        url = self._build_url(endpoint)
        self.rate_limiter.acquire()

        try:
            response = getattr(self.session, method)(
                url, timeout=self.config.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.error(f'Network error during {method.upper()} request: {e}')
            raise GitHubAPIError(f'Network error: {e}')

        return self._handle_response(response)

    def get(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None, **kwargs
    ) -> APIResponse:
        """Make GET request."""
        return self._request('get', endpoint, params=params, **kwargs)

    def post(
        self, endpoint: str, data: Optional[Dict[str, Any]] = None, **kwargs
    ) -> APIResponse:
        """Make POST request."""
        return self._request('post', endpoint, json=data, **kwargs)

    def patch(
        self, endpoint: str, data: Optional[Dict[str, Any]] = None, **kwargs
    ) -> APIResponse:
        """Make PATCH request."""
        return self._request('patch', endpoint, json=data, **kwargs)

    def put(
        self, endpoint: str, data: Optional[Dict[str, Any]] = None, **kwargs
    ) -> APIResponse:
        """Make PUT request."""
        return self._request('put', endpoint, json=data, **kwargs)

    def delete(self, endpoint: str, **kwargs) -> APIResponse:
        """Make DELETE request."""
        return self._request('delete', endpoint, **kwargs)

    def iter_paginated(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        per_page: int = 100,
    ) -> Iterator[Any]:
        """Lazily yield every item of a paginated endpoint.

        Each call starts again from the first page.

        Args:
            endpoint: API endpoint
            params: Query parameters
            per_page: Items per page

        Yields:
            Items from all pages, in API order
        """
        params = dict(params or {})
        params['per_page'] = per_page
        page = 1

        while True:
            params['page'] = page
            response = self.get(endpoint, params=dict(params))

            items = response.data
            if not items:
                break

            yield from items

            if len(items) < per_page:
                break

            link = response.headers.get('link')
            if link is not None and 'rel="next"' not in link:
                break

            page += 1

    @staticmethod
    def _repo_path(repo: RepositoryRef) -> str:
        return f'/repos/{repo.owner}/{repo.name}'

    def get_branch_head_sha(self, repo: RepositoryRef, branch: str) -> str:
        """Get the commit SHA the branch points at.

        Raises:
            GitHubNotFoundError: If the branch does not exist
        """
        response = self.get(
            f'{self._repo_path(repo)}/git/ref/heads/{quote(branch, safe="/")}'
        )
        return response.data['object']['sha']

    def create_branch(self, repo: RepositoryRef, name: str, sha: str) -> Dict[str, Any]:
        """Create a branch pointing at ``sha``.

        Raises:
            GitHubValidationError: If the branch exists or the SHA is unknown
        """
        response = self.post(
            f'{self._repo_path(repo)}/git/refs',
            data={'ref': f'refs/heads/{name}', 'sha': sha},
        )
        return response.data

    def delete_branch(self, repo: RepositoryRef, name: str) -> None:
        """Delete a branch."""
        self.delete(f'{self._repo_path(repo)}/git/refs/heads/{quote(name, safe="/")}')

    def list_open_pull_requests(
        self, repo: RepositoryRef, per_page: int = 100
    ) -> Iterator[PullRequestRef]:
        """Lazily list the open pull requests of a repository."""
        for item in self.iter_paginated(
            f'{self._repo_path(repo)}/pulls',
            params={'state': 'open'},
            per_page=per_page,
        ):
            yield PullRequestRef.from_api(item)

    def retarget_pull_request(
        self, repo: RepositoryRef, number: int, new_base: str
    ) -> Dict[str, Any]:
        """Change the base branch of a pull request."""
        response = self.patch(
            f'{self._repo_path(repo)}/pulls/{number}', data={'base': new_base}
        )
        return response.data

    def set_default_branch(self, repo: RepositoryRef, name: str) -> Dict[str, Any]:
        """Point the repository's default branch at ``name``."""
        response = self.patch(self._repo_path(repo), data={'default_branch': name})
        return response.data

    def get_repository(self, repo: RepositoryRef) -> Dict[str, Any]:
        """Get repository metadata."""
        return self.get(self._repo_path(repo)).data

    def list_organization_repositories(self, org: str) -> Iterator[Dict[str, Any]]:
        """Lazily list every repository of an organization."""
        return self.iter_paginated(f'/orgs/{org}/repos', params={'type': 'all'})

    def list_user_repositories(self, user: str) -> Iterator[Dict[str, Any]]:
        """Lazily list the repositories owned by a user."""
        return self.iter_paginated(f'/users/{user}/repos', params={'type': 'owner'})

    def get_contents(
        self, repo: RepositoryRef, path: str, ref: Optional[str] = None
    ) -> Any:
        """Get a file (dict with decoded ``text``) or a directory listing (list).

        Raises:
            GitHubNotFoundError: If the path does not exist at ``ref``
        """
        params = {'ref': ref} if ref else None
        data = self.get(
            f'{self._repo_path(repo)}/contents/{quote(path)}', params=params
        ).data

        if isinstance(data, dict) and data.get('encoding') == 'base64':
            data = dict(data)
            data['text'] = base64.b64decode(data.get('content', '')).decode('utf-8')
        return data

    def update_file(
        self,
        repo: RepositoryRef,
        path: str,
        text: str,
        sha: str,
        branch: str,
        message: str,
    ) -> Dict[str, Any]:
        """Commit new file content to ``branch``."""
        payload = {
            'message': message,
            'content': base64.b64encode(text.encode('utf-8')).decode('ascii'),
            'sha': sha,
            'branch': branch,
        }
        endpoint = f'{self._repo_path(repo)}/contents/{quote(path)}'
        response = self.put(endpoint, data=payload)
        return response.data

    def get_rate_limit_remaining(self) -> int:
        """Get the number of core API requests left in the current window."""
        response = self.get('/rate_limit')
        return int(response.data['resources']['core']['remaining'])

    def test_connection(self) -> bool:
        """Test connection to the GitHub API.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            response = self.get('/user')
            return response.success
        except GitHubAPIError as e:
            logger.error(f'Connection test failed: {e}')
            return False

    def close(self):
        """Close the client session."""
        self.session.close()
        logger.debug('GitHub client session closed')

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


class GitHubClientFactory:
    """Factory for creating GitHub API clients."""

    @staticmethod
    def create_client(config: GitHubInstanceConfig) -> GitHubClient:
        """Create GitHub client from configuration.

        Raises:
            GitHubAuthenticationError: If no token is configured
        """
        if not config.token:
            raise GitHubAuthenticationError('A personal access token must be provided')

        return GitHubClient(config)
