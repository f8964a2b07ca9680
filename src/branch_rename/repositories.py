"""Selection of the repositories a run operates on."""

from typing import Any, Dict, Iterable, List

from loguru import logger

from .api.client import GitHubClient
from .models.repository import RepositoryRef
from .models.request import MigrationRequest


class RepositoryEnumerator:
    """Turns a selector into an ordered list of ``owner/repo`` identifiers."""

    def __init__(self, client: GitHubClient):
        self.client = client
        self.logger = logger.bind(component='RepositoryEnumerator')

    def list_repositories(self, request: MigrationRequest) -> List[str]:
        """List the repositories selected by the request, in API order.

        Organization and user listings leave out archived repositories, and
        forks as well when ``skip_forks`` is set. A single repository is
        returned as long as it exists.
        """
        kind, value = request.selector

        if kind == 'repo':
            data = self.client.get_repository(RepositoryRef.parse(value))
            return [data.get('full_name', value)]

        if kind == 'org':
            listing = self.client.list_organization_repositories(value)
        else:
            listing = self.client.list_user_repositories(value)

        repositories = self._filter(listing, request.skip_forks)
        self.logger.debug(
            f'Selected {len(repositories)} repositories for {kind} {value}'
        )
        return repositories

    def _filter(self, listing: Iterable[Dict[str, Any]], skip_forks: bool) -> List[str]:
        selected = []
        for data in listing:
            full_name = data['full_name']
            if data.get('archived'):
                self.logger.debug(f'Skipping archived repository {full_name}')
                continue
            if skip_forks and data.get('fork'):
                self.logger.debug(f'Skipping fork {full_name}')
                continue
            selected.append(full_name)
        return selected
