"""Migration engine - main entry point for branch rename runs."""

from typing import Optional

from loguru import logger

from ..api.client import GitHubClient, GitHubClientFactory
from ..config.config import Config, GitHubInstanceConfig
from ..content.rewriter import ContentRewriter
from ..models.request import MigrationRequest
from ..repositories import RepositoryEnumerator
from ..utils.console import Reporter
from .orchestrator import MigrationOrchestrator, MigrationSummary
from .strategy import BranchRenameStrategy


class MigrationEngine:
    """Wires the client and collaborators for one run."""

    def __init__(
        self,
        config: Config,
        request: MigrationRequest,
        reporter: Optional[Reporter] = None,
        client: Optional[GitHubClient] = None,
    ):
        """Initialize migration engine.

        The request is validated before any client is created.

        Args:
            config: Tool configuration
            request: Run configuration
            reporter: Console reporter (a default one is created if omitted)
            client: Pre-built GitHub client (built from config if omitted)

        Raises:
            ConfigurationError: If the request is invalid
        """
        request.validate_request()

        self.config = config
        self.request = request
        self.reporter = reporter or Reporter()
        self.logger = logger.bind(component='MigrationEngine')

        self.client = client or GitHubClientFactory.create_client(
            GitHubInstanceConfig(
                url=config.github.url,
                token=request.token,
                timeout=config.github.timeout,
                rate_limit_per_second=config.github.rate_limit_per_second,
            )
        )

        self.enumerator = RepositoryEnumerator(self.client)
        self.rewriter = ContentRewriter(self.client, self.reporter)
        self.strategy = BranchRenameStrategy(
            self.client, self.rewriter, request, self.reporter
        )
        self.orchestrator = MigrationOrchestrator(
            self.client, self.enumerator, self.strategy, request, self.reporter
        )

    def run(self) -> Optional[MigrationSummary]:
        """Execute the run and release the client afterwards.

        Returns:
            Run summary, or None when only listing repositories
        """
        self.logger.debug(
            f'Starting run (dry_run={self.request.dry_run}, '
            f'keep_old={self.request.keep_old})'
        )

        try:
            return self.orchestrator.execute_migration()
        except Exception as e:
            self.logger.error(f'Run failed: {e}')
            raise
        finally:
            self.client.close()
