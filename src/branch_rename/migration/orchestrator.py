"""Fleet-level control loop for a branch rename run."""

from datetime import datetime
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from ..api.client import GitHubClient
from ..models.repository import RepositoryRef
from ..models.request import MigrationRequest
from ..repositories import RepositoryEnumerator
from ..utils.console import Reporter
from .strategy import BranchRenameStrategy, MigrationOutcome, MigrationStatus


class MigrationSummary(BaseModel):
    """Summary of a completed run."""

    total_repositories: int = Field(..., description='Repositories processed')
    completed: int = Field(..., description='Repositories migrated')
    skipped: int = Field(..., description='Repositories skipped')
    dry_run: bool = Field(default=False, description='Mutations were suppressed')

    started_at: datetime = Field(..., description='Run start time')
    completed_at: Optional[datetime] = Field(
        default=None, description='Run completion time'
    )

    outcomes: List[MigrationOutcome] = Field(
        default_factory=list, description='Per-repository outcomes, in run order'
    )

    class Config:
        """Pydantic configuration."""

        json_encoders = {datetime: lambda v: v.isoformat() if v else None}


class MigrationOrchestrator:
    """Runs the branch rename over every selected repository, one at a time."""

    def __init__(
        self,
        client: GitHubClient,
        enumerator: RepositoryEnumerator,
        strategy: BranchRenameStrategy,
        request: MigrationRequest,
        reporter: Reporter,
    ):
        """Initialize migration orchestrator.

        Args:
            client: GitHub API client, used for the quota report
            enumerator: Produces the repositories to migrate
            strategy: Migrates a single repository
            request: Run configuration
            reporter: Console reporter
        """
        self.client = client
        self.enumerator = enumerator
        self.strategy = strategy
        self.request = request
        self.reporter = reporter
        self.logger = logger.bind(component='MigrationOrchestrator')

    def execute_migration(self) -> Optional[MigrationSummary]:
        """Execute the run.

        A repository whose old branch cannot be read is reported and skipped.
        Any other error stops the run and is raised unchanged; repositories
        after the failing one are not touched.

        Returns:
            Summary of the run, or None when only listing repositories
        """
        repositories = self.enumerator.list_repositories(self.request)

        if self.request.list_repos_only:
            self.reporter.lines(repositories)
            return None

        mode = self.request.mode
        if mode.verbose:
            remaining = self.client.get_rate_limit_remaining()
            self.reporter.info(f'You have {remaining} API requests remaining')

        self.logger.info(
            f'Renaming {self.request.old_branch} to {self.request.new_branch} '
            f'in {len(repositories)} repositories'
        )
        started_at = datetime.now()
        outcomes = []

        for full_name in repositories:
            repo = RepositoryRef.parse(full_name)
            try:
                outcome = self.strategy.migrate_repository(repo, mode)
            except Exception as e:
                self.logger.error(f'Migration of {repo} failed: {e}')
                raise

            if outcome.status == MigrationStatus.SKIPPED:
                self.reporter.warning(f'Skipping {repo}: {outcome.reason}')
            outcomes.append(outcome)

        summary = MigrationSummary(
            total_repositories=len(outcomes),
            completed=sum(1 for o in outcomes if o.status == MigrationStatus.COMPLETED),
            skipped=sum(1 for o in outcomes if o.status == MigrationStatus.SKIPPED),
            dry_run=mode.dry_run,
            started_at=started_at,
            completed_at=datetime.now(),
            outcomes=outcomes,
        )

        self.logger.info(
            f'Run finished: {summary.completed} migrated, {summary.skipped} skipped'
        )
        self.reporter.success('Done')
        return summary
