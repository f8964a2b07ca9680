"""Per-repository branch rename."""

from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from ..api.client import GitHubClient
from ..api.exceptions import GitHubAPIError
from ..content.rewriter import ContentRewriter
from ..models.repository import RepositoryRef
from ..models.request import ExecutionMode, MigrationRequest
from ..utils.console import Reporter
from . import steps


class MigrationStep(str, Enum):
    """Steps of a repository migration, in execution order."""

    RESOLVE_OLD_SHA = 'resolve_old_sha'
    CREATE_NEW_BRANCH = 'create_new_branch'
    RETARGET_PULL_REQUESTS = 'retarget_pull_requests'
    SET_DEFAULT_BRANCH = 'set_default_branch'
    DELETE_OLD_BRANCH = 'delete_old_branch'
    UPDATE_CONTENT = 'update_content'
    COMPLETED = 'completed'


class MigrationStatus(str, Enum):
    """Final state of a repository migration.

    A failed migration has no status: its error propagates to the caller.
    """

    COMPLETED = 'completed'
    SKIPPED = 'skipped'


class MigrationOutcome(BaseModel):
    """Result of migrating one repository."""

    repository: str = Field(..., description='owner/repo identifier')
    status: MigrationStatus = Field(..., description='Migration status')
    dry_run: bool = Field(default=False, description='Mutations were suppressed')
    reason: Optional[str] = Field(default=None, description='Why it was skipped')

    started_at: datetime = Field(..., description='Migration start time')
    completed_at: Optional[datetime] = Field(
        default=None, description='Migration completion time'
    )

    steps: List[MigrationStep] = Field(
        default_factory=list, description='Steps entered, in order'
    )
    retargeted_pull_requests: List[int] = Field(
        default_factory=list,
        description='Pull requests moved (or, in a dry run, to be moved)',
    )

    class Config:
        """Pydantic configuration."""

        json_encoders = {datetime: lambda v: v.isoformat() if v else None}

    @property
    def skipped(self) -> bool:
        return self.status == MigrationStatus.SKIPPED


class BranchRenameStrategy:
    """Moves one repository from the old default branch to the new one.

    Steps run in a fixed order. Only failing to resolve the old branch is
    handled here, by skipping the repository; any later failure is raised and
    may leave the repository partially migrated.

    The strategy keeps no state between repositories.
    """

    def __init__(
        self,
        client: GitHubClient,
        rewriter: ContentRewriter,
        request: MigrationRequest,
        reporter: Reporter,
    ):
        """Initialize branch rename strategy.

        Args:
            client: GitHub API client
            rewriter: Content rewriter invoked as the last step
            request: Run configuration (branch names, keep/skip options)
            reporter: Console reporter for announced actions
        """
        self.client = client
        self.rewriter = rewriter
        self.old_branch = request.old_branch
        self.new_branch = request.new_branch
        self.keep_old = request.keep_old
        self.skip_update_content = request.skip_update_content
        self.default_mode = request.mode
        self.reporter = reporter
        self.logger = logger.bind(component=self.__class__.__name__)

    def migrate_repository(
        self, repo: RepositoryRef, mode: Optional[ExecutionMode] = None
    ) -> MigrationOutcome:
        """Migrate a single repository.

        Args:
            repo: Repository to migrate
            mode: Execution mode, defaults to the one of the request

        Returns:
            A completed outcome, or a skipped one when the old branch cannot
            be resolved

        Raises:
            GitHubAPIError: If any step after resolving the old branch fails
        """
        mode = mode or self.default_mode
        outcome = MigrationOutcome(
            repository=repo.full_name,
            status=MigrationStatus.COMPLETED,
            dry_run=mode.dry_run,
            started_at=datetime.now(),
        )

        outcome.steps.append(MigrationStep.RESOLVE_OLD_SHA)
        try:
            sha = steps.resolve_sha(self.client, repo, self.old_branch)
        except GitHubAPIError as e:
            self.logger.debug(f'Could not resolve {self.old_branch} in {repo}: {e}')
            outcome.status = MigrationStatus.SKIPPED
            outcome.reason = f'unable to read branch {self.old_branch}: {e}'
            outcome.completed_at = datetime.now()
            return outcome

        if mode.verbose:
            self.reporter.info(f'{repo}: {self.old_branch} is at {sha}')

        outcome.steps.append(MigrationStep.CREATE_NEW_BRANCH)
        self._gated(
            mode,
            f'Creating branch {self.new_branch} at {sha} in {repo}',
            steps.create_branch,
            self.client,
            repo,
            self.new_branch,
            sha,
        )

        outcome.steps.append(MigrationStep.RETARGET_PULL_REQUESTS)
        outcome.retargeted_pull_requests = self._retarget_pull_requests(repo, mode)

        outcome.steps.append(MigrationStep.SET_DEFAULT_BRANCH)
        self._gated(
            mode,
            f'Setting default branch of {repo} to {self.new_branch}',
            self.client.set_default_branch,
            repo,
            self.new_branch,
        )

        if not self.keep_old:
            outcome.steps.append(MigrationStep.DELETE_OLD_BRANCH)
            self._gated(
                mode,
                f'Deleting branch {self.old_branch} in {repo}',
                steps.remove_branch,
                self.client,
                repo,
                self.old_branch,
            )

        if not self.skip_update_content:
            outcome.steps.append(MigrationStep.UPDATE_CONTENT)
            steps.update_content(
                self.rewriter, repo, self.old_branch, self.new_branch, mode
            )

        outcome.steps.append(MigrationStep.COMPLETED)
        outcome.completed_at = datetime.now()
        self.logger.debug(f'Finished {repo} ({"dry run" if mode.dry_run else "live"})')
        return outcome

    def _retarget_pull_requests(
        self, repo: RepositoryRef, mode: ExecutionMode
    ) -> List[int]:
        # Drained in full before any pull request is updated.
        pull_requests = list(self.client.list_open_pull_requests(repo))
        self.logger.debug(f'{repo} has {len(pull_requests)} open pull requests')

        retargeted = []
        for pull_request in pull_requests:
            if pull_request.base_ref != self.old_branch:
                continue
            self._gated(
                mode,
                f'Updating PR #{pull_request.number} in {repo} '
                f'to point at {self.new_branch}',
                self.client.retarget_pull_request,
                repo,
                pull_request.number,
                self.new_branch,
            )
            retargeted.append(pull_request.number)

        return retargeted

    def _gated(
        self,
        mode: ExecutionMode,
        description: str,
        action: Callable[..., Any],
        *args: Any,
    ) -> None:
        """Announce a mutating action, then run it unless in a dry run."""
        if mode.announces:
            self.reporter.info(mode.describe(description))
        if mode.mutating:
            action(*args)
