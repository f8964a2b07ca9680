"""Run configuration models."""

from typing import Optional, Tuple

from pydantic import BaseModel, Field, validator

from ..config.config import ConfigurationError, validate_branch_name


class ExecutionMode(BaseModel):
    """How mutating steps behave during a run.

    Passed to every step so that suppression and the matching report line
    are decided in one place.
    """

    dry_run: bool = Field(default=False, description='Suppress mutating calls')
    verbose: bool = Field(default=False, description='Report every action')

    class Config:
        """Pydantic configuration."""

        frozen = True

    @property
    def mutating(self) -> bool:
        return not self.dry_run

    @property
    def announces(self) -> bool:
        """Whether actions are reported before they run (or would run)."""
        return self.verbose or self.dry_run

    def describe(self, action: str) -> str:
        if self.dry_run:
            return f'[dry-run] {action}'
        return action


class MigrationRequest(BaseModel):
    """Immutable configuration for one branch rename run."""

    org: Optional[str] = Field(default=None, description='Organization selector')
    user: Optional[str] = Field(default=None, description='User selector')
    repo: Optional[str] = Field(default=None, description='owner/repo selector')

    old_branch: str = Field(default='master', description='Branch to rename')
    new_branch: str = Field(default='main', description='Name of the new branch')

    keep_old: bool = Field(default=False, description='Keep the old branch')
    dry_run: bool = Field(default=False, description='Report without mutating')
    verbose: bool = Field(default=False, description='Report every action')
    list_repos_only: bool = Field(
        default=False, description='Only print the selected repositories'
    )
    skip_forks: bool = Field(default=False, description='Skip forked repositories')
    skip_update_content: bool = Field(
        default=False, description='Do not rewrite content referencing old branch'
    )

    token: Optional[str] = Field(
        default=None, description='Personal access token', repr=False
    )

    class Config:
        """Pydantic configuration."""

        frozen = True

    @validator('old_branch', 'new_branch')
    def validate_branch(cls, v):
        return validate_branch_name(v)

    @property
    def mode(self) -> ExecutionMode:
        return ExecutionMode(dry_run=self.dry_run, verbose=self.verbose)

    @property
    def selector(self) -> Tuple[str, str]:
        """The single ``(kind, value)`` selector of this run.

        Raises:
            ConfigurationError: If zero or several selectors are set
        """
        selected = [
            (kind, value)
            for kind, value in (
                ('org', self.org),
                ('user', self.user),
                ('repo', self.repo),
            )
            if value
        ]
        if len(selected) != 1:
            raise ConfigurationError(
                'Exactly one of --org, --user or --repo must be provided'
            )
        return selected[0]

    def validate_request(self) -> None:
        """Check everything that must hold before the first remote call.

        Raises:
            ConfigurationError: On a wrong selector count, a malformed
                repository name, a missing token or identical branch names
        """
        kind, value = self.selector

        if kind == 'repo':
            owner, _, name = value.partition('/')
            if not owner or not name:
                raise ConfigurationError(
                    f'Repository must be given as owner/repo, got {value!r}'
                )

        if not self.token:
            raise ConfigurationError(
                'A personal access token is required (--pat or GITHUB_TOKEN)'
            )

        if self.old_branch == self.new_branch:
            raise ConfigurationError('Old and new branch names must differ')
