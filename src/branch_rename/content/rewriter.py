"""Rewrites repository content that refers to the old branch."""

from typing import Iterable, List, Optional

from loguru import logger

from ..api.client import GitHubClient
from ..api.exceptions import GitHubAPIError, GitHubNotFoundError
from ..models.repository import RepositoryRef
from ..models.request import ExecutionMode
from ..utils.console import Reporter
from .updaters import DEFAULT_UPDATERS, ContentUpdater


class ContentRewriter:
    """Applies content updaters to a repository, one commit per changed file.

    Failures while reading or writing a file are logged and skipped; they are
    never raised to the caller.
    """

    def __init__(
        self,
        client: GitHubClient,
        reporter: Reporter,
        updaters: Optional[Iterable[ContentUpdater]] = None,
    ):
        self.client = client
        self.reporter = reporter
        self.updaters: List[ContentUpdater] = (
            list(updaters)
            if updaters is not None
            else [updater() for updater in DEFAULT_UPDATERS]
        )
        self.logger = logger.bind(component='ContentRewriter')

    def update_content(
        self,
        repo: RepositoryRef,
        old_branch: str,
        new_branch: str,
        verbose: bool = False,
        dry_run: bool = False,
    ) -> List[str]:
        """Rewrite every file that still refers to ``old_branch``.

        In a dry run the new branch does not exist yet, so files are read
        from the old branch and nothing is written.

        Returns:
            Paths of the files that were (or in a dry run would be) updated
        """
        mode = ExecutionMode(dry_run=dry_run, verbose=verbose)
        ref = old_branch if mode.dry_run else new_branch
        message = f'Update references from {old_branch} to {new_branch}'
        updated = []

        for updater in self.updaters:
            try:
                paths = updater.paths(self.client, repo, ref)
            except GitHubAPIError as e:
                self.logger.warning(
                    f'Could not list {updater.name} files in {repo}: {e}'
                )
                continue

            for path in paths:
                if self._update_file(
                    repo, path, ref, updater, old_branch, new_branch, message, mode
                ):
                    updated.append(path)

        return updated

    def _update_file(
        self,
        repo: RepositoryRef,
        path: str,
        ref: str,
        updater: ContentUpdater,
        old_branch: str,
        new_branch: str,
        message: str,
        mode: ExecutionMode,
    ) -> bool:
        try:
            contents = self.client.get_contents(repo, path, ref=ref)
        except GitHubNotFoundError:
            self.logger.debug(f'{path} not found in {repo}@{ref}')
            return False
        except GitHubAPIError as e:
            self.logger.warning(f'Could not read {path} in {repo}: {e}')
            return False

        if not isinstance(contents, dict) or 'text' not in contents:
            return False

        text = contents['text']
        rewritten = updater.apply(repo, text, old_branch, new_branch)
        if rewritten == text:
            return False

        if mode.announces:
            self.reporter.info(mode.describe(f'Updating {path} in {repo}'))

        if not mode.mutating:
            return True

        try:
            self.client.update_file(
                repo, path, rewritten, contents['sha'], new_branch, message
            )
        except GitHubAPIError as e:
            self.logger.warning(f'Could not update {path} in {repo}: {e}')
            return False

        return True
