"""Step executors, one remote query or mutation each."""

from ..api.client import GitHubClient
from ..content.rewriter import ContentRewriter
from ..models.repository import RepositoryRef
from ..models.request import ExecutionMode


def resolve_sha(client: GitHubClient, repo: RepositoryRef, branch: str) -> str:
    return client.get_branch_head_sha(repo, branch)


def create_branch(
    client: GitHubClient, repo: RepositoryRef, name: str, sha: str
) -> None:
    client.create_branch(repo, name, sha)


def remove_branch(client: GitHubClient, repo: RepositoryRef, name: str) -> None:
    client.delete_branch(repo, name)


def update_content(
    rewriter: ContentRewriter,
    repo: RepositoryRef,
    old_branch: str,
    new_branch: str,
    mode: ExecutionMode,
) -> None:
    """Run the content rewriter; it honors dry-run on its own."""
    rewriter.update_content(
        repo, old_branch, new_branch, verbose=mode.verbose, dry_run=mode.dry_run
    )
