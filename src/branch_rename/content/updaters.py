"""Rules for rewriting file content that refers to the old branch."""

import re
from abc import ABC, abstractmethod
from typing import List

from ..api.client import GitHubClient
from ..api.exceptions import GitHubNotFoundError
from ..models.repository import RepositoryRef

WORKFLOWS_DIR = '.github/workflows'

CI_BADGE_HOSTS = (
    'travis-ci.org',
    'travis-ci.com',
    'circleci.com',
    'codecov.io',
    'coveralls.io',
    'ci.appveyor.com',
)

_BRANCH_KEY = re.compile(
    r'^(?P<indent>\s*)(?P<key>branches(?:-ignore)?)\s*:\s*(?P<rest>.*)$'
)
_BLOCK_ITEM = re.compile(r'^(?P<indent>\s*)-\s*(?P<value>.+?)\s*$')

_URL_CHAR = r'[^\s)"\'<>\]]'
_URL_BRANCH_END = r'(?=[/)#?\s"\'<>\]]|$)'


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def _swap_item(item: str, old: str, new: str) -> str:
    """Replace a YAML scalar equal to ``old``, keeping its quoting."""
    stripped = item.strip()
    if _unquote(stripped) != old:
        return item
    if stripped != old:
        quote = stripped[0]
        replacement = f'{quote}{new}{quote}'
    else:
        replacement = new
    return item.replace(stripped, replacement, 1)


class ContentUpdater(ABC):
    """A rewrite rule for one kind of file."""

    name = 'content'

    @abstractmethod
    def paths(self, client: GitHubClient, repo: RepositoryRef, ref: str) -> List[str]:
        """List the files at ``ref`` this updater looks at."""

    @abstractmethod
    def apply(
        self, repo: RepositoryRef, text: str, old_branch: str, new_branch: str
    ) -> str:
        """Return ``text`` of a file in ``repo`` with ``old_branch`` rewritten."""


class WorkflowBranchFilterUpdater(ContentUpdater):
    """Rewrites ``branches`` filters in GitHub Actions workflow files."""

    name = 'workflows'

    def paths(self, client: GitHubClient, repo: RepositoryRef, ref: str) -> List[str]:
        try:
            listing = client.get_contents(repo, WORKFLOWS_DIR, ref=ref)
        except GitHubNotFoundError:
            return []
        if not isinstance(listing, list):
            return []
        return [
            entry['path']
            for entry in listing
            if entry.get('type') == 'file'
            and entry['name'].endswith(('.yml', '.yaml'))
        ]

    def apply(
        self, repo: RepositoryRef, text: str, old_branch: str, new_branch: str
    ) -> str:
        lines = text.splitlines(keepends=True)
        block_indent = None

        for i, line in enumerate(lines):
            body = line.rstrip('\r\n')
            ending = line[len(body):]

            if block_indent is not None:
                item = _BLOCK_ITEM.match(body)
                if item and len(item.group('indent')) >= block_indent:
                    value = item.group('value')
                    swapped = _swap_item(value, old_branch, new_branch)
                    if swapped != value:
                        lines[i] = body[: item.start('value')] + swapped + ending
                    continue
                if not body.strip() or body.lstrip().startswith('#'):
                    continue
                block_indent = None

            key = _BRANCH_KEY.match(body)
            if not key:
                continue

            rest = key.group('rest')
            if not rest or rest.startswith('#'):
                block_indent = len(key.group('indent'))
            elif rest.startswith('[') and ']' in rest:
                inner_end = rest.index(']')
                items = rest[1:inner_end].split(',')
                swapped = ','.join(_swap_item(x, old_branch, new_branch) for x in items)
                new_rest = '[' + swapped + rest[inner_end:]
                lines[i] = body[: key.start('rest')] + new_rest + ending
            else:
                swapped = _swap_item(rest, old_branch, new_branch)
                lines[i] = body[: key.start('rest')] + swapped + ending

        return ''.join(lines)


class ReadmeLinkUpdater(ContentUpdater):
    """Rewrites branch names in README links and CI badge URLs.

    Only URLs that point at the repository being migrated are touched; links
    to other repositories keep their branch.
    """

    name = 'readme'

    def paths(self, client: GitHubClient, repo: RepositoryRef, ref: str) -> List[str]:
        return ['README.md']

    def apply(
        self, repo: RepositoryRef, text: str, old_branch: str, new_branch: str
    ) -> str:
        old = re.escape(old_branch)
        # owner/name are case-insensitive on GitHub, branch names are not
        slug = (
            rf'(?i:{re.escape(repo.owner)}/{re.escape(repo.name)})(?=[/.?#])'
        )

        text = re.sub(
            rf'(github\.com/{slug}/(?:blob|tree)/){old}{_URL_BRANCH_END}',
            rf'\g<1>{new_branch}',
            text,
        )
        text = re.sub(
            rf'(/{slug}{_URL_CHAR}*?[?&]branch=){old}(?![\w.-])',
            rf'\g<1>{new_branch}',
            text,
        )

        hosts = '|'.join(re.escape(host) for host in CI_BADGE_HOSTS)
        return re.sub(
            rf'((?:{hosts})/(?:[\w.-]+/)*?{slug}/(?:[\w.-]+/)*?){old}(?=[/.?])',
            rf'\g<1>{new_branch}',
            text,
        )


DEFAULT_UPDATERS = (WorkflowBranchFilterUpdater, ReadmeLinkUpdater)
