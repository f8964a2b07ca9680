"""Tests for content rewriting."""

from unittest.mock import Mock

from branch_rename.api.exceptions import GitHubAPIError, GitHubNotFoundError
from branch_rename.content.rewriter import ContentRewriter
from branch_rename.content.updaters import (
    ReadmeLinkUpdater,
    WorkflowBranchFilterUpdater,
)
from branch_rename.models.repository import RepositoryRef

BLOB_LINK = 'https://github.com/acme/widgets/blob/master/y\n'
TREE_LINK = 'https://github.com/acme/widgets/tree/master/y\n'


class TestWorkflowBranchFilterUpdater:
    """Test workflow branch filter rewriting."""

    def setup_method(self):
        """Set up test fixtures."""
        self.updater = WorkflowBranchFilterUpdater()
        self.repo = RepositoryRef.parse('acme/widgets')

    def test_inline_list(self):
        """Test rewriting an inline branch list."""
        text = 'on:\n  push:\n    branches: [ master, develop ]\n'

        result = self.updater.apply(self.repo, text, 'master', 'main')

        assert result == 'on:\n  push:\n    branches: [ main, develop ]\n'

    def test_block_list(self):
        """Test rewriting a block branch list, keeping quotes."""
        text = (
            'on:\n'
            '  pull_request:\n'
            '    branches:\n'
            '      - master\n'
            "      - 'release'\n"
            '  push:\n'
            '    branches-ignore:\n'
            '      - "master"\n'
            'jobs:\n'
            '  build:\n'
            '    steps:\n'
            '      - master\n'
        )

        result = self.updater.apply(self.repo, text, 'master', 'main')

        assert result == (
            'on:\n'
            '  pull_request:\n'
            '    branches:\n'
            '      - main\n'
            "      - 'release'\n"
            '  push:\n'
            '    branches-ignore:\n'
            '      - "main"\n'
            'jobs:\n'
            '  build:\n'
            '    steps:\n'
            '      - master\n'
        )

    def test_scalar_value(self):
        """Test rewriting a single branch value."""
        result = self.updater.apply(
            self.repo, '    branches: master\n', 'master', 'main'
        )

        assert result == '    branches: main\n'

    def test_other_mentions_untouched(self):
        """Test that only branch filters are rewritten."""
        text = (
            'on:\n'
            '  push:\n'
            '    branches: [master-next, remaster]\n'
            'env:\n'
            '  TARGET: master\n'
        )

        assert self.updater.apply(self.repo, text, 'master', 'main') == text

    def test_paths(self):
        """Test that only workflow files are listed."""
        client = Mock()
        client.get_contents.return_value = [
            {'type': 'file', 'name': 'ci.yml', 'path': '.github/workflows/ci.yml'},
            {'type': 'file', 'name': 'x.yaml', 'path': '.github/workflows/x.yaml'},
            {'type': 'file', 'name': 'notes.md', 'path': '.github/workflows/notes.md'},
            {'type': 'dir', 'name': 'sub.yml', 'path': '.github/workflows/sub.yml'},
        ]
        repo = RepositoryRef.parse('acme/widgets')

        paths = self.updater.paths(client, repo, 'main')

        assert paths == ['.github/workflows/ci.yml', '.github/workflows/x.yaml']
        client.get_contents.assert_called_once_with(
            repo, '.github/workflows', ref='main'
        )

    def test_paths_without_workflows(self):
        """Test a repository without a workflows directory."""
        client = Mock()
        client.get_contents.side_effect = GitHubNotFoundError('Not Found')

        assert self.updater.paths(client, RepositoryRef.parse('acme/a'), 'main') == []


class TestReadmeLinkUpdater:
    """Test README link rewriting."""

    def setup_method(self):
        """Set up test fixtures."""
        self.updater = ReadmeLinkUpdater()
        self.repo = RepositoryRef.parse('acme/widgets')

    def test_blob_and_tree_links(self):
        """Test rewriting links into the repository tree."""
        text = (
            'See [docs](https://github.com/acme/widgets/blob/master/docs/index.md) '
            'and [src](https://github.com/acme/widgets/tree/master/src).\n'
        )

        result = self.updater.apply(self.repo, text, 'master', 'main')

        assert '/blob/main/docs/index.md' in result
        assert '/tree/main/src' in result
        assert 'master' not in result

    def test_branch_query_parameter(self):
        """Test rewriting badge branch parameters."""
        text = (
            '![build](https://github.com/acme/widgets/actions/workflows/ci.yml/'
            'badge.svg?branch=master)\n'
            '![travis](https://travis-ci.com/acme/widgets.svg?branch=master-old)\n'
        )

        result = self.updater.apply(self.repo, text, 'master', 'main')

        assert 'badge.svg?branch=main)' in result
        assert 'branch=master-old' in result

    def test_ci_badge_path(self):
        """Test rewriting a branch segment in a CI badge URL."""
        text = (
            '[![codecov](https://codecov.io/gh/acme/widgets/branch/master/graph/'
            'badge.svg)](https://codecov.io/gh/acme/widgets)\n'
        )

        result = self.updater.apply(self.repo, text, 'master', 'main')

        assert 'codecov.io/gh/acme/widgets/branch/main/graph/badge.svg' in result

    def test_link_without_trailing_slash(self):
        """Test links ending right after the branch name."""
        text = (
            '[src](https://github.com/acme/widgets/tree/master)\n'
            '[top](https://github.com/acme/widgets/blob/master#readme)\n'
            'https://github.com/acme/widgets/tree/master\n'
            '[next](https://github.com/acme/widgets/tree/master-next)\n'
        )

        result = self.updater.apply(self.repo, text, 'master', 'main')

        assert result == (
            '[src](https://github.com/acme/widgets/tree/main)\n'
            '[top](https://github.com/acme/widgets/blob/main#readme)\n'
            'https://github.com/acme/widgets/tree/main\n'
            '[next](https://github.com/acme/widgets/tree/master-next)\n'
        )

    def test_other_repositories_untouched(self):
        """Test that links to other repositories keep their branch."""
        text = (
            'See [lib](https://github.com/someone-else/lib/blob/master/LICENSE)\n'
            '[fork](https://github.com/acme/widgets-extra/tree/master/src)\n'
            '![ci](https://github.com/other/tool/actions/workflows/ci.yml/'
            'badge.svg?branch=master)\n'
            '![cov](https://codecov.io/gh/other/tool/branch/master/graph/badge.svg)\n'
        )

        assert self.updater.apply(self.repo, text, 'master', 'main') == text

    def test_repository_name_case_insensitive(self):
        """Test that owner and name match regardless of case."""
        text = 'https://github.com/ACME/Widgets/tree/master/src\n'

        result = self.updater.apply(self.repo, text, 'master', 'main')

        assert result == 'https://github.com/ACME/Widgets/tree/main/src\n'

    def test_plain_text_untouched(self):
        """Test that prose mentioning the branch is left alone."""
        text = 'Pull requests should target master.\n'

        assert self.updater.apply(self.repo, text, 'master', 'main') == text


class TestContentRewriter:
    """Test the content rewriter."""

    def setup_method(self):
        """Set up test fixtures."""
        self.client = Mock()
        self.reporter = Mock()
        self.repo = RepositoryRef.parse('acme/widgets')
        self.rewriter = ContentRewriter(
            self.client, self.reporter, updaters=[ReadmeLinkUpdater()]
        )

    def _readme(self, text):
        return {'type': 'file', 'text': text, 'sha': 'file-sha'}

    def test_default_updaters(self):
        """Test that all built-in updaters are used by default."""
        rewriter = ContentRewriter(self.client, self.reporter)

        assert [type(u) for u in rewriter.updaters] == [
            WorkflowBranchFilterUpdater,
            ReadmeLinkUpdater,
        ]

    def test_updates_changed_file(self):
        """Test that a changed file is committed to the new branch."""
        self.client.get_contents.return_value = self._readme(BLOB_LINK)

        updated = self.rewriter.update_content(self.repo, 'master', 'main')

        assert updated == ['README.md']
        self.client.get_contents.assert_called_once_with(
            self.repo, 'README.md', ref='main'
        )
        self.client.update_file.assert_called_once_with(
            self.repo,
            'README.md',
            'https://github.com/acme/widgets/blob/main/y\n',
            'file-sha',
            'main',
            'Update references from master to main',
        )
        self.reporter.info.assert_not_called()

    def test_unchanged_file_not_written(self):
        """Test that files without references are not committed."""
        self.client.get_contents.return_value = self._readme('nothing here\n')

        updated = self.rewriter.update_content(self.repo, 'master', 'main')

        assert updated == []
        self.client.update_file.assert_not_called()

    def test_foreign_links_not_committed(self):
        """Test that a README linking only to other repositories is left alone."""
        self.client.get_contents.return_value = self._readme(
            'https://github.com/someone-else/lib/blob/master/LICENSE\n'
        )

        assert self.rewriter.update_content(self.repo, 'master', 'main') == []
        self.client.update_file.assert_not_called()

    def test_dry_run_verbose(self):
        """Test that verbose dry runs report once, with the dry-run prefix."""
        self.client.get_contents.return_value = self._readme(TREE_LINK)

        self.rewriter.update_content(
            self.repo, 'master', 'main', verbose=True, dry_run=True
        )

        self.reporter.info.assert_called_once_with(
            '[dry-run] Updating README.md in acme/widgets'
        )
        self.client.update_file.assert_not_called()

    def test_dry_run(self):
        """Test that a dry run reads the old branch and writes nothing."""
        self.client.get_contents.return_value = self._readme(TREE_LINK)

        updated = self.rewriter.update_content(
            self.repo, 'master', 'main', verbose=False, dry_run=True
        )

        assert updated == ['README.md']
        self.client.get_contents.assert_called_once_with(
            self.repo, 'README.md', ref='master'
        )
        self.client.update_file.assert_not_called()
        self.reporter.info.assert_called_once_with(
            '[dry-run] Updating README.md in acme/widgets'
        )

    def test_verbose(self):
        """Test that verbose runs announce each write."""
        self.client.get_contents.return_value = self._readme(TREE_LINK)

        self.rewriter.update_content(self.repo, 'master', 'main', verbose=True)

        self.reporter.info.assert_called_once_with('Updating README.md in acme/widgets')
        self.client.update_file.assert_called_once()

    def test_missing_file(self):
        """Test that a missing file is skipped."""
        self.client.get_contents.side_effect = GitHubNotFoundError('Not Found')

        assert self.rewriter.update_content(self.repo, 'master', 'main') == []
        self.client.update_file.assert_not_called()

    def test_write_failure_is_contained(self):
        """Test that a failed commit does not raise."""
        self.client.get_contents.return_value = self._readme(BLOB_LINK)
        self.client.update_file.side_effect = GitHubAPIError('conflict', status_code=409)

        assert self.rewriter.update_content(self.repo, 'master', 'main') == []

    def test_listing_failure_is_contained(self):
        """Test that an updater failing to list files is skipped."""
        updater = Mock()
        updater.name = 'broken'
        updater.paths.side_effect = GitHubAPIError('boom')
        rewriter = ContentRewriter(
            self.client, self.reporter, updaters=[updater, ReadmeLinkUpdater()]
        )
        self.client.get_contents.return_value = self._readme(BLOB_LINK)

        assert rewriter.update_content(self.repo, 'master', 'main') == ['README.md']
