"""Main CLI entry point for Branch Rename Tool."""

import sys
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..api.client import GitHubClientFactory
from ..api.exceptions import GitHubAPIError
from ..config.config import Config, ConfigurationError, GitHubInstanceConfig
from ..migration.engine import MigrationEngine
from ..migration.orchestrator import MigrationSummary
from ..models.request import MigrationRequest
from ..utils.console import Reporter
from ..utils.logging import setup_logging

console = Console(highlight=False)

DEFAULT_CONFIG_PATHS = ['branch-rename.yaml', '.branch-rename.yaml']


@click.group()
@click.version_option(version=__version__, prog_name='branch-rename')
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=True),
    help='Path to configuration file',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose logging',
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """Branch Rename Tool - Rename the default branch of GitHub repositories."""
    ctx.ensure_object(dict)

    if config:
        ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    setup_logging('DEBUG' if verbose else 'WARNING')


@cli.command()
@click.option(
    '--output',
    '-o',
    default='branch-rename.yaml',
    help='Output configuration file path',
)
def init(output: str) -> None:
    """Initialize a new configuration file."""
    try:
        Config.create_template(output)

        console.print(f'[green]✓[/green] Configuration template created at: {output}')
        console.print(f'[yellow]Please edit {output} with your access token[/yellow]')

    except OSError as e:
        console.print(
            f'[red]✗[/red] Failed to create configuration: {escape(str(e))}'
        )
        sys.exit(1)


@cli.command()
@click.option('--org', help='Rename the branch in every repository of an org')
@click.option('--user', help='Rename the branch in every repository of a user')
@click.option('--repo', help='Rename the branch in a single owner/repo')
@click.option('--old', 'old_branch', help='Branch to rename (default: master)')
@click.option('--new', 'new_branch', help='New branch name (default: main)')
@click.option('--pat', envvar='GITHUB_TOKEN', help='Personal access token')
@click.option('--keep-old', is_flag=True, help='Keep the old branch')
@click.option('--dry-run', is_flag=True, help='Report actions without making changes')
@click.option('--verbose', is_flag=True, help='Report every action')
@click.option(
    '--list-repos-only', is_flag=True, help='Only list the selected repositories'
)
@click.option(
    '--confirm', 'auto_confirm', is_flag=True, help='Do not ask for confirmation'
)
@click.option('--skip-forks', is_flag=True, help='Skip forked repositories')
@click.option(
    '--skip-update-content',
    is_flag=True,
    help='Do not rewrite files referencing the old branch',
)
@click.pass_context
def migrate(
    ctx: click.Context,
    org: Optional[str],
    user: Optional[str],
    repo: Optional[str],
    old_branch: Optional[str],
    new_branch: Optional[str],
    pat: Optional[str],
    keep_old: bool,
    dry_run: bool,
    verbose: bool,
    list_repos_only: bool,
    auto_confirm: bool,
    skip_forks: bool,
    skip_update_content: bool,
) -> None:
    """Rename the default branch of the selected repositories."""
    ctx.ensure_object(dict)
    verbose = verbose or ctx.obj.get('verbose', False)

    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)

        settings = config.rename
        request = MigrationRequest(
            org=org,
            user=user,
            repo=repo,
            old_branch=old_branch or settings.old_branch,
            new_branch=new_branch or settings.new_branch,
            keep_old=keep_old or settings.keep_old,
            dry_run=dry_run,
            verbose=verbose,
            list_repos_only=list_repos_only,
            skip_forks=skip_forks or settings.skip_forks,
            skip_update_content=skip_update_content or settings.skip_update_content,
            token=pat or config.github.token,
        )
        request.validate_request()
    except (
        ConfigurationError,
        ValidationError,
        FileNotFoundError,
        yaml.YAMLError,
    ) as e:
        console.print(f'[red]✗[/red] Configuration error: {escape(str(e))}')
        sys.exit(1)

    if not request.dry_run and not request.list_repos_only:
        if not confirm(auto_confirm, request.old_branch, request.new_branch):
            return

    try:
        engine = MigrationEngine(config, request, Reporter(console))
        summary = engine.run()
    except Exception as e:
        console.print(f'[red]✗[/red] Migration failed: {escape(str(e))}')
        if verbose:
            console.print_exception()
        sys.exit(1)

    if summary is not None and verbose:
        _display_migration_summary(summary)


@cli.command()
@click.option('--pat', envvar='GITHUB_TOKEN', help='Personal access token')
@click.pass_context
def validate(ctx: click.Context, pat: Optional[str]) -> None:
    """Check connectivity to the GitHub API."""
    ctx.ensure_object(dict)
    console.print(
        Panel.fit(
            '[bold cyan]Branch Rename Tool[/bold cyan]\nValidating access...',
            border_style='cyan',
        )
    )

    try:
        config = _load_config(ctx)
        github = GitHubInstanceConfig(
            url=config.github.url,
            token=pat or config.github.token,
            timeout=config.github.timeout,
            rate_limit_per_second=config.github.rate_limit_per_second,
        )

        with GitHubClientFactory.create_client(github) as client:
            if not client.test_connection():
                raise ConnectionError('Cannot connect to the GitHub API')
            remaining = client.get_rate_limit_remaining()

        console.print('[green]✓[/green] Connectivity validation passed')
        console.print(f'[green]✓[/green] {remaining} API requests remaining')

    except (GitHubAPIError, ConnectionError, ValidationError, FileNotFoundError) as e:
        console.print(f'[red]✗[/red] Validation failed: {escape(str(e))}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)


def confirm(auto_confirm: bool, old_branch: str, new_branch: str) -> bool:
    """Ask before renaming unless confirmation was given up front."""
    if auto_confirm:
        return True

    return click.confirm(
        f'Are you sure you want to rename {old_branch} to {new_branch}?',
        default=False,
    )


def _load_config(ctx: click.Context) -> Config:
    """Load configuration from file or environment."""
    config_path = ctx.obj.get('config_path')

    if config_path:
        if not Path(config_path).exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')
        return Config.from_file(config_path)

    for path in DEFAULT_CONFIG_PATHS:
        if Path(path).exists():
            return Config.from_file(path)

    return Config.from_env()


def _setup_logging_with_config(ctx: click.Context, config: Config) -> None:
    """Setup logging with configuration from config file."""
    verbose = ctx.obj.get('verbose', False)

    log_level = 'DEBUG' if verbose else config.logging.level
    setup_logging(
        level=log_level, log_file=config.logging.file, log_format=config.logging.format
    )


def _display_migration_summary(summary: MigrationSummary) -> None:
    """Display per-repository results."""
    title = 'Dry Run Summary' if summary.dry_run else 'Migration Summary'
    table = Table(title=title)
    table.add_column('Repository', style='cyan')
    table.add_column('Status', style='green')
    table.add_column('Pull Requests', style='blue')
    table.add_column('Reason', style='yellow')

    for outcome in summary.outcomes:
        table.add_row(
            outcome.repository,
            outcome.status.value,
            str(len(outcome.retargeted_pull_requests)),
            outcome.reason or '',
        )

    console.print(table)

    if summary.completed_at:
        duration = summary.completed_at - summary.started_at
        console.print(f'\n[blue]Duration:[/blue] {duration}')


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print('\n[red]Interrupted by user[/red]')
        sys.exit(1)


if __name__ == '__main__':
    main()
