"""
Command-line interface for GitMaster.
"""

import json
import logging
import posixpath
import shlex
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Optional, Tuple

import click
import yaml

from . import __version__
from .actions import GIT, GITHUB, ActionSpec, get_action, list_actions
from .config import AppConfig, get_config_manager
from .dispatcher import ActionDispatcher
from .error_handling import ErrorKind, GitMasterError
from .glossary import GLOSSARY, lookup
from .logging import LoggerConfig, setup_logging
from .models import ActionResult, mask_token

logger = logging.getLogger(__name__)

GIT_ACTION_NAMES = [spec.name for spec in list_actions(GIT)]

RECONNECT_HINT = "Run 'gitmaster connect' to enter a GitHub token."


@click.group()
@click.version_option(version=__version__)
@click.option(
    '--config', '-c',
    type=click.Path(exists=True, path_type=Path),
    help='Path to a YAML configuration file'
)
@click.option(
    '--verbose', '-v',
    count=True,
    help='Increase verbosity (use -v or -vv)'
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: int) -> None:
    """
    GitMaster - run git commands and manage your GitHub repositories.

    Git commands run in the current directory. GitHub commands use the token
    saved by 'gitmaster connect'.
    """
    ctx.ensure_object(dict)
    ctx.obj.setdefault('config_file', config)
    ctx.obj.setdefault('verbose', verbose)


# ----------------------------------------------------------------------
# Git commands
# ----------------------------------------------------------------------

@cli.command(name='git', context_settings={'ignore_unknown_options': True})
@click.argument('action', type=click.Choice(GIT_ACTION_NAMES, case_sensitive=False))
@click.argument('value', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def git_command(ctx: click.Context, action: str, value: Tuple[str, ...]) -> None:
    """
    Run a git command.

    Examples:

        gitmaster git status

        gitmaster git commit "Fix typo in README"

        gitmaster git push feature/login
    """
    spec = get_action(action)
    if value and not spec.parameters:
        raise click.UsageError(f"'{spec.name}' takes no arguments (got: {' '.join(value)})")

    provided: Dict[str, str] = {}
    if spec.parameters and value:
        joined = shlex.join(value) if spec.split_input else " ".join(value)
        provided[spec.parameters[0].name] = joined

    parameters = prompt_parameters(spec, provided, only_required=True)
    finish(ctx, get_dispatcher(ctx).dispatch(spec.name, parameters))


# ----------------------------------------------------------------------
# GitHub commands
# ----------------------------------------------------------------------

@cli.command()
@click.option('--token', prompt='GitHub Personal Access Token', hide_input=True, help='Personal access token')
@click.pass_context
def connect(ctx: click.Context, token: str) -> None:
    """Connect to GitHub and save the token for later sessions."""
    dispatcher = get_dispatcher(ctx)
    result = dispatcher.dispatch("connect", {"token": token})
    render_result(result)
    if not result.succeeded:
        ctx.exit(1)

    render_repositories(dispatcher.list_repositories())


@cli.command(name='reset-token')
@click.pass_context
def reset_token(ctx: click.Context) -> None:
    """Forget the saved GitHub token."""
    finish(ctx, get_dispatcher(ctx).dispatch("reset-token"))


@cli.command()
@click.pass_context
def repos(ctx: click.Context) -> None:
    """List the repositories of the connected account."""
    result = get_dispatcher(ctx).list_repositories()
    if not result.succeeded:
        finish(ctx, result)
    render_repositories(result)


@cli.command()
@click.argument('repo')
@click.argument('path', default='')
@click.option('--list', 'list_only', is_flag=True, help='Print the listing and exit')
@click.pass_context
def browse(ctx: click.Context, repo: str, path: str, list_only: bool) -> None:
    """
    Browse the contents of REPO (owner/name), starting at PATH.

    Enter an item number to open a folder or view a file, 'b' to go back to
    the parent folder, or 'q' to quit.
    """
    dispatcher = get_dispatcher(ctx)
    if list_only:
        finish(ctx, dispatcher.navigate(repo, path))
        return

    result = browse_loop(dispatcher, repo, path)
    if result is not None and not result.succeeded:
        ctx.exit(1)


@cli.command(name='cat')
@click.argument('repo')
@click.argument('path')
@click.pass_context
def cat_file(ctx: click.Context, repo: str, path: str) -> None:
    """Print the file at PATH in REPO (owner/name)."""
    finish(ctx, get_dispatcher(ctx).dispatch("view-file", {"repo": repo, "path": path}))


@cli.command(name='add-file')
@click.argument('repo')
@click.option('--local-path', prompt='Local file path', help='File to upload')
@click.option('--repo-path', prompt='Repository path (e.g., src/example.py)', help='Destination path in the repository')
@click.option('--branch', default='main', show_default=True, help='Branch to commit to')
@click.option('--message', '-m', default='Add new file from local', show_default=True, help='Commit message')
@click.pass_context
def add_file(ctx: click.Context, repo: str, local_path: str, repo_path: str, branch: str, message: str) -> None:
    """Add a local file to REPO (owner/name) with a new commit."""
    finish(ctx, get_dispatcher(ctx).dispatch("add-file", {
        "repo": repo,
        "local_path": local_path,
        "repo_path": repo_path,
        "branch": branch,
        "message": message
    }))


@cli.command(name='delete-repo')
@click.argument('repo')
@click.option('--confirm', 'confirmation', help='Repository full name, to skip the confirmation prompt')
@click.pass_context
def delete_repo(ctx: click.Context, repo: str, confirmation: Optional[str]) -> None:
    """Delete REPO (owner/name) permanently."""
    if confirmation is None:
        click.echo(f"This permanently deletes {repo} and cannot be undone.")
        confirmation = click.prompt(f"Type {repo} to confirm", default='', show_default=False)

    finish(ctx, get_dispatcher(ctx).dispatch("delete-repo", {"repo": repo, "confirm": confirmation}))


# ----------------------------------------------------------------------
# Help and configuration
# ----------------------------------------------------------------------

@cli.command()
@click.argument('term', required=False)
@click.pass_context
def glossary(ctx: click.Context, term: Optional[str]) -> None:
    """Explain git terminology. Without TERM, list every entry."""
    if term:
        definition = lookup(term)
        if definition is None:
            click.echo(f"Unknown term: {term}", err=True)
            ctx.exit(1)
        click.echo(definition)
        return

    for name, definition in GLOSSARY.items():
        click.echo(f"{name}: {definition}")


@cli.command()
@click.option(
    '--format', '-f', 'output_format',
    type=click.Choice(['table', 'json', 'yaml'], case_sensitive=False),
    default='table',
    help='Output format for configuration display'
)
@click.pass_context
def config(ctx: click.Context, output_format: str) -> None:
    """Display the effective configuration."""
    app_config = load_app_config(ctx)
    config_dict = asdict(app_config)
    if config_dict['github'].get('access_token'):
        config_dict['github']['access_token'] = mask_token(config_dict['github']['access_token'])

    if output_format == 'json':
        click.echo(json.dumps(config_dict, indent=2, default=str))
    elif output_format == 'yaml':
        click.echo(yaml.dump(config_dict, default_flow_style=False))
    else:
        display_config_table(config_dict)


# ----------------------------------------------------------------------
# Interactive menu
# ----------------------------------------------------------------------

@cli.command()
@click.pass_context
def menu(ctx: click.Context) -> None:
    """Interactive menu with every git and GitHub action."""
    dispatcher = get_dispatcher(ctx)
    actions = list_actions(GIT) + list_actions(GITHUB)

    while True:
        click.echo("")
        status = "Connected to GitHub" if dispatcher.is_connected else "Please enter a GitHub token"
        click.echo(f"GitMaster - {status}")
        for index, spec in enumerate(actions, start=1):
            click.echo(f"{index:3}. [{spec.category}] {spec.name:<13} {spec.description}")
        click.echo("  g. Git terminology")
        click.echo("  q. Exit")

        choice = click.prompt("Select an action", default='q', show_default=False).strip().lower()
        if choice in ('q', 'quit', 'exit'):
            return
        if choice == 'g':
            ctx.invoke(glossary)
            continue

        spec = select_action(actions, choice)
        if spec is None:
            click.echo(f"Invalid selection: {choice}", err=True)
            continue

        if spec.name == "browse":
            repo = click.prompt("Repository (owner/name)")
            browse_loop(dispatcher, repo, "")
            continue

        result = dispatcher.dispatch(spec.name, prompt_parameters(spec, {}))
        render_result(result)
        if spec.name == "connect" and result.succeeded:
            render_repositories(dispatcher.list_repositories())


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------

def load_app_config(ctx: click.Context) -> AppConfig:
    """Load configuration once per invocation, reporting problems as usage errors."""
    if ctx.obj.get('app_config') is None:
        try:
            ctx.obj['app_config'] = get_config_manager(ctx.obj.get('config_file')).get_config()
        except GitMasterError as e:
            raise click.ClickException(f"Invalid configuration: {e}")
    return ctx.obj['app_config']


def get_dispatcher(ctx: click.Context) -> ActionDispatcher:
    """Build the dispatcher (and logging) on first use."""
    if ctx.obj.get('dispatcher') is None:
        app_config = load_app_config(ctx)
        configure_logging(app_config, ctx.obj.get('verbose', 0))
        ctx.obj['dispatcher'] = ActionDispatcher.from_config(app_config)
        logger.debug(f"Dispatcher ready (working directory: {app_config.git.working_dir or '.'})")
    return ctx.obj['dispatcher']


def configure_logging(app_config: AppConfig, verbose: int) -> None:
    """Set up logging; console verbosity follows -v, the log file follows configuration."""
    if verbose == 0:
        level = app_config.logging.level if app_config.logging.file else "WARNING"
    elif verbose == 1:
        level = "INFO"
    else:
        level = "DEBUG"

    setup_logging(LoggerConfig(
        level=level,
        file_path=app_config.logging.file,
        format_string=app_config.logging.format,
        max_file_size=app_config.logging.max_file_size,
        backup_count=app_config.logging.backup_count,
        audit_file=app_config.logging.audit_file
    ))


def select_action(actions, choice: str) -> Optional[ActionSpec]:
    """Resolve a menu choice given as a number or an action name."""
    if choice.isdigit():
        index = int(choice)
        if 1 <= index <= len(actions):
            return actions[index - 1]
        return None
    for spec in actions:
        if spec.name == choice:
            return spec
    return None


def prompt_parameters(spec: ActionSpec, provided: Dict[str, str], only_required: bool = False) -> Dict[str, str]:
    """
    Ask for every parameter of ``spec`` that was not provided.

    Args:
        spec: Action being prepared
        provided: Values already known
        only_required: Skip prompts for optional parameters

    Returns:
        Parameter values keyed by name
    """
    values = dict(provided)
    for parameter in spec.parameters:
        if values.get(parameter.name):
            continue
        if only_required and not parameter.required:
            continue

        if parameter.default is not None:
            default = parameter.default
        elif not parameter.required:
            default = ''
        else:
            default = None

        values[parameter.name] = click.prompt(
            parameter.prompt.rstrip(':'),
            default=default,
            hide_input=parameter.secret,
            show_default=bool(default)
        )
    return values


def browse_loop(dispatcher: ActionDispatcher, repo: str, path: str) -> Optional[ActionResult]:
    """
    Navigate a repository one directory at a time.

    Returns:
        The last failed result, or None when the user quits normally
    """
    path = path.strip('/')
    while True:
        result = dispatcher.navigate(repo, path)
        if not result.succeeded:
            render_result(result)
            return result

        click.echo(f"\nContents of {repo}/{path}")
        for index, entry in enumerate(result.items, start=1):
            click.echo(f"{index:3}. {entry.display_name()}")

        choice = click.prompt(
            "Item number to open, 'b' for back, 'q' to quit", default='q', show_default=False
        ).strip().lower()

        if choice == 'q':
            return None
        if choice == 'b':
            if not path:
                return None
            path = posixpath.dirname(path)
            continue
        if not choice.isdigit() or not 1 <= int(choice) <= len(result.items):
            click.echo("Please select a file or folder.", err=True)
            continue

        entry = result.items[int(choice) - 1]
        if entry.is_directory:
            path = entry.path
            continue

        file_result = dispatcher.dispatch("view-file", {"repo": repo, "path": entry.path})
        if file_result.succeeded:
            click.echo(f"\n--- {entry.path} ---")
        render_result(file_result)


def render_repositories(result: ActionResult) -> None:
    if not result.succeeded:
        render_result(result)
        return
    if not result.items:
        click.echo("No repositories found.")
        return
    for index, repo in enumerate(result.items, start=1):
        click.echo(f"{index:3}. {repo.full_name}")


def render_result(result: ActionResult) -> None:
    """Print a result: output to stdout, errors and warnings to stderr."""
    if result.output:
        click.echo(result.output)
    if result.error_message:
        click.echo(f"Error: {result.error_message}", err=True)
    if result.error_kind in (ErrorKind.INVALID_CREDENTIAL, ErrorKind.MISSING_CREDENTIAL):
        click.echo(RECONNECT_HINT, err=True)
    if result.warning:
        click.echo(f"Warning: {result.warning}", err=True)


def finish(ctx: click.Context, result: ActionResult) -> None:
    """Render a result and exit non-zero if it failed."""
    render_result(result)
    if not result.succeeded:
        ctx.exit(1)


def display_config_table(config_dict: Dict) -> None:
    """Display configuration in table format."""
    click.echo("\nCurrent Configuration:")
    click.echo("-" * 50)

    for section_name, section in config_dict.items():
        click.echo(f"\n[{section_name}]")
        for key, value in section.items():
            click.echo(f"  {key}: {value}")


def main() -> None:
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == '__main__':
    main()
