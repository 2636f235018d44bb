"""globrun CLI — watch glob patterns and run commands when files change."""

from __future__ import annotations

import logging
import sys

import click

from globrun import __version__
from globrun.core.config import GlobrunConfig
from globrun.core.engine import WatchSession
from globrun.core.hooks import HookContext, HookEvent
from globrun.patterns.grouping import group_by_directory
from globrun.patterns.models import PatternSpec, parse_pattern_spec

PATTERN_HELP = (
    "A glob pattern that matches files paired with a command to run when any "
    "matching file changes. Separate the pattern and the command with ':'. "
    "The command will have access to an environment variable named $FILE "
    "which will contain the path to the file that changed. Note that if many "
    "files change quickly, the debounce setting may cause only one or some of "
    "the files to trigger the command to run. If you need per-file commands, "
    "use --key file or disable debounce. "
    "Examples: '**/*.pyc:rm $FILE', 'pyproject.toml:pip install -e .', "
    "'**/*:git status'"
)


def _parse_specs(patterns: tuple[str, ...]) -> list[PatternSpec]:
    return [parse_pattern_spec(p) for p in patterns]


def _configure_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _echo_hook(context: HookContext) -> None:
    data = context.data
    if context.event is HookEvent.PROCESS_STARTED:
        click.echo(f"  Started [{data['key']}] pid {data['pid']}: {data['command']}", err=True)
    elif context.event is HookEvent.PROCESS_SUPERSEDED:
        click.echo(f"  Superseded [{data['key']}]", err=True)
    elif context.event is HookEvent.PROCESS_EXITED:
        status = "cancelled" if data["cancelled"] else f"exit {data['returncode']}"
        click.echo(f"  Finished [{data['key']}] ({status})", err=True)
    elif context.event is HookEvent.ON_FILE_CHANGE:
        click.echo(f"  Changed: {data['path']}", err=True)
    elif context.event is HookEvent.ON_ERROR:
        click.echo(f"  Error [{data['key']}]: {data['error']}", err=True)


@click.group()
@click.version_option(version=__version__, prog_name="globrun")
def main() -> None:
    """globrun — watch for file patterns and run commands when they change."""


@main.command()
@click.option(
    "--pattern", "-p", "patterns", multiple=True, metavar="PATTERN:COMMAND", help=PATTERN_HELP
)
@click.option(
    "--key",
    "-k",
    default=None,
    metavar="DEBOUNCE-KEY",
    help="Key to use for debouncing: 'all', 'pattern', 'command' or 'file'. [default: pattern]",
)
@click.option(
    "--debounce",
    "-d",
    type=float,
    default=None,
    metavar="SECONDS",
    help="Floating-point seconds to wait before running, per DEBOUNCE-KEY. [default: 1]",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every change and process.")
def watch(patterns: tuple[str, ...], key: str | None, debounce: float | None, verbose: bool) -> None:
    """Watch the patterns' directories and run commands on changes."""
    if not patterns:
        click.echo("No patterns given", err=True)
        sys.exit(1)

    overrides: dict[str, object] = {}
    if key is not None:
        overrides["debounce_key"] = key
    if debounce is not None:
        overrides["debounce_seconds"] = debounce

    try:
        config = GlobrunConfig(**overrides)
        session = WatchSession(_parse_specs(patterns), config)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    _configure_logging(config.log_level, verbose)
    if verbose:
        for event in HookEvent:
            session.hooks.register(event, _echo_hook)

    for base_dir, group in session.groups.items():
        click.echo(f"Watching {base_dir} ({len(group)} pattern(s))")
    click.echo(f"  Debounce: {config.debounce_seconds}s per {config.debounce_key}")
    click.echo("Press Ctrl+C to stop.")

    try:
        session.run_forever()
    except KeyboardInterrupt:
        click.echo("\nStopping...")
    finally:
        session.close()


@main.command()
@click.option(
    "--pattern", "-p", "patterns", multiple=True, metavar="PATTERN:COMMAND", help=PATTERN_HELP
)
def plan(patterns: tuple[str, ...]) -> None:
    """Show which directories would be watched, without watching."""
    if not patterns:
        click.echo("No patterns given", err=True)
        sys.exit(1)

    try:
        groups = group_by_directory(_parse_specs(patterns))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for base_dir, group in groups.items():
        click.echo(base_dir)
        for entry in group.entries:
            click.echo(f"  {entry.pattern.decompile()}: {entry.command}")


if __name__ == "__main__":
    main()
