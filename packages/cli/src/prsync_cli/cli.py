"""CLI entry point for prsync.

Commands:
  sync       mirror an analysis report onto a pull request
  positions  show how changed lines map to review comment positions
  report     render the summary comment of a report without touching GitHub
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.logging import RichHandler

from prsync_cli.commands.positions import positions_cmd
from prsync_cli.commands.report import report_cmd
from prsync_cli.commands.sync import sync_cmd


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )
    # PyGithub and urllib3 log every request at debug level.
    logging.getLogger("github").setLevel(logging.INFO)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


@click.group()
@click.version_option(
    version=importlib.metadata.version("prsync"),
    prog_name="prsync",
)
@click.option(
    "--config",
    "config_path",
    default=".prsync.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRSYNC_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log diagnostics to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Mirror static-analysis findings onto GitHub pull requests."""
    from prsync_cli.auth import resolve_github_token
    from prsync_core.config import load_config
    from prsync_core.errors import ConfigurationError

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e

    # Resolve token early so all subcommands share the same resolution.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ctx.obj["config"] = config


main.add_command(sync_cmd)
main.add_command(positions_cmd)
main.add_command(report_cmd)
