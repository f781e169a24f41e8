"""positions command — show the line to position mapping of a pull request."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prsync_cli.commands.sync import build_store
from prsync_core.config import require_pull_request, resolve_repository
from prsync_core.errors import ConfigurationError, MalformedDiffError
from prsync_core.patch import get_patch_line_content, parse_patch
from prsync_store.base import StoreError

console = Console()


@click.command("positions")
@click.option("--repo", default=None, help="GitHub repository (owner/name or git URL).")
@click.option("--pr", "pr_number", type=int, default=None, help="Pull request number.")
@click.option("--file", "file_path", default=None, help="Only show this file.")
@click.pass_context
def positions_cmd(ctx, repo: str | None, pr_number: int | None, file_path: str | None):
    """Show which new-file lines can carry an inline comment, and at which position."""
    config = dict(ctx.obj["config"])
    config.update({k: v for k, v in {"repository": repo, "pull_request": pr_number}.items() if v is not None})
    try:
        repo_name = resolve_repository(config)
        number = require_pull_request(config)
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e
    if not config.get("github_token"):
        raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")

    store = build_store(config, repo_name, number, dry_run=True)
    try:
        files = [f for f in store.list_patch_files() if file_path is None or f.path == file_path]
    except StoreError as e:
        raise click.ClickException(str(e)) from e
    finally:
        store.close()

    if not files:
        console.print("[yellow]No matching files in this pull request.[/yellow]")
        return

    for f in files:
        try:
            mapping = parse_patch(f.patch)
        except MalformedDiffError as e:
            raise click.ClickException(str(e)) from e

        if not mapping:
            console.print(f"[dim]{f.path}: no commentable lines[/dim]")
            continue

        table = Table(title=f.path, show_header=True, header_style="bold cyan")
        table.add_column("Line", justify="right", width=6)
        table.add_column("Position", justify="right", width=8)
        table.add_column("Content", overflow="fold")
        for line, position in sorted(mapping.items()):
            table.add_row(str(line), str(position), get_patch_line_content(f.patch, line))
        console.print(table)
