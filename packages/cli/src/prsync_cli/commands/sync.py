"""sync command — mirror an analysis report onto a pull request."""

from __future__ import annotations

import click
from github import GithubException
from rich.console import Console

from prsync_core.config import is_enabled, require_pull_request, resolve_repository
from prsync_core.errors import ConfigurationError, MalformedDiffError
from prsync_core.findings import load_findings
from prsync_core.gh.pull_request import get_client, get_pull, get_repo
from prsync_core.sync import SyncSummary, print_plan, run_sync
from prsync_store.base import StoreError
from prsync_store.dryrun import DryRunStore
from prsync_store.github import GitHubStore

console = Console()


def build_store(config: dict, repo: str, pr_number: int, dry_run: bool):
    """Open the pull request on GitHub and wrap it in a CommentStore.

    In dry-run mode reads still go to GitHub; writes are only recorded.
    """
    client = get_client(config["github_token"], config["endpoint"])
    try:
        repo_obj = get_repo(client, repo)
        store = GitHubStore(client, repo_obj, get_pull(repo_obj, pr_number))
    except GithubException as e:
        raise click.ClickException(f"Unable to open {repo}#{pr_number}: {e}") from e
    return DryRunStore(store) if dry_run else store


def _print_summary(summary: SyncSummary) -> None:
    style = "green" if summary.status == "success" else "red"
    console.print(
        f"\n[bold]{summary.repo}#{summary.pr_number}[/bold] @ {summary.head_sha[:7]}: "
        f"[{style}]{summary.status}[/{style}] ({summary.status_description})"
    )
    console.print(
        f"  {summary.inline_findings} inline, {summary.overflow_findings} in summary; "
        f"comments created {summary.created}, updated {summary.updated}, deleted {summary.deleted}"
    )


@click.command("sync")
@click.option("--report", "report_path", required=True, help="Path to the analysis report (JSON).")
@click.option("--repo", default=None, help="GitHub repository (owner/name or git URL). Overrides config file.")
@click.option("--pr", "pr_number", type=int, default=None, help="Pull request number. Overrides config file.")
@click.option(
    "--dry-run",
    "-n",
    is_flag=True,
    help="Read the pull request but print the planned changes instead of posting them.",
)
@click.option("--no-inline", is_flag=True, help="Report every finding in the summary comment only.")
@click.option("--max-issues", type=int, default=None, help="Maximum findings listed in the summary comment.")
@click.pass_context
def sync_cmd(
    ctx,
    report_path: str,
    repo: str | None,
    pr_number: int | None,
    dry_run: bool,
    no_inline: bool,
    max_issues: int | None,
):
    """Post findings of an analysis report as review comments on a pull request.

    Comments left by earlier runs are updated in place, and removed once
    their finding is gone. A summary comment lists the findings that could
    not be placed inline, and the head commit gets a status check that
    fails on any blocker or critical finding.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub personal access token (or use gh CLI)
    """
    config = dict(ctx.obj["config"])
    overrides = {
        "repository": repo,
        "pull_request": pr_number,
        "inline_comments": False if no_inline else None,
        "max_global_issues": max_issues,
    }
    config.update({k: v for k, v in overrides.items() if v is not None})

    if not is_enabled(config):
        console.print("[yellow]No pull request configured; nothing to decorate.[/yellow]")
        return

    try:
        repo_name = resolve_repository(config)
        number = require_pull_request(config)
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e

    try:
        findings = load_findings(report_path)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Unable to read report {report_path}: {e}") from e

    if not config.get("github_token"):
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )

    store = build_store(config, repo_name, number, dry_run)
    try:
        summary = run_sync(store, findings, config, repo=repo_name, pr_number=number)
    except (MalformedDiffError, StoreError, ValueError) as e:
        raise click.ClickException(str(e)) from e
    finally:
        store.close()

    if dry_run:
        console.print("[bold yellow]Dry run: nothing was posted.[/bold yellow]")
        print_plan(summary.actions)
    _print_summary(summary)
