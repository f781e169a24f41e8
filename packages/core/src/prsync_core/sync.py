"""Core pull request decoration pipeline.

One run reads the pull request (patches, posted comments), routes every
finding either to an inline comment or to the summary overflow list,
reconciles the inline comments, replaces the summary comment and sets the
commit status. Nothing is kept between runs: every index is rebuilt from
the hosting service and the finding source.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from rich.console import Console

from prsync_core.comments import (
    CREATE,
    DELETE,
    UPDATE,
    CommentAction,
    CommentReconciler,
    DesiredComment,
    ExistingCommentIndex,
    apply_actions,
)
from prsync_core.findings import Finding, finding_sort_key, format_inline
from prsync_core.gh.pull_request import file_url
from prsync_core.positions import RepositoryPositionIndex
from prsync_core.report import DEFAULT_MAX_GLOBAL_ISSUES, SeverityReport
from prsync_store.base import CommentStore, StoreError

console = Console()
logger = logging.getLogger(__name__)

SUMMARY_MARKER = "<!-- prsync-summary -->"
_STATUS_DESCRIPTION_LIMIT = 140  # GitHub rejects longer commit status descriptions
_PENDING_DESCRIPTION = "Analysis in progress"


@dataclass
class SyncSummary:
    """Outcome of run_sync — what was posted and the resulting check state."""

    repo: str
    pr_number: int
    head_sha: str
    status: str  # "success" | "error"
    status_description: str
    created: int = 0
    updated: int = 0
    deleted: int = 0
    inline_findings: int = 0
    overflow_findings: int = 0
    tally: dict[str, int] = field(default_factory=dict)
    actions: list[CommentAction] = field(default_factory=list)
    synced_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


def _truncate(text: str, limit: int = _STATUS_DESCRIPTION_LIMIT) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."


def collect_desired_comments(
    findings: Iterable[Finding],
    positions: RepositoryPositionIndex,
    report: SeverityReport,
    link: Callable[[Finding], str | None] | None = None,
) -> list[DesiredComment]:
    """Tally every finding and group the inline-visible ones per file line.

    A finding goes inline only when it is new, carries a line, and that
    line is visible in the diff. Everything else lands in the report's
    overflow list. Findings are processed in severity/location order so a
    line shared by several findings always gets the same body.
    """
    bodies: dict[tuple[str, int], list[str]] = {}
    for finding in sorted(findings, key=finding_sort_key):
        inline = (
            finding.is_new
            and finding.path is not None
            and finding.line is not None
            and positions.has_file_line(finding.path, finding.line)
        )
        if inline:
            bodies.setdefault((finding.path, finding.line), []).append(
                format_inline(finding, report.rules_url) + "\n"
            )
        else:
            logger.debug("Finding %s at %s:%s goes to the summary", finding.rule, finding.path, finding.line)
        report.process(finding, link(finding) if link else None, inline)

    return [DesiredComment(path, line, "".join(parts)) for (path, line), parts in bodies.items()]


def replace_summary_comment(store: CommentStore, body: str) -> bool:
    """Make ``body`` the only summary comment of the acting identity.

    Previous summaries are recognised by a hidden marker and deleted; an
    identical summary is kept as-is. Returns True when a new comment was posted.
    """
    body = f"{body.rstrip()}\n{SUMMARY_MARKER}"
    login = store.login
    kept = False
    for comment in store.list_issue_comments():
        if comment.author != login or SUMMARY_MARKER not in comment.body:
            continue
        if not kept and comment.body == body:
            kept = True
            continue
        store.delete_issue_comment(comment.id)
    if not kept:
        store.create_issue_comment(body)
    return not kept


def _report_failure(store: CommentStore, head_sha: str, context: str, error: Exception) -> None:
    """Best-effort error status so the pull request shows the broken run."""
    try:
        store.set_commit_status(head_sha, "error", _truncate(f"Analysis failed: {error}"), context)
    except StoreError as e:
        logger.warning("Could not set error status after failed run: %s", e)


def run_sync(
    store: CommentStore,
    findings: Iterable[Finding],
    config: dict,
    repo: str = "",
    pr_number: int = 0,
) -> SyncSummary:
    """Mirror ``findings`` onto the pull request behind ``store``.

    Raises ValueError for an unusable summary cap before touching the pull
    request. Any later failure (MalformedDiffError, StoreError, ...) is
    re-raised after trying to flag the commit with an error status.
    """
    context = config.get("status_context") or "prsync"
    head_sha = store.head_sha
    findings = list(findings)
    if config.get("new_issues_only"):
        findings = [f for f in findings if f.is_new]

    report = SeverityReport(
        max_global_issues=config.get("max_global_issues", DEFAULT_MAX_GLOBAL_ISSUES),
        rules_url=config.get("rules_url"),
    )

    try:
        store.set_commit_status(head_sha, "pending", _PENDING_DESCRIPTION, context)

        positions = RepositoryPositionIndex.from_patch_files(
            store.list_patch_files(), inline_enabled=config.get("inline_comments", True)
        )
        existing = ExistingCommentIndex.from_store(store)
        console.print(
            f"[dim]{len(positions)} file(s) in pull request, {len(existing)} previous comment(s) by {store.login}.[/dim]"
        )

        html_url = store.html_url
        desired = collect_desired_comments(
            findings, positions, report, link=lambda f: file_url(html_url, head_sha, f.path, f.line)
        )

        actions = CommentReconciler(positions, existing).plan(desired)
        counts = apply_actions(store, actions, head_sha)

        replace_summary_comment(store, report.format_for_markdown())
        store.set_commit_status(head_sha, report.status(), _truncate(report.status_description()), context)
    except Exception as e:
        # Any failure after the pending status must leave the check in error.
        logger.error("Pull request decoration aborted: %s", e)
        _report_failure(store, head_sha, context, e)
        raise

    return SyncSummary(
        repo=repo,
        pr_number=pr_number,
        head_sha=head_sha,
        status=report.status(),
        status_description=report.status_description(),
        created=counts[CREATE],
        updated=counts[UPDATE],
        deleted=counts[DELETE],
        inline_findings=report.inline_total,
        overflow_findings=report.overflow_total,
        tally=report.tally(),
        actions=actions,
    )


def print_plan(actions: list[CommentAction]) -> None:
    """Print planned comment mutations to the terminal (dry-run output)."""
    _kind_color = {CREATE: "green", UPDATE: "yellow", DELETE: "red"}
    if not actions:
        console.print("[green]Review comments are up to date. Nothing to change.[/green]")
        return
    console.print(f"\n[bold]{len(actions)} comment change(s) planned[/bold]\n")
    for action in actions:
        color = _kind_color.get(action.kind, "white")
        if action.kind == DELETE:
            console.print(f"[{color}]{action.kind.upper()}[/{color}]  comment #{action.comment_id}")
            continue
        target = f"[bold cyan]{action.path}[/bold cyan]  position [bold]{action.position}[/bold]"
        console.print(f"[{color}]{action.kind.upper()}[/{color}]  {target}")
        for line in (action.body or "").splitlines():
            console.print(f"  {line}", markup=False)
        console.print()
