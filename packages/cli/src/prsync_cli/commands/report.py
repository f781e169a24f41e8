"""report command — tally a report and render its summary offline."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from prsync_core.findings import load_findings
from prsync_core.report import SeverityReport

console = Console()

_severity_style = {
    "blocker": "bold red",
    "critical": "red",
    "major": "yellow",
    "minor": "cyan",
    "info": "dim",
}


@click.command("report")
@click.option("--report", "report_path", required=True, help="Path to the analysis report (JSON).")
@click.option("--max-issues", type=int, default=None, help="Maximum findings listed in the summary.")
@click.option("--raw", is_flag=True, help="Print the summary Markdown source instead of rendering it.")
@click.pass_context
def report_cmd(ctx, report_path: str, max_issues: int | None, raw: bool):
    """Preview the summary comment and status of a report as if no line were visible inline."""
    config = ctx.obj["config"] if ctx.obj else {}
    try:
        findings = load_findings(report_path)
        report = SeverityReport(
            max_global_issues=max_issues if max_issues is not None else config.get("max_global_issues", 10),
            rules_url=config.get("rules_url"),
        )
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Unable to read report {report_path}: {e}") from e

    for finding in findings:
        report.process(finding, None, reported_inline=False)

    table = Table(title=f"Findings — {report_path}", show_header=True, header_style="bold cyan")
    table.add_column("Severity", width=10)
    table.add_column("Count", justify="right", width=7)
    for label, count in report.tally().items():
        style = _severity_style.get(label, "white")
        table.add_row(f"[{style}]{label}[/{style}]", str(count))
    console.print(table)

    markdown = report.format_for_markdown()
    if raw:
        console.print(markdown, markup=False)
    else:
        console.print(Markdown(markdown))

    style = "green" if report.passed else "red"
    console.print(f"Status: [{style}]{report.status()}[/{style}] ({report.status_description()})")
