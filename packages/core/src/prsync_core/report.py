"""Severity report — tallies findings and renders the summary comment and status line."""

from __future__ import annotations

from dataclasses import dataclass

from prsync_core.findings import Finding, Severity, rule_link

DEFAULT_MAX_GLOBAL_ISSUES = 10

_OVERFLOW_NOTE = (
    "Note: the following issues could not be reported as comments because they are "
    "located on lines that are not displayed in this pull request:"
)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" + ("s" if count != 1 else "")


@dataclass(frozen=True)
class _OverflowEntry:
    finding: Finding
    url: str | None


class SeverityReport:
    """Per-severity counters plus the capped list of findings not shown inline.

    Every finding goes through process(), whether or not it was reported
    inline, so that status() reflects the complete finding set.
    """

    def __init__(self, max_global_issues: int = DEFAULT_MAX_GLOBAL_ISSUES, rules_url: str | None = None):
        if isinstance(max_global_issues, bool) or not isinstance(max_global_issues, int) or max_global_issues < 0:
            raise ValueError(f"max_global_issues must be a non-negative integer, got {max_global_issues!r}")
        self.max_global_issues = max_global_issues
        self.rules_url = rules_url
        self._counts: dict[Severity, int] = {s: 0 for s in Severity}
        self._overflow: list[_OverflowEntry] = []
        self._overflow_total = 0
        self._inline_total = 0

    def process(self, finding: Finding, url: str | None, reported_inline: bool) -> None:
        self._counts[finding.severity] += 1
        if reported_inline:
            self._inline_total += 1
            return
        self._overflow_total += 1
        if len(self._overflow) < self.max_global_issues:
            self._overflow.append(_OverflowEntry(finding, url))

    def count(self, severity: Severity) -> int:
        return self._counts[severity]

    def tally(self) -> dict[str, int]:
        return {s.label: self._counts[s] for s in sorted(Severity, reverse=True)}

    def total(self) -> int:
        return sum(self._counts.values())

    def has_issues(self) -> bool:
        return self.total() > 0

    @property
    def inline_total(self) -> int:
        return self._inline_total

    @property
    def overflow_total(self) -> int:
        return self._overflow_total

    @property
    def passed(self) -> bool:
        return self.count(Severity.BLOCKER) == 0 and self.count(Severity.CRITICAL) == 0

    def status(self) -> str:
        """Commit state for the whole finding set: any blocker or critical fails the check."""
        return "success" if self.passed else "error"

    def status_description(self) -> str:
        total = self.total()
        if total == 0:
            return "No issues found"
        critical = self.count(Severity.CRITICAL)
        blocker = self.count(Severity.BLOCKER)
        if critical or blocker:
            return f"{_plural(total, 'issue')}, with {critical} critical and {blocker} blocker"
        return f"{_plural(total, 'issue')}, no critical nor blocker"

    def format_for_markdown(self) -> str:
        total = self.total()
        if total == 0:
            return "Analysis reported no issues."

        lines = [f"Analysis reported {_plural(total, 'issue')}:"]
        for severity in sorted(Severity, reverse=True):
            count = self._counts[severity]
            if count:
                lines.append(f"* {count} {severity.label}")

        if self._inline_total:
            lines.append("")
            lines.append("Watch the comments in this conversation to review them.")

        if self._overflow_total:
            lines.append("")
            lines.append(_OVERFLOW_NOTE)
            lines.extend(self._format_entry(entry) for entry in self._overflow)
            hidden = self._overflow_total - len(self._overflow)
            if hidden:
                lines.append(f"* ... {hidden} more")
                lines.append("")
                lines.append(
                    f"_Showing {len(self._overflow)} of {self._overflow_total} issues "
                    "that could not be reported inline._"
                )
        return "\n".join(lines) + "\n"

    def _format_entry(self, entry: _OverflowEntry) -> str:
        f = entry.finding
        if entry.url:
            text = f"[{f.message}]({entry.url})"
        else:
            text = f"{f.message} ({f.path or f.component})"
        return f"* **[{f.severity.name}]** {text} {rule_link(f.rule, self.rules_url)}"
