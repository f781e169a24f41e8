"""Analysis findings and the JSON report they are read from."""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

logger = logging.getLogger(__name__)


class Severity(enum.IntEnum):
    """Ordered severities, least to most severe."""

    INFO = 0
    MINOR = 1
    MAJOR = 2
    CRITICAL = 3
    BLOCKER = 4

    @classmethod
    def parse(cls, value: str) -> Severity:
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown severity: {value!r}") from None

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class Finding:
    """A single issue reported by the analysis engine.

    ``path`` is the repository-relative file path, or None when the
    component key could not be resolved to a file. ``line`` is None for
    file- or project-level findings, which are never reported inline.
    """

    component: str
    path: str | None
    line: int | None
    severity: Severity
    message: str
    rule: str
    is_new: bool = True


def finding_sort_key(finding: Finding) -> tuple:
    """Most severe first, then grouped by file and line.

    Rule and message break the remaining ties so that the concatenated body
    of a shared line is identical from one run to the next.
    """
    return (
        -int(finding.severity),
        finding.path or finding.component,
        finding.line is not None,
        finding.line or 0,
        finding.rule,
        finding.message,
    )


def rule_link(rule: str, rules_url: str | None = None) -> str:
    if rules_url:
        return f"[`{rule}`]({rules_url}{quote(rule, safe='')})"
    return f"`{rule}`"


def format_inline(finding: Finding, rules_url: str | None = None) -> str:
    """Render one finding as a line of an inline review comment."""
    return f"**[{finding.severity.name}]** {finding.message} {rule_link(finding.rule, rules_url)}"


def _resolve_component_paths(components: list[dict]) -> dict[str, str]:
    """Map component keys to repository paths.

    A component with a ``moduleKey`` is nested under that module's path, so
    modules must be listed before their files, as the analysis engine does.
    """
    paths: dict[str, str] = {}
    for component in components:
        key = component.get("key")
        if not key:
            continue
        path = component.get("path") or ""
        module_key = component.get("moduleKey")
        prefix = paths.get(module_key, "") if module_key else ""
        paths[key] = f"{prefix}/{path}" if prefix and path else (prefix or path)
    return paths


def _parse_flag(value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"Expected a boolean, got {value!r}")


def _parse_issue(issue: dict, paths: dict[str, str]) -> Finding:
    component = issue.get("component") or issue.get("path") or ""
    path = issue.get("path") or paths.get(component) or None
    line = issue.get("line")
    return Finding(
        component=component,
        path=path,
        line=int(line) if line is not None else None,
        severity=Severity.parse(issue.get("severity", "")),
        message=str(issue.get("message", "")),
        rule=str(issue.get("rule", "")),
        is_new=_parse_flag(issue.get("isNew"), default=True),
    )


def parse_findings(report: dict) -> list[Finding]:
    """Build findings from a decoded issues report."""
    if not isinstance(report, dict) or not isinstance(report.get("issues", []), list):
        raise ValueError("Analysis report must be an object with an 'issues' list")
    paths = _resolve_component_paths(report.get("components") or [])
    findings = [_parse_issue(issue, paths) for issue in report.get("issues", [])]
    logger.debug("Loaded %d finding(s)", len(findings))
    return findings


def load_findings(report_path: str) -> list[Finding]:
    """Read findings from the JSON issues report at ``report_path``."""
    p = Path(report_path)
    if not p.exists():
        raise FileNotFoundError(f"Analysis report not found: {report_path}")
    try:
        report = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Analysis report is not valid JSON: {e}") from e
    return parse_findings(report)
