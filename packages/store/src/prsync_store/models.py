"""Records exchanged with the comment store.

Decoupled from prsync_core so the store layer can be used independently
and has no knowledge of findings, positions or reports.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PatchFile:
    """One file touched by the pull request.

    ``patch`` is None when the host does not render a textual diff
    (binary files, very large files).
    """

    path: str
    patch: str | None = None


@dataclass(frozen=True)
class ReviewComment:
    """An inline review comment, addressed by diff position rather than file line."""

    id: int
    path: str
    position: int | None  # None when the host considers the comment outdated
    body: str
    author: str


@dataclass(frozen=True)
class IssueComment:
    """A top-level pull request conversation comment."""

    id: int
    body: str
    author: str
