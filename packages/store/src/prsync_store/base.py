"""Abstract comment-store interface.

The reconciliation engine depends on CommentStore, not on a concrete
backend, so the hosting service can be swapped (or faked in tests)
without touching core code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prsync_store.models import IssueComment, PatchFile, ReviewComment

STATUS_STATES = ("pending", "success", "error")


class StoreError(RuntimeError):
    """Raised when any read or write against the hosting service fails."""


class CommentStore(ABC):
    """Network operations against one pull request.

    Implementations raise StoreError on every failure. Nothing is retried:
    a run that hits a StoreError aborts, and the next run reconciles from
    scratch.
    """

    @property
    @abstractmethod
    def login(self) -> str:
        """Login of the identity the store acts as."""

    @property
    @abstractmethod
    def head_sha(self) -> str:
        """SHA of the pull request head commit."""

    @property
    def html_url(self) -> str | None:
        """Browser URL of the repository, used to link findings. Optional."""
        return None

    @abstractmethod
    def list_patch_files(self) -> list[PatchFile]:
        """Return every file touched by the pull request with its patch text."""

    @abstractmethod
    def list_review_comments(self) -> list[ReviewComment]:
        """Return all inline review comments, from every author."""

    @abstractmethod
    def create_review_comment(self, commit_sha: str, path: str, position: int, body: str) -> None:
        """Post a new inline comment at ``position`` of ``path``'s patch."""

    @abstractmethod
    def update_review_comment(self, comment_id: int, body: str) -> None:
        """Replace the body of an existing inline comment."""

    @abstractmethod
    def delete_review_comment(self, comment_id: int) -> None:
        """Delete an inline comment."""

    @abstractmethod
    def list_issue_comments(self) -> list[IssueComment]:
        """Return all top-level conversation comments."""

    @abstractmethod
    def create_issue_comment(self, body: str) -> None:
        """Post a top-level conversation comment."""

    @abstractmethod
    def delete_issue_comment(self, comment_id: int) -> None:
        """Delete a top-level conversation comment."""

    @abstractmethod
    def set_commit_status(self, commit_sha: str, state: str, description: str, context: str) -> None:
        """Create a commit status.

        ``state`` is one of STATUS_STATES. Implementations keep any target URL
        previously set for the same context by an external system (a CI job).
        """

    def close(self) -> None:
        """Release any resources held by the store.

        Optional. Default is a no-op so callers can always call close() safely.
        """
