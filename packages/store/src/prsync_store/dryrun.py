"""Dry-run store — reads from a real store, records writes instead of sending them.

Lets a user see exactly which comments a run would create, update or
delete on a live pull request without touching it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prsync_store.base import CommentStore

if TYPE_CHECKING:
    from prsync_store.models import IssueComment, PatchFile, ReviewComment


class DryRunStore(CommentStore):
    """Forwards every read to ``delegate`` and appends every write to ``writes``.

    Each entry in ``writes`` is a tuple whose first element is the operation
    name, followed by its arguments.
    """

    def __init__(self, delegate: CommentStore):
        self._delegate = delegate
        self.writes: list[tuple] = []

    @property
    def login(self) -> str:
        return self._delegate.login

    @property
    def head_sha(self) -> str:
        return self._delegate.head_sha

    @property
    def html_url(self) -> str | None:
        return self._delegate.html_url

    def list_patch_files(self) -> list[PatchFile]:
        return self._delegate.list_patch_files()

    def list_review_comments(self) -> list[ReviewComment]:
        return self._delegate.list_review_comments()

    def list_issue_comments(self) -> list[IssueComment]:
        return self._delegate.list_issue_comments()

    def create_review_comment(self, commit_sha: str, path: str, position: int, body: str) -> None:
        self.writes.append(("create_review_comment", path, position, body))

    def update_review_comment(self, comment_id: int, body: str) -> None:
        self.writes.append(("update_review_comment", comment_id, body))

    def delete_review_comment(self, comment_id: int) -> None:
        self.writes.append(("delete_review_comment", comment_id))

    def create_issue_comment(self, body: str) -> None:
        self.writes.append(("create_issue_comment", body))

    def delete_issue_comment(self, comment_id: int) -> None:
        self.writes.append(("delete_issue_comment", comment_id))

    def set_commit_status(self, commit_sha: str, state: str, description: str, context: str) -> None:
        self.writes.append(("set_commit_status", state, description, context))

    def close(self) -> None:
        self._delegate.close()
