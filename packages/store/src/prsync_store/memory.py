"""In-memory store — a complete CommentStore with no network access.

Holds the pull request state (patches, comments, statuses) in plain lists
so runs can be replayed and asserted on without a hosting service.
"""

from __future__ import annotations

import itertools

from prsync_store.base import STATUS_STATES, CommentStore, StoreError
from prsync_store.models import IssueComment, PatchFile, ReviewComment


class InMemoryStore(CommentStore):
    """Mutable pull request state.

    ``statuses`` records every status as ``(sha, state, description, context, target_url)``.
    ``calls`` records each mutating operation name, in order, so tests can
    assert that a run touched nothing.
    """

    def __init__(
        self,
        login: str = "prsync-bot",
        head_sha: str = "0" * 40,
        files: list[PatchFile] | None = None,
        review_comments: list[ReviewComment] | None = None,
        issue_comments: list[IssueComment] | None = None,
        html_url: str | None = None,
    ):
        self._login = login
        self._head_sha = head_sha
        self._html_url = html_url
        self.files: list[PatchFile] = list(files or [])
        self.review_comments: list[ReviewComment] = list(review_comments or [])
        self.issue_comments: list[IssueComment] = list(issue_comments or [])
        self.statuses: list[tuple] = []
        self.calls: list[str] = []
        existing_ids = [c.id for c in self.review_comments] + [c.id for c in self.issue_comments]
        self._ids = itertools.count(max(existing_ids, default=0) + 1)

    @property
    def login(self) -> str:
        return self._login

    @property
    def head_sha(self) -> str:
        return self._head_sha

    @property
    def html_url(self) -> str | None:
        return self._html_url

    def list_patch_files(self) -> list[PatchFile]:
        return list(self.files)

    def list_review_comments(self) -> list[ReviewComment]:
        return list(self.review_comments)

    def create_review_comment(self, commit_sha: str, path: str, position: int, body: str) -> None:
        self.calls.append("create_review_comment")
        self.review_comments.append(
            ReviewComment(id=next(self._ids), path=path, position=position, body=body, author=self._login)
        )

    def update_review_comment(self, comment_id: int, body: str) -> None:
        self.calls.append("update_review_comment")
        index = self._find(self.review_comments, comment_id)
        old = self.review_comments[index]
        self.review_comments[index] = ReviewComment(
            id=old.id, path=old.path, position=old.position, body=body, author=old.author
        )

    def delete_review_comment(self, comment_id: int) -> None:
        self.calls.append("delete_review_comment")
        del self.review_comments[self._find(self.review_comments, comment_id)]

    def list_issue_comments(self) -> list[IssueComment]:
        return list(self.issue_comments)

    def create_issue_comment(self, body: str) -> None:
        self.calls.append("create_issue_comment")
        self.issue_comments.append(IssueComment(id=next(self._ids), body=body, author=self._login))

    def delete_issue_comment(self, comment_id: int) -> None:
        self.calls.append("delete_issue_comment")
        del self.issue_comments[self._find(self.issue_comments, comment_id)]

    def set_commit_status(self, commit_sha: str, state: str, description: str, context: str) -> None:
        if state not in STATUS_STATES:
            raise ValueError(f"Unknown commit state: {state!r}")
        self.calls.append("set_commit_status")
        target_url = None
        for previous in reversed(self.statuses):
            if previous[0] == commit_sha and previous[3] == context:
                target_url = previous[4]
                break
        self.statuses.append((commit_sha, state, description, context, target_url))

    @staticmethod
    def _find(comments: list, comment_id: int) -> int:
        for index, comment in enumerate(comments):
            if comment.id == comment_id:
                return index
        raise StoreError(f"Comment {comment_id} not found")
