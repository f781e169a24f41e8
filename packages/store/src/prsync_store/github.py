"""GitHubStore — CommentStore backed by the GitHub REST API via PyGithub.

The store wraps one pull request. Every PyGithub or transport failure is
re-raised as StoreError so callers deal with a single failure type.
"""

from __future__ import annotations

import functools
import logging

import requests
from github import GithubException

from prsync_store.base import STATUS_STATES, CommentStore, StoreError
from prsync_store.models import IssueComment, PatchFile, ReviewComment

logger = logging.getLogger(__name__)

_TRANSPORT_ERRORS = (GithubException, requests.RequestException)


def _wrap(action: str):
    """Decorator turning GitHub and network failures into StoreError."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except _TRANSPORT_ERRORS as e:
                raise StoreError(f"Unable to {action}: {e}") from e

        return wrapper

    return decorator


def _author(obj) -> str:
    # Comments from deleted accounts come back without a user.
    user = getattr(obj, "user", None)
    return user.login if user is not None else ""


class GitHubStore(CommentStore):
    """Reads and mutates review state of a single GitHub pull request.

    ``client`` is a ``github.Github`` instance, ``repo`` and ``pull`` the
    matching PyGithub objects. They are injected rather than built here so
    the CLI owns credential and endpoint resolution.
    """

    def __init__(self, client, repo, pull):
        self._client = client
        self._repo = repo
        self._pull = pull
        self._login: str | None = None
        self._commits: dict[str, object] = {}

    @property
    @_wrap("resolve the authenticated user")
    def login(self) -> str:
        if self._login is None:
            self._login = self._client.get_user().login
        return self._login

    @property
    def head_sha(self) -> str:
        return self._pull.head.sha

    @property
    def html_url(self) -> str | None:
        return self._repo.html_url

    def _get_commit(self, sha: str):
        if sha not in self._commits:
            self._commits[sha] = self._repo.get_commit(sha)
        return self._commits[sha]

    @_wrap("list pull request files")
    def list_patch_files(self) -> list[PatchFile]:
        return [PatchFile(path=f.filename, patch=f.patch) for f in self._pull.get_files()]

    @_wrap("list review comments")
    def list_review_comments(self) -> list[ReviewComment]:
        return [
            ReviewComment(id=c.id, path=c.path, position=c.position, body=c.body or "", author=_author(c))
            for c in self._pull.get_review_comments()
        ]

    @_wrap("create review comment")
    def create_review_comment(self, commit_sha: str, path: str, position: int, body: str) -> None:
        # The single-comment endpoint no longer accepts a diff position, a
        # review carrying one positioned comment does.
        self._pull.create_review(
            commit=self._get_commit(commit_sha),
            event="COMMENT",
            comments=[{"path": path, "position": position, "body": body}],
        )
        logger.debug("Created review comment on %s at position %d", path, position)

    @_wrap("update review comment")
    def update_review_comment(self, comment_id: int, body: str) -> None:
        self._pull.get_review_comment(comment_id).edit(body)
        logger.debug("Updated review comment %d", comment_id)

    @_wrap("delete review comment")
    def delete_review_comment(self, comment_id: int) -> None:
        self._pull.get_review_comment(comment_id).delete()
        logger.debug("Deleted review comment %d", comment_id)

    @_wrap("list pull request comments")
    def list_issue_comments(self) -> list[IssueComment]:
        return [
            IssueComment(id=c.id, body=c.body or "", author=_author(c)) for c in self._pull.get_issue_comments()
        ]

    @_wrap("comment the pull request")
    def create_issue_comment(self, body: str) -> None:
        self._pull.create_issue_comment(body)

    @_wrap("delete pull request comment")
    def delete_issue_comment(self, comment_id: int) -> None:
        self._pull.get_issue_comment(comment_id).delete()

    @_wrap("update commit status")
    def set_commit_status(self, commit_sha: str, state: str, description: str, context: str) -> None:
        if state not in STATUS_STATES:
            raise ValueError(f"Unknown commit state: {state!r}")
        commit = self._get_commit(commit_sha)
        kwargs = {"description": description, "context": context}
        target_url = self._previous_target_url(commit, context)
        if target_url:
            kwargs["target_url"] = target_url
        commit.create_status(state, **kwargs)

    @staticmethod
    def _previous_target_url(commit, context: str) -> str | None:
        """Return the target URL of the latest status for ``context``, if any.

        GitHub lists statuses newest first, so the first match wins.
        """
        for status in commit.get_statuses():
            if status.context == context:
                return status.target_url
        return None
