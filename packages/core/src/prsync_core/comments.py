"""Reconciliation of desired inline comments against those already posted.

The posted comment stream must mirror the current finding set exactly:
a comment whose body is unchanged is left alone, a changed body is edited
in place, a new slot gets a new comment, and every previously posted
comment that no desired comment claims is deleted. Running twice on an
unchanged diff therefore issues no mutation at all on the second run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prsync_core.positions import RepositoryPositionIndex
    from prsync_store.base import CommentStore
    from prsync_store.models import ReviewComment

logger = logging.getLogger(__name__)

CREATE = "create"
UPDATE = "update"
DELETE = "delete"


@dataclass(frozen=True)
class DesiredComment:
    """Target state of one inline comment: every finding on ``path``:``line``, concatenated."""

    path: str
    line: int
    body: str


@dataclass(frozen=True)
class CommentAction:
    """One store mutation planned by the reconciler."""

    kind: str  # CREATE | UPDATE | DELETE
    path: str | None = None
    position: int | None = None
    body: str | None = None
    comment_id: int | None = None


class ExistingCommentIndex:
    """Previously posted comments of the acting identity, by (path, position).

    Comments from any other author are dropped on load and never touched.
    Every kept comment starts as a deletion candidate; confirm() records
    that the current run still wants it. Candidates and confirmations are
    two separate sets, diffed once at the end by stale_ids().
    """

    def __init__(self, comments: Iterable[ReviewComment], login: str):
        self._by_location: dict[str, dict[int, ReviewComment]] = {}
        self._candidates: set[int] = set()
        self._confirmed: set[int] = set()
        for comment in comments:
            if comment.author != login:
                continue
            self._candidates.add(comment.id)
            if comment.position is None:
                # Outdated on the host: no longer anchored, so it can only be retired.
                continue
            self._by_location.setdefault(comment.path, {})[comment.position] = comment

    @classmethod
    def from_store(cls, store: CommentStore, login: str | None = None) -> ExistingCommentIndex:
        return cls(store.list_review_comments(), login if login is not None else store.login)

    def get(self, path: str, position: int) -> ReviewComment | None:
        return self._by_location.get(path, {}).get(position)

    def confirm(self, comment_id: int) -> None:
        self._confirmed.add(comment_id)

    def stale_ids(self) -> list[int]:
        return sorted(self._candidates - self._confirmed)

    def __len__(self) -> int:
        return len(self._candidates)


class CommentReconciler:
    """Plans create/update/delete actions turning the posted comments into the desired ones.

    Callers pass only desired comments whose line is visible in the diff;
    the reconciler does not filter, it fails loudly on an unmapped line.
    """

    def __init__(self, positions: RepositoryPositionIndex, existing: ExistingCommentIndex):
        self._positions = positions
        self._existing = existing

    def plan(self, desired: Iterable[DesiredComment]) -> list[CommentAction]:
        actions: list[CommentAction] = []
        for comment in desired:
            position = self._positions.position_for(comment.path, comment.line)
            current = self._existing.get(comment.path, position)
            if current is None:
                actions.append(CommentAction(CREATE, path=comment.path, position=position, body=comment.body))
                continue
            self._existing.confirm(current.id)
            if current.body != comment.body:
                actions.append(
                    CommentAction(
                        UPDATE, path=comment.path, position=position, body=comment.body, comment_id=current.id
                    )
                )
            else:
                logger.debug("Comment %d on %s:%d is up to date", current.id, comment.path, comment.line)

        actions.extend(CommentAction(DELETE, comment_id=comment_id) for comment_id in self._existing.stale_ids())
        return actions


def apply_actions(store: CommentStore, actions: Iterable[CommentAction], commit_sha: str) -> dict[str, int]:
    """Send ``actions`` to ``store`` one at a time and return how many of each kind ran.

    The first StoreError propagates: mutations already sent stay applied
    and the next run reconciles whatever is left.
    """
    counts = {CREATE: 0, UPDATE: 0, DELETE: 0}
    for action in actions:
        if action.kind == CREATE:
            store.create_review_comment(commit_sha, action.path, action.position, action.body)
        elif action.kind == UPDATE:
            store.update_review_comment(action.comment_id, action.body)
        elif action.kind == DELETE:
            store.delete_review_comment(action.comment_id)
        else:
            raise ValueError(f"Unknown comment action: {action.kind!r}")
        counts[action.kind] += 1
    return counts
