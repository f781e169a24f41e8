"""Tests for comment reconciliation: create, update, confirm and retire."""

from unittest.mock import MagicMock

import pytest

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
from prsync_core.positions import RepositoryPositionIndex
from prsync_store.base import StoreError
from prsync_store.memory import InMemoryStore
from prsync_store.models import ReviewComment

BOT = "prsync-bot"
POSITIONS = RepositoryPositionIndex({"src/a.py": {10: 3, 11: 4, 12: 5}, "src/b.py": {1: 1}})


def make_comment(comment_id, path="src/a.py", position=3, body="**[MAJOR]** x `r:1`\n", author=BOT):
    return ReviewComment(id=comment_id, path=path, position=position, body=body, author=author)


def plan(existing, desired):
    index = ExistingCommentIndex(existing, BOT)
    return CommentReconciler(POSITIONS, index).plan(desired)


class TestExistingCommentIndex:
    def test_other_authors_are_ignored(self):
        index = ExistingCommentIndex([make_comment(1), make_comment(2, author="alice")], BOT)
        assert len(index) == 1
        assert index.get("src/a.py", 3).id == 1
        assert index.stale_ids() == [1]

    def test_confirmed_comments_are_not_stale(self):
        index = ExistingCommentIndex([make_comment(1), make_comment(2, position=4)], BOT)
        index.confirm(2)
        assert index.stale_ids() == [1]

    def test_outdated_comment_is_only_a_candidate(self):
        index = ExistingCommentIndex([make_comment(7, position=None)], BOT)
        assert index.get("src/a.py", 3) is None
        assert index.stale_ids() == [7]

    def test_from_store_uses_store_login(self):
        store = InMemoryStore(login=BOT, review_comments=[make_comment(1), make_comment(2, author="bob")])
        index = ExistingCommentIndex.from_store(store)
        assert index.stale_ids() == [1]


class TestReconciler:
    def test_new_slot_is_created(self):
        actions = plan([], [DesiredComment("src/a.py", 11, "body\n")])
        assert actions == [CommentAction(CREATE, path="src/a.py", position=4, body="body\n")]

    def test_unchanged_body_is_a_no_op(self):
        existing = [make_comment(1, position=3, body="same\n")]
        assert plan(existing, [DesiredComment("src/a.py", 10, "same\n")]) == []

    def test_changed_body_is_updated_once(self):
        existing = [make_comment(1, position=3, body="old\n")]
        actions = plan(existing, [DesiredComment("src/a.py", 10, "new\n")])
        assert actions == [CommentAction(UPDATE, path="src/a.py", position=3, body="new\n", comment_id=1)]

    def test_unclaimed_comment_is_deleted_exactly_once(self):
        existing = [make_comment(1, position=3, body="keep\n"), make_comment(2, position=5, body="gone\n")]
        actions = plan(existing, [DesiredComment("src/a.py", 10, "keep\n")])
        assert actions == [CommentAction(DELETE, comment_id=2)]

    def test_other_authors_comments_are_never_deleted(self):
        existing = [make_comment(9, author="alice")]
        assert plan(existing, []) == []

    def test_deletes_come_after_creates_and_updates(self):
        existing = [make_comment(1, position=3, body="old\n"), make_comment(2, path="src/b.py", position=1)]
        actions = plan(existing, [DesiredComment("src/a.py", 10, "new\n"), DesiredComment("src/a.py", 12, "n\n")])
        assert [a.kind for a in actions] == [UPDATE, CREATE, DELETE]

    def test_invisible_line_fails_loudly(self):
        with pytest.raises(KeyError):
            plan([], [DesiredComment("src/a.py", 99, "x\n")])

    def test_second_run_is_idempotent(self):
        store = InMemoryStore(login=BOT)
        desired = [DesiredComment("src/a.py", 10, "a\n"), DesiredComment("src/b.py", 1, "b\n")]

        first = CommentReconciler(POSITIONS, ExistingCommentIndex.from_store(store)).plan(desired)
        apply_actions(store, first, "sha")
        second = CommentReconciler(POSITIONS, ExistingCommentIndex.from_store(store)).plan(desired)

        assert len(first) == 2
        assert second == []


class TestApplyActions:
    def test_counts_and_store_calls(self):
        store = InMemoryStore(login=BOT, review_comments=[make_comment(1), make_comment(2, position=4)])
        actions = [
            CommentAction(CREATE, path="src/a.py", position=5, body="c\n"),
            CommentAction(UPDATE, path="src/a.py", position=3, body="u\n", comment_id=1),
            CommentAction(DELETE, comment_id=2),
        ]
        counts = apply_actions(store, actions, "sha")
        assert counts == {CREATE: 1, UPDATE: 1, DELETE: 1}
        assert store.calls == ["create_review_comment", "update_review_comment", "delete_review_comment"]
        assert {c.body for c in store.review_comments} == {"c\n", "u\n"}

    def test_store_error_aborts_remaining_actions(self):
        store = MagicMock()
        store.update_review_comment.side_effect = StoreError("boom")
        actions = [CommentAction(UPDATE, body="u", comment_id=1), CommentAction(DELETE, comment_id=2)]
        with pytest.raises(StoreError):
            apply_actions(store, actions, "sha")
        store.delete_review_comment.assert_not_called()

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError):
            apply_actions(MagicMock(), [CommentAction("move")], "sha")
