"""Tests for diff position calculation — critical for correct GitHub comment placement."""

import pytest

from prsync_core.errors import MalformedDiffError
from prsync_core.patch import get_patch_line_content, parse_patch


def test_single_hunk():
    patch = """\
@@ -1,3 +1,4 @@
 line one
+line two added
 line three
 line four"""
    positions = parse_patch(patch)
    # @@ is position 0; " line one" = pos 1, "+line two added" = pos 2
    assert positions == {1: 1, 2: 2, 3: 3, 4: 4}


def test_removed_lines_before_context_are_never_keys():
    patch = "\n".join(
        ["@@ -17,9 +17,6 @@", "-gone one", "-gone two", "-gone three"]
        + [" context a", "+added b", " context c", "+added d", " context e", " context f"]
    )
    positions = parse_patch(patch)
    assert positions == {17: 4, 18: 5, 19: 6, 20: 7, 21: 8, 22: 9}


def test_position_is_cumulative_across_hunks():
    patch = """\
@@ -1,2 +1,3 @@
 context a
+added in hunk 1
 context b
@@ -10,2 +11,3 @@
 context c
+added in hunk 2
 context d"""
    positions = parse_patch(patch)
    assert positions[2] == 2
    # The second header itself occupies position 4.
    assert positions[11] == 5
    assert positions[12] == 6


def test_interleaved_removal_keeps_counting_positions():
    patch = """\
@@ -1,3 +1,2 @@
 context
-removed line
+added line"""
    # "-removed line" = pos 2 (no new file line), "+added line" = pos 3 -> file line 2
    assert parse_patch(patch) == {1: 1, 2: 3}


def test_removed_line_with_no_newline_marker_is_empty():
    patch = "@@ -1 +0,0 @@\n-only line\n\\ No newline at end of file"
    assert parse_patch(patch) == {}


def test_no_newline_marker_after_added_line_is_skipped():
    patch = "@@ -1 +1 @@\n-old\n\\ No newline at end of file\n+new\n\\ No newline at end of file"
    assert parse_patch(patch) == {1: 3}


def test_header_without_counts():
    assert parse_patch("@@ -3 +5 @@ def handler():\n+x = 1") == {5: 1}


def test_empty_and_missing_patch():
    assert parse_patch("") == {}
    assert parse_patch(None) == {}


def test_lines_before_first_hunk_are_ignored():
    patch = "+stray line\n@@ -1,1 +1,1 @@\n line"
    assert parse_patch(patch) == {1: 2}


def test_malformed_hunk_header_raises_with_line():
    patch = "@@ -1,3 +1,4 @@\n line\n@@ broken header @@\n+x"
    with pytest.raises(MalformedDiffError) as exc_info:
        parse_patch(patch)
    assert exc_info.value.line == "@@ broken header @@"
    assert "broken header" in str(exc_info.value)
    assert exc_info.value.patch == patch


class TestGetPatchLineContent:
    PATCH = "@@ -10,3 +10,3 @@\n first\n-old\n+new\n last"

    def test_returns_added_line(self):
        assert get_patch_line_content(self.PATCH, 11) == "new"

    def test_returns_context_line(self):
        assert get_patch_line_content(self.PATCH, 12) == "last"

    def test_missing_line_is_empty(self):
        assert get_patch_line_content(self.PATCH, 99) == ""


def test_form_feed_inside_line_is_not_a_line_break():
    patch = "@@ -1,2 +1,3 @@\n context\n+page\fbreak\n+after"
    assert parse_patch(patch) == {1: 1, 2: 2, 3: 3}


def test_unicode_separators_inside_line_do_not_shift_positions():
    patch = "@@ -1,1 +1,3 @@\n a b\n+c\x85d\v\n+e"
    assert parse_patch(patch) == {1: 1, 2: 2, 3: 3}
    assert get_patch_line_content(patch, 2) == "c\x85d\v"


def test_crlf_line_endings():
    patch = "@@ -1,1 +1,2 @@\r\n line1\r\n+line2\r\n"
    assert parse_patch(patch) == {1: 1, 2: 2}
    assert get_patch_line_content(patch, 2) == "line2"
