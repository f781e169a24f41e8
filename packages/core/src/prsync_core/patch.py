"""Unified diff parsing — maps new-file line numbers to review comment positions.

GitHub anchors review comments on a *position*: the zero-based index of a
line within the file's patch text, counting every line of it including
each ``@@`` hunk header. Position 0 is the first hunk header, so the first
line below it is position 1, and positions keep counting across hunks.
"""

from __future__ import annotations

import re

from prsync_core.errors import MalformedDiffError

_HUNK_HEADER_RE = re.compile(r"^@@\s-\d+(?:,\d+)?\s\+(\d+)(?:,\d+)?\s@@.*")
_LINE_BREAK_RE = re.compile(r"\r?\n")


def _split_lines(patch_text: str) -> list[str]:
    """Split on newlines only. Form feeds and other Unicode breaks stay inside a line."""
    lines = _LINE_BREAK_RE.split(patch_text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _new_start(header: str, patch_text: str) -> int:
    match = _HUNK_HEADER_RE.match(header)
    if match is None:
        raise MalformedDiffError(header, patch_text)
    return int(match.group(1))


def parse_patch(patch_text: str | None) -> dict[int, int]:
    """
    Map each visible new-file line of ``patch_text`` to its diff position.

    Added (``+``) and context (`` ``) lines are recorded. Removed lines
    (``-``) and the ``\\ No newline at end of file`` marker are counted as
    positions but never recorded and do not advance the file line.

    A missing patch (binary or oversized file) yields an empty map.
    Raises MalformedDiffError when an ``@`` line is not a valid hunk header.
    """
    positions: dict[int, int] = {}
    if not patch_text:
        return positions

    file_line = -1  # -1 until the first hunk header is seen
    for position, line in enumerate(_split_lines(patch_text)):
        if line.startswith("@"):
            file_line = _new_start(line, patch_text)
        elif line.startswith("-") or line.startswith("\\"):
            pass
        elif line.startswith("+") or line.startswith(" "):
            if file_line >= 0:
                positions[file_line] = position
                file_line += 1
    return positions


def get_patch_line_content(patch_text: str | None, target_line: int) -> str:
    """Return the source content of a specific new-file line number from a patch."""
    file_line = -1
    for line in _split_lines(patch_text or ""):
        if line.startswith("@"):
            file_line = _new_start(line, patch_text)
            continue
        if not (line.startswith("+") or line.startswith(" ")):
            continue
        if file_line == target_line:
            return line[1:]
        if file_line >= 0:
            file_line += 1
    return ""
